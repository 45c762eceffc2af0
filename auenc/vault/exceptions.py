"""Vault exceptions for the auenc secret store."""


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class ConfigurationError(VaultError):
    """Raised when configuration values are invalid."""

    def __init__(self, message: str = "Invalid vault configuration."):
        super().__init__(message)


class ConfigurationMissingError(ConfigurationError):
    """Raised when a required configuration value is absent."""

    def __init__(self, name: str = ""):
        message = f"Missing configuration value: {name}" if name else "Missing configuration."
        super().__init__(message)
        self.name = name


class InvalidInputError(VaultError):
    """Raised when caller input violates policy (password length, vault name)."""

    def __init__(self, message: str = "Invalid input."):
        super().__init__(message)


class VaultAlreadyExistsError(InvalidInputError):
    """Raised when creating a vault over an existing file."""

    def __init__(self, path: str = ""):
        message = f"Vault already exists: {path}" if path else "Vault already exists."
        super().__init__(message)


class InvalidParameterError(VaultError):
    """Raised when a primitive receives a salt, key or nonce of the wrong size."""

    def __init__(self, message: str = "Invalid cryptographic parameter."):
        super().__init__(message)


class MalformedContainerError(VaultError):
    """Raised when a vault container is incomplete or cannot be parsed."""

    def __init__(self, message: str = "Malformed vault container."):
        super().__init__(message)


class DecryptionError(VaultError):
    """Raised when decryption fails.

    Wrong passwords and tampered data produce the same error.
    """

    def __init__(self, message: str = "Decryption failed - wrong password or corrupted file"):
        super().__init__(message)


class EncryptionError(VaultError):
    """Raised when encryption fails."""

    def __init__(self, message: str = "Failed to encrypt vault."):
        super().__init__(message)


class PasswordVerificationError(VaultError):
    """Raised when the embedded password hash rejects a password the cipher accepted."""

    def __init__(self, message: str = "Password verification failed - wrong master password"):
        super().__init__(message)


class VaultNotFoundError(VaultError):
    """Raised when a vault file does not exist."""

    def __init__(self, path: str = ""):
        message = f"Vault not found: {path}" if path else "Vault not found."
        super().__init__(message)


class VaultIOError(VaultError):
    """Raised when a vault file cannot be read or written."""

    def __init__(self, message: str = "Vault I/O failed."):
        super().__init__(message)


class VaultLockedError(VaultError):
    """Raised when mutating a session that is not open."""

    def __init__(self, message: str = "Vault is locked. Open it with the master password first."):
        super().__init__(message)
