"""Vault manager for high-level vault operations.

The four core operations are plain functions taking an explicit
configuration:

    container = create_vault("personal", password, config)
    vault_data = open_vault(container, password, config)
    add_entry(vault_data, Entry(url="example.com", username="a", password="b"))
    save_vault(vault_data, password, path, config)

VaultManager binds a configuration and a store to a vaults directory and
hands out VaultSession objects for the CLI.
"""

from pathlib import Path
from typing import Any, Optional, Union

from ..utils.logging import get_logger
from .config import TAG_SIZE, VaultConfig
from .container import VaultContainer
from .crypto import AEADCodec, KeyDerivation, PasswordVerifier, SecretBuffer
from .exceptions import (
    InvalidInputError,
    MalformedContainerError,
    PasswordVerificationError,
    VaultAlreadyExistsError,
)
from .models import Entry, VaultData
from .session import SessionState, VaultSession
from .store import VaultStore, validate_vault_name

logger = get_logger(__name__)


def validate_password(password: str, config: VaultConfig) -> None:
    """
    Enforce the master password policy.

    Raises:
        InvalidInputError: If the password is shorter than the configured minimum
    """
    if not isinstance(password, str) or len(password) < config.min_password_length:
        raise InvalidInputError(
            f"Password must be at least {config.min_password_length} characters"
        )


def new_vault_data(password: str, config: VaultConfig) -> VaultData:
    """Build an empty payload with the embedded password hash."""
    return VaultData(
        version=config.format_version,
        password_hash=PasswordVerifier(config).hash(password),
        entries=[],
    )


def _check_container(container: VaultContainer, config: VaultConfig) -> None:
    """Reject containers that do not match the configured format before deriving keys."""
    if container.version != config.format_version:
        raise MalformedContainerError(
            f"Unsupported vault version {container.version} "
            f"(expected {config.format_version})"
        )
    if len(container.salt) != config.salt_size:
        raise MalformedContainerError(
            f"Malformed container: salt must be {config.salt_size} bytes, "
            f"got {len(container.salt)}"
        )
    if len(container.nonce) != config.nonce_size:
        raise MalformedContainerError(
            f"Malformed container: iv must be {config.nonce_size} bytes, "
            f"got {len(container.nonce)}"
        )
    if len(container.auth_tag) != TAG_SIZE:
        raise MalformedContainerError(
            f"Malformed container: authTag must be {TAG_SIZE} bytes, "
            f"got {len(container.auth_tag)}"
        )


def encrypt_vault(vault_data: VaultData, password: str, config: VaultConfig) -> VaultContainer:
    """
    Encrypt a payload into a new container.

    Every call draws a fresh salt, a fresh nonce and therefore a fresh key.

    Args:
        vault_data: Decrypted payload
        password: Master password
        config: Vault configuration

    Returns:
        VaultContainer ready to be saved
    """
    kdf = KeyDerivation(config)
    codec = AEADCodec(config)

    salt = kdf.generate_salt()
    nonce = codec.generate_nonce()
    plaintext = vault_data.to_bytes(config.text_encoding)

    with SecretBuffer(kdf.derive(password, salt)) as key:
        cipher_text, auth_tag = codec.encrypt(plaintext, key.view, nonce)

    return VaultContainer(
        version=config.format_version,
        salt=salt,
        nonce=nonce,
        auth_tag=auth_tag,
        cipher_text=cipher_text,
    )


def decrypt_vault(container: VaultContainer, password: str, config: VaultConfig) -> VaultData:
    """
    Decrypt a container and verify the master password.

    Args:
        container: Loaded container
        password: Master password
        config: Vault configuration

    Returns:
        Decrypted VaultData

    Raises:
        MalformedContainerError: Container or payload structure is invalid
        DecryptionError: Wrong password or tampered data
        PasswordVerificationError: Embedded hash rejected the password
    """
    _check_container(container, config)

    kdf = KeyDerivation(config)
    codec = AEADCodec(config)

    with SecretBuffer(kdf.derive(password, container.salt)) as key:
        plaintext = codec.decrypt(container.cipher_text, key.view, container.nonce, container.auth_tag)

    vault_data = VaultData.from_bytes(plaintext, config.text_encoding)

    # The cipher already authenticated the key, so a mismatch here is a bug
    # in whatever wrote the vault, not a wrong password.
    if not PasswordVerifier(config).verify(vault_data.password_hash, password):
        logger.error(
            "Password hash rejected a password the cipher accepted; "
            "the vault was written inconsistently"
        )
        raise PasswordVerificationError()

    return vault_data


def create_vault(name: str, password: str, config: VaultConfig) -> VaultContainer:
    """
    Create a new, empty vault container.

    Args:
        name: Vault name (validated, not stored)
        password: Master password
        config: Vault configuration

    Returns:
        Encrypted VaultContainer

    Raises:
        InvalidInputError: Illegal name or password shorter than the policy minimum
    """
    name = validate_vault_name(name)
    validate_password(password, config)

    container = encrypt_vault(new_vault_data(password, config), password, config)
    logger.info("Created vault %r", name)
    return container


def open_vault(container: VaultContainer, password: str, config: VaultConfig) -> VaultData:
    """
    Open a container: decrypt it and check the embedded password hash.

    Either both steps succeed or an exception is raised; no partial result
    is ever returned.
    """
    vault_data = decrypt_vault(container, password, config)
    logger.debug("Opened vault with %d entries", vault_data.entry_count)
    return vault_data


def add_entry(vault_data: VaultData, entry: Union[Entry, dict[str, Any]]) -> VaultData:
    """
    Append an entry to the payload.

    Nothing is written; the caller must save afterwards.
    """
    vault_data.add_entry(entry)
    return vault_data


def save_vault(
    vault_data: VaultData,
    password: str,
    path: Union[str, Path],
    config: VaultConfig,
    store: Optional[VaultStore] = None,
) -> None:
    """
    Re-encrypt the payload with a fresh salt, nonce and key and write it.

    The password is checked against the embedded hash first, so the saved
    container can always be opened with the password its hash accepts.

    Raises:
        PasswordVerificationError: Password does not match the vault's hash
        VaultIOError: Writing failed (the previous file is left intact)
    """
    if not PasswordVerifier(config).verify(vault_data.password_hash, password):
        raise PasswordVerificationError()

    store = store or VaultStore(config)
    container = encrypt_vault(vault_data, password, config)
    store.save(container, path)
    logger.info("Saved vault %s (%d entries)", path, vault_data.entry_count)


class VaultManager:
    """
    Manages the vaults in one directory.

    Usage:
        vm = VaultManager(config)

        session = vm.create("personal", password)
        session.add_entry(Entry(url="example.com", username="a", password="b"))
        session.save(password)

        with vm.open("personal", password) as session:
            for entry in session.entries:
                ...
    """

    def __init__(self, config: Optional[VaultConfig] = None, store: Optional[VaultStore] = None):
        """
        Initialize vault manager.

        Args:
            config: Vault configuration (validated defaults if not provided)
            store: Container store (built from config if not provided)
        """
        self.config = config or VaultConfig()
        self.store = store or VaultStore(self.config)

    @property
    def vaults_dir(self) -> Path:
        return self.config.vaults_dir

    def ensure_vaults_dir(self) -> Path:
        """Create the vaults directory if it doesn't exist."""
        self.vaults_dir.mkdir(parents=True, exist_ok=True)
        return self.vaults_dir

    def resolve(self, target: Union[str, Path]) -> Path:
        """Resolve a vault name (str) or explicit file path (Path)."""
        if isinstance(target, Path):
            return target
        return self.store.path_for(target)

    def list_vaults(self) -> list[Path]:
        """List vault files in the vaults directory."""
        return self.store.list_vaults()

    def create(self, name: str, password: str) -> VaultSession:
        """
        Create and save a new empty vault.

        Returns:
            Open session on the fresh vault

        Raises:
            InvalidInputError: Illegal name or weak password
            VaultAlreadyExistsError: A vault with this name exists
        """
        path = self.store.path_for(name)
        validate_password(password, self.config)
        if self.store.exists(path):
            raise VaultAlreadyExistsError(str(path))

        self.ensure_vaults_dir()
        vault_data = new_vault_data(password, self.config)
        self.store.save(encrypt_vault(vault_data, password, self.config), path)
        logger.info("Created vault %s", path)

        return VaultSession(path=path, manager=self, data=vault_data, state=SessionState.OPEN)

    def open(self, target: Union[str, Path], password: str) -> VaultSession:
        """
        Load, decrypt and verify a vault.

        Raises:
            VaultNotFoundError: No such vault file
            MalformedContainerError: File is not a valid container
            DecryptionError: Wrong password or corrupted file
            PasswordVerificationError: Embedded hash rejected the password
        """
        path = self.resolve(target)
        container = self.store.load(path)
        vault_data = open_vault(container, password, self.config)
        logger.info("Opened vault %s", path)
        return VaultSession(path=path, manager=self, data=vault_data, state=SessionState.OPEN)

    def save(self, vault_data: VaultData, password: str, target: Union[str, Path]) -> None:
        """Persist a payload to a vault name or path."""
        save_vault(vault_data, password, self.resolve(target), self.config, self.store)
