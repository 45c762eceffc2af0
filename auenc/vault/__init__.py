"""Encrypted vault engine for auenc.

Argon2id key derivation, AES-GCM authenticated encryption and crash-safe
storage of a single-file credential vault.

Usage:
    from auenc.vault import VaultConfig, VaultManager, Entry

    vm = VaultManager(VaultConfig.from_env())
    session = vm.create("personal", password)
    session.add_entry(Entry(url="example.com", username="a", password="b"))
    session.save(password)

    with vm.open("personal", password) as session:
        print(session.entries)
"""

# Exceptions
from .exceptions import (
    ConfigurationError,
    ConfigurationMissingError,
    DecryptionError,
    EncryptionError,
    InvalidInputError,
    InvalidParameterError,
    MalformedContainerError,
    PasswordVerificationError,
    VaultAlreadyExistsError,
    VaultError,
    VaultIOError,
    VaultLockedError,
    VaultNotFoundError,
)

# Configuration
from .config import VaultConfig

# Primitives
from .crypto import (
    AEADCodec,
    KeyDerivation,
    PasswordVerifier,
    SecretBuffer,
)

# Data and format
from .container import VaultContainer
from .models import Entry, VaultData

# Persistence
from .store import VaultStore, validate_vault_name

# Session management
from .session import SessionState, VaultSession

# Vault operations
from .vault_manager import (
    VaultManager,
    add_entry,
    create_vault,
    decrypt_vault,
    encrypt_vault,
    open_vault,
    save_vault,
    validate_password,
)

__all__ = [
    # Exceptions
    "VaultError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "InvalidInputError",
    "VaultAlreadyExistsError",
    "InvalidParameterError",
    "MalformedContainerError",
    "DecryptionError",
    "EncryptionError",
    "PasswordVerificationError",
    "VaultNotFoundError",
    "VaultIOError",
    "VaultLockedError",
    # Configuration
    "VaultConfig",
    # Primitives
    "KeyDerivation",
    "AEADCodec",
    "PasswordVerifier",
    "SecretBuffer",
    # Data and format
    "VaultContainer",
    "VaultData",
    "Entry",
    # Persistence
    "VaultStore",
    "validate_vault_name",
    # Session
    "SessionState",
    "VaultSession",
    # Vault manager
    "VaultManager",
    "create_vault",
    "open_vault",
    "add_entry",
    "save_vault",
    "encrypt_vault",
    "decrypt_vault",
    "validate_password",
]
