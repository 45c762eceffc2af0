"""Vault configuration for the auenc secret store.

The configuration is an immutable parameter bundle. It is validated when it
is constructed, and ``from_env`` refuses to fill in anything the environment
does not provide.
"""

import codecs
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigurationError, ConfigurationMissingError

# Key sizes (bytes) for the supported AEAD ciphers
CIPHER_KEY_SIZES = {
    "aes-256-gcm": 32,
    "aes-192-gcm": 24,
    "aes-128-gcm": 16,
    "chacha20-poly1305": 32,
}

TAG_SIZE = 16  # 128-bit authentication tag

ENV_PREFIX = "AUENC_"

# Encodings that can represent every string a user may type
UNICODE_ENCODINGS = frozenset({
    "utf-8",
    "utf-16",
    "utf-16-le",
    "utf-16-be",
    "utf-32",
    "utf-32-le",
    "utf-32-be",
})


@dataclass(frozen=True)
class VaultConfig:
    """Configuration for vault encryption and storage."""

    # Key derivation (Argon2id)
    kdf_time_cost: int = 3
    kdf_memory_cost: int = 65536  # KiB
    kdf_parallelism: int = 1
    key_length: int = 32  # 256 bits for AES-256
    salt_size: int = 16

    # Authenticated encryption
    cipher_algorithm: str = "aes-256-gcm"
    nonce_size: int = 12  # 96 bits for GCM

    # Password policy
    min_password_length: int = 8

    # Container format
    format_version: int = 1

    # File system
    vaults_dir: Path = field(default_factory=lambda: Path("./vaults"))
    file_suffix: str = ".auenc"
    temp_suffix: str = ".tmp"
    text_encoding: str = "utf-8"

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce through object.__setattr__
        object.__setattr__(self, "vaults_dir", Path(self.vaults_dir))
        self.validate()

    def validate(self) -> None:
        """
        Check every value and raise on the first invalid one.

        Raises:
            ConfigurationError: If any value is out of range or inconsistent
        """
        for name in (
            "kdf_time_cost",
            "kdf_memory_cost",
            "kdf_parallelism",
            "key_length",
            "salt_size",
            "nonce_size",
            "min_password_length",
            "format_version",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        if self.kdf_memory_cost < 8 * self.kdf_parallelism:
            raise ConfigurationError(
                f"kdf_memory_cost must be at least 8 * kdf_parallelism "
                f"({8 * self.kdf_parallelism} KiB), got {self.kdf_memory_cost}"
            )

        if self.salt_size < 8:
            raise ConfigurationError(f"salt_size must be at least 8 bytes, got {self.salt_size}")

        expected_key = CIPHER_KEY_SIZES.get(self.cipher_algorithm)
        if expected_key is None:
            raise ConfigurationError(
                f"Unsupported cipher algorithm: {self.cipher_algorithm!r} "
                f"(supported: {', '.join(sorted(CIPHER_KEY_SIZES))})"
            )
        if self.key_length != expected_key:
            raise ConfigurationError(
                f"key_length must be {expected_key} bytes for {self.cipher_algorithm}, "
                f"got {self.key_length}"
            )

        if self.cipher_algorithm == "chacha20-poly1305":
            if self.nonce_size != 12:
                raise ConfigurationError(
                    f"nonce_size must be 12 bytes for chacha20-poly1305, got {self.nonce_size}"
                )
        elif not 8 <= self.nonce_size <= 128:
            raise ConfigurationError(
                f"nonce_size must be between 8 and 128 bytes for AES-GCM, got {self.nonce_size}"
            )

        if not self.file_suffix:
            raise ConfigurationError("file_suffix must not be empty")
        if not self.temp_suffix:
            raise ConfigurationError("temp_suffix must not be empty")
        if self.temp_suffix.endswith(self.file_suffix):
            raise ConfigurationError(
                f"temp_suffix {self.temp_suffix!r} must not end with file_suffix {self.file_suffix!r}"
            )

        try:
            codec_name = codecs.lookup(self.text_encoding).name
        except LookupError:
            raise ConfigurationError(f"Unknown text encoding: {self.text_encoding!r}") from None
        if codec_name not in UNICODE_ENCODINGS:
            raise ConfigurationError(
                f"text_encoding must be a Unicode encoding "
                f"({', '.join(sorted(UNICODE_ENCODINGS))}), got {self.text_encoding!r}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultConfig":
        """
        Load configuration from environment variables.

        Every variable is required; nothing falls back to a default.

        Environment variables:
            AUENC_KDF_TIME_COST: Argon2 iterations
            AUENC_KDF_MEMORY_COST: Argon2 memory in KiB
            AUENC_KDF_PARALLELISM: Argon2 lanes
            AUENC_KEY_LENGTH: Derived key length in bytes
            AUENC_CIPHER_ALGORITHM: AEAD cipher identifier (e.g. aes-256-gcm)
            AUENC_KDF_SALT_SIZE: KDF salt size in bytes
            AUENC_IV_SIZE: Nonce size in bytes
            AUENC_MIN_PASSWORD_LENGTH: Minimum master password length
            AUENC_VAULT_VERSION: Container format version
            AUENC_VAULTS_DIR: Directory holding vault files
            AUENC_FILE_SUFFIX: Vault filename suffix (e.g. .auenc)
            AUENC_TEMP_SUFFIX: Suffix for temporary files during save
            AUENC_TEXT_ENCODING: Encoding of the serialized payload

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Validated VaultConfig

        Raises:
            ConfigurationMissingError: If a variable is not set
            ConfigurationError: If a value fails to parse or validate
        """
        env = os.environ if environ is None else environ

        def require(name: str) -> str:
            key = ENV_PREFIX + name
            value = env.get(key)
            if value is None or not value.strip():
                raise ConfigurationMissingError(key)
            return value.strip()

        def require_int(name: str) -> int:
            raw = require(name)
            try:
                return int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_PREFIX + name} must be an integer, got {raw!r}"
                ) from None

        return cls(
            kdf_time_cost=require_int("KDF_TIME_COST"),
            kdf_memory_cost=require_int("KDF_MEMORY_COST"),
            kdf_parallelism=require_int("KDF_PARALLELISM"),
            key_length=require_int("KEY_LENGTH"),
            salt_size=require_int("KDF_SALT_SIZE"),
            cipher_algorithm=require("CIPHER_ALGORITHM").lower(),
            nonce_size=require_int("IV_SIZE"),
            min_password_length=require_int("MIN_PASSWORD_LENGTH"),
            format_version=require_int("VAULT_VERSION"),
            vaults_dir=Path(require("VAULTS_DIR")),
            file_suffix=require("FILE_SUFFIX"),
            temp_suffix=require("TEMP_SUFFIX"),
            text_encoding=require("TEXT_ENCODING"),
        )
