"""Core cryptographic primitives for vault encryption.

Uses:
- Argon2id (argon2-cffi) for password-based key derivation
- AES-GCM / ChaCha20-Poly1305 (cryptography) for authenticated encryption
- argon2.PasswordHasher for the password verification hash embedded in the payload

Security Note:
    Never log keys, passwords, plaintext or ciphertext.
"""

import os
from typing import Union

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .config import CIPHER_KEY_SIZES, TAG_SIZE, VaultConfig
from .exceptions import (
    DecryptionError,
    EncryptionError,
    InvalidInputError,
    InvalidParameterError,
    MalformedContainerError,
)

BytesLike = Union[bytes, bytearray, memoryview]


def encode_password(password: Union[str, bytes], encoding: str) -> bytes:
    """
    Encode a password for the KDF or the password hasher.

    Raises:
        InvalidInputError: If the password cannot be encoded (e.g. a lone surrogate)
    """
    if not isinstance(password, str):
        return bytes(password)
    try:
        return password.encode(encoding)
    except UnicodeEncodeError:
        raise InvalidInputError(f"Password cannot be encoded as {encoding}") from None


_CIPHERS = {
    "aes-256-gcm": AESGCM,
    "aes-192-gcm": AESGCM,
    "aes-128-gcm": AESGCM,
    "chacha20-poly1305": ChaCha20Poly1305,
}


class SecretBuffer:
    """
    Mutable holder for key material that is zeroed when the block exits.

    Usage:
        with SecretBuffer(kdf.derive(password, salt)) as key:
            codec.encrypt(plaintext, key.view, nonce)

    Python may still hold copies (the immutable bytes a library returned,
    internal cipher state); clearing this buffer is best effort.
    """

    __slots__ = ("_data", "_cleared")

    def __init__(self, data: BytesLike):
        self._data = bytearray(data)
        self._cleared = False
        if isinstance(data, bytearray):
            data[:] = bytes(len(data))

    @property
    def view(self) -> bytearray:
        """The live buffer. Do not keep references past the ``with`` block."""
        if self._cleared:
            raise ValueError("SecretBuffer has been cleared")
        return self._data

    @property
    def cleared(self) -> bool:
        return self._cleared

    def clear(self) -> None:
        """Overwrite the buffer with zeros."""
        self._data[:] = bytes(len(self._data))
        self._cleared = True

    def __len__(self) -> int:
        return len(self._data)

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def __repr__(self) -> str:
        return f"<SecretBuffer len={len(self._data)} cleared={self._cleared}>"


class KeyDerivation:
    """Derives encryption keys from the master password using Argon2id."""

    def __init__(self, config: VaultConfig):
        self.config = config

    def generate_salt(self) -> bytes:
        """Generate a cryptographically secure random salt."""
        return os.urandom(self.config.salt_size)

    def derive(self, password: Union[str, bytes], salt: bytes) -> bytes:
        """
        Derive a key from password and salt.

        Identical inputs always give the identical key.

        Args:
            password: Master password
            salt: Random salt stored with the encrypted data

        Returns:
            ``key_length`` bytes of key material

        Raises:
            InvalidParameterError: If the salt is not exactly ``salt_size`` bytes
        """
        if len(salt) != self.config.salt_size:
            raise InvalidParameterError(
                f"Salt must be {self.config.salt_size} bytes, got {len(salt)}"
            )

        secret = encode_password(password, self.config.text_encoding)
        key = hash_secret_raw(
            secret=secret,
            salt=bytes(salt),
            time_cost=self.config.kdf_time_cost,
            memory_cost=self.config.kdf_memory_cost,
            parallelism=self.config.kdf_parallelism,
            hash_len=self.config.key_length,
            type=Type.ID,
        )
        if len(key) != self.config.key_length:
            raise InvalidParameterError(
                f"Derived key must be {self.config.key_length} bytes, got {len(key)}"
            )
        return key


class AEADCodec:
    """
    Authenticated encryption of the serialized vault payload.

    The tag is returned separately from the ciphertext so the container can
    store it in its own field.
    """

    def __init__(self, config: VaultConfig):
        self.config = config
        self.key_size = CIPHER_KEY_SIZES[config.cipher_algorithm]
        self.nonce_size = config.nonce_size
        self._cipher_cls = _CIPHERS[config.cipher_algorithm]

    def generate_nonce(self) -> bytes:
        """Generate a fresh random nonce. Never reuse one under the same key."""
        return os.urandom(self.nonce_size)

    def _check_params(self, key: BytesLike, nonce: bytes) -> None:
        if len(key) != self.key_size:
            raise InvalidParameterError(f"Key must be {self.key_size} bytes, got {len(key)}")
        if len(nonce) != self.nonce_size:
            raise InvalidParameterError(
                f"Nonce must be {self.nonce_size} bytes, got {len(nonce)}"
            )

    def encrypt(self, plaintext: bytes, key: BytesLike, nonce: bytes) -> tuple[bytes, bytes]:
        """
        Encrypt plaintext.

        Args:
            plaintext: Serialized payload
            key: Derived key (``key_size`` bytes)
            nonce: Single-use nonce (``nonce_size`` bytes)

        Returns:
            Tuple of (ciphertext, auth_tag)
        """
        self._check_params(key, nonce)
        try:
            sealed = self._cipher_cls(key).encrypt(nonce, plaintext, None)
        except (ValueError, OverflowError) as e:
            raise EncryptionError(f"{self.config.cipher_algorithm} encryption failed: {e}") from e
        # AEAD output is ciphertext || tag
        return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

    def decrypt(self, ciphertext: bytes, key: BytesLike, nonce: bytes, auth_tag: bytes) -> bytes:
        """
        Verify the tag and decrypt.

        Args:
            ciphertext: Encrypted payload
            key: Derived key
            nonce: Nonce used for encryption
            auth_tag: Authentication tag

        Returns:
            Plaintext, only after the tag validates

        Raises:
            DecryptionError: Wrong key or tampered data (one generic error)
        """
        self._check_params(key, nonce)
        if len(auth_tag) != TAG_SIZE:
            raise InvalidParameterError(f"Auth tag must be {TAG_SIZE} bytes, got {len(auth_tag)}")
        try:
            return self._cipher_cls(key).decrypt(nonce, ciphertext + auth_tag, None)
        except InvalidTag:
            raise DecryptionError() from None


class PasswordVerifier:
    """
    Secondary check of the master password.

    A successful AEAD decrypt already proves the password was right; this
    Argon2id hash, stored inside the payload with its own salt, gives an
    explicit wrong-password signal separate from file corruption.
    """

    def __init__(self, config: VaultConfig):
        self.config = config
        self._hasher = PasswordHasher(
            time_cost=config.kdf_time_cost,
            memory_cost=config.kdf_memory_cost,
            parallelism=config.kdf_parallelism,
            hash_len=config.key_length,
            salt_len=config.salt_size,
            encoding=config.text_encoding,
            type=Type.ID,
        )

    def hash(self, password: str) -> str:
        """Hash password with a fresh salt (PHC string format)."""
        return self._hasher.hash(encode_password(password, self.config.text_encoding))

    def verify(self, password_hash: str, password: str) -> bool:
        """
        Check password against a stored hash in constant time.

        Parameters are read from the hash itself, so hashes made under other
        cost settings still verify.

        Raises:
            MalformedContainerError: If the stored hash is not a valid Argon2 hash
        """
        secret = encode_password(password, self.config.text_encoding)
        try:
            return self._hasher.verify(password_hash, secret)
        except VerificationError:
            return False
        except InvalidHashError as e:
            raise MalformedContainerError(f"Malformed vault: invalid password hash ({e})") from e
