"""On-disk vault container format.

One JSON object per vault file:

    {
      "version": 1,
      "kdfSalt": "<base64>",
      "iv": "<base64>",
      "authTag": "<base64>",
      "cipherText": "<base64>"
    }

Only the salt, nonce and tag are stored in the clear; the entries and the
password hash live inside ``cipherText``.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

from .exceptions import MalformedContainerError

# JSON field names
VERSION_FIELD = "version"
SALT_FIELD = "kdfSalt"
NONCE_FIELD = "iv"
TAG_FIELD = "authTag"
CIPHERTEXT_FIELD = "cipherText"

CONTAINER_FIELDS = (VERSION_FIELD, SALT_FIELD, NONCE_FIELD, TAG_FIELD, CIPHERTEXT_FIELD)


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(data: dict[str, Any], name: str) -> bytes:
    value = data[name]
    if not isinstance(value, str):
        raise MalformedContainerError(f"Malformed container: {name} must be a base64 string")
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedContainerError(f"Malformed container: {name} is not valid base64 ({e})") from e


@dataclass
class VaultContainer:
    """The persisted form of a vault."""

    version: int
    salt: bytes
    nonce: bytes
    auth_tag: bytes
    cipher_text: bytes

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            VERSION_FIELD: self.version,
            SALT_FIELD: _b64encode(self.salt),
            NONCE_FIELD: _b64encode(self.nonce),
            TAG_FIELD: _b64encode(self.auth_tag),
            CIPHERTEXT_FIELD: _b64encode(self.cipher_text),
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Any) -> "VaultContainer":
        """
        Create from dictionary.

        Every field is checked before any cryptographic work happens.

        Raises:
            MalformedContainerError: If a field is missing or malformed
        """
        if not isinstance(data, dict):
            raise MalformedContainerError("Malformed container: expected a JSON object")

        missing = [name for name in CONTAINER_FIELDS if name not in data]
        if missing:
            raise MalformedContainerError(
                f"Malformed container: missing field(s) {', '.join(missing)}"
            )

        version = data[VERSION_FIELD]
        if isinstance(version, bool) or not isinstance(version, int):
            raise MalformedContainerError("Malformed container: version must be an integer")

        return cls(
            version=version,
            salt=_b64decode(data, SALT_FIELD),
            nonce=_b64decode(data, NONCE_FIELD),
            auth_tag=_b64decode(data, TAG_FIELD),
            cipher_text=_b64decode(data, CIPHERTEXT_FIELD),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "VaultContainer":
        """Deserialize from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise MalformedContainerError(f"Invalid vault container: {e}") from e
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (
            f"VaultContainer(version={self.version}, salt={len(self.salt)}B, "
            f"nonce={len(self.nonce)}B, cipher_text={len(self.cipher_text)}B)"
        )
