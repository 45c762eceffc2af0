"""Data models for the decrypted vault payload.

A VaultData object exists only between a successful decrypt and the next
save. It is serialized to JSON and encrypted; it is never written as is.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import InvalidInputError, MalformedContainerError

DEFAULT_ENTRY_TYPE = "password"

ENTRY_FIELDS = ("url", "username", "password")


def _entry_problem(data: dict[str, Any]) -> str:
    """Describe what is wrong with an entry dict, or return an empty string."""
    for name in ENTRY_FIELDS:
        if name not in data:
            return f"entry is missing field {name!r}"
        if not isinstance(data[name], str):
            return f"entry field {name!r} must be a string"
    if not isinstance(data.get("type", DEFAULT_ENTRY_TYPE), str):
        return "entry field 'type' must be a string"
    return ""


@dataclass
class Entry:
    """A single credential entry."""

    url: str
    username: str
    password: str
    type: str = DEFAULT_ENTRY_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "url": self.url,
            "username": self.username,
            "password": self.password,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """
        Create from dictionary.

        Raises:
            MalformedContainerError: If a field is missing or not a string
        """
        problem = _entry_problem(data)
        if problem:
            raise MalformedContainerError(f"Malformed vault: {problem}")
        return cls(
            url=data["url"],
            username=data["username"],
            password=data["password"],
            type=data.get("type", DEFAULT_ENTRY_TYPE),
        )

    def __repr__(self) -> str:
        return f"Entry(type={self.type!r}, url={self.url!r}, username={self.username!r}, password='***')"


@dataclass
class VaultData:
    """
    Decrypted vault payload.

    Attributes:
        version: Payload format version
        password_hash: Argon2id hash of the master password (own salt)
        entries: Credential entries
    """

    version: int
    password_hash: str
    entries: list[Entry] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def add_entry(self, entry: Union[Entry, dict[str, Any]]) -> Entry:
        """
        Append an entry.

        Args:
            entry: Entry or dict with url, username, password (and optional type)

        Returns:
            The appended Entry
        """
        if isinstance(entry, Entry):
            problem = _entry_problem(entry.to_dict())
        elif isinstance(entry, dict):
            problem = _entry_problem(entry)
        else:
            raise InvalidInputError(f"Expected Entry or dict, got {type(entry).__name__}")
        if problem:
            raise InvalidInputError(f"Invalid entry: {problem}")

        if isinstance(entry, dict):
            entry = Entry.from_dict(entry)
        self.entries.append(entry)
        return entry

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "passwordHash": self.password_hash,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def to_bytes(self, encoding: str = "utf-8") -> bytes:
        """
        Serialize to the plaintext that gets encrypted.

        Raises:
            InvalidInputError: If an entry holds text the encoding cannot represent
        """
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False).encode(encoding)
        except UnicodeEncodeError as e:
            raise InvalidInputError(f"Vault contents cannot be encoded as {encoding}: {e.reason}") from None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VaultData":
        """
        Create from dictionary.

        Raises:
            MalformedContainerError: If the version, password hash or entry list is malformed
        """
        version = data.get("version")
        if isinstance(version, bool) or not isinstance(version, int):
            raise MalformedContainerError("Malformed vault: version must be an integer")

        password_hash = data.get("passwordHash")
        if not isinstance(password_hash, str) or not password_hash:
            raise MalformedContainerError("Malformed vault: missing password hash")

        entries = data.get("entries", [])
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise MalformedContainerError("Malformed vault: entries must be a list of objects")

        return cls(
            version=version,
            password_hash=password_hash,
            entries=[Entry.from_dict(e) for e in entries],
        )

    @classmethod
    def from_bytes(cls, plaintext: bytes, encoding: str = "utf-8") -> "VaultData":
        """Deserialize decrypted plaintext."""
        try:
            data = json.loads(plaintext.decode(encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedContainerError(f"Malformed vault payload: {e}") from e
        if not isinstance(data, dict):
            raise MalformedContainerError("Malformed vault payload: expected a JSON object")
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"VaultData(version={self.version}, entries={self.entry_count})"
