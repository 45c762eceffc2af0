"""Session state for an open vault.

A session goes CLOSED -> OPEN on create or open, OPEN -> MODIFIED on entry
edits, and back to CLOSED on save or close. There is no partially opened
state: a session only exists once decryption and password verification have
both succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from .exceptions import VaultLockedError
from .models import Entry, VaultData

if TYPE_CHECKING:
    from .vault_manager import VaultManager


class SessionState(Enum):
    """Lifecycle states of a vault session."""

    CLOSED = "closed"
    OPEN = "open"
    MODIFIED = "modified"


@dataclass
class VaultSession:
    """An open vault with its decrypted payload."""

    path: Path
    manager: "VaultManager"
    data: Optional[VaultData] = None
    state: SessionState = SessionState.CLOSED
    opened_at: datetime = field(default_factory=datetime.now)

    @property
    def is_open(self) -> bool:
        return self.state is not SessionState.CLOSED

    @property
    def is_modified(self) -> bool:
        return self.state is SessionState.MODIFIED

    def require_data(self) -> VaultData:
        """
        Get the payload or raise if the session is closed.

        Raises:
            VaultLockedError: If the session is closed
        """
        if self.state is SessionState.CLOSED or self.data is None:
            raise VaultLockedError(f"Vault is not open: {self.path}")
        return self.data

    @property
    def entries(self) -> list[Entry]:
        return self.require_data().entries

    def add_entry(self, entry: Union[Entry, dict[str, Any]]) -> Entry:
        """Add an entry. The vault is not written until save()."""
        added = self.require_data().add_entry(entry)
        self.state = SessionState.MODIFIED
        return added

    def save(self, password: str) -> None:
        """Re-encrypt and write the vault, then close the session."""
        self.manager.save(self.require_data(), password, self.path)
        self.close()

    def close(self) -> None:
        """Discard the decrypted payload. Unsaved changes are lost."""
        self.data = None
        self.state = SessionState.CLOSED

    def __enter__(self) -> "VaultSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"VaultSession(path={str(self.path)!r}, state={self.state.value})"
