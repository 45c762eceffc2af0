"""Crash-safe persistence of vault containers.

A save writes the whole container to a temporary file in the destination
directory, fsyncs it, and then atomically replaces the destination. Readers
see either the previous container or the new one, never a partial file.
"""

import contextlib
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..utils.logging import get_logger
from .config import VaultConfig
from .container import VaultContainer
from .exceptions import (
    InvalidInputError,
    MalformedContainerError,
    VaultIOError,
    VaultNotFoundError,
)

logger = get_logger(__name__)

_ILLEGAL_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def validate_vault_name(name: str) -> str:
    """
    Validate a vault name and return it trimmed.

    Raises:
        InvalidInputError: If the name is empty or contains path characters
    """
    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidInputError("Vault name cannot be empty")
    if _ILLEGAL_NAME_CHARS.search(trimmed):
        raise InvalidInputError(f"Invalid characters in vault name: {trimmed!r}")
    if trimmed in (".", ".."):
        raise InvalidInputError(f"Invalid vault name: {trimmed!r}")
    return trimmed


class VaultStore:
    """Reads and writes vault container files."""

    def __init__(self, config: VaultConfig):
        self.config = config

    def path_for(self, name: str, directory: Optional[Path] = None) -> Path:
        """
        Get the file path for a vault name.

        Args:
            name: Vault name without suffix
            directory: Vaults directory (default: config.vaults_dir)

        Returns:
            ``directory / (name + file_suffix)``
        """
        base = Path(directory) if directory is not None else self.config.vaults_dir
        return base / f"{validate_vault_name(name)}{self.config.file_suffix}"

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if a vault file exists."""
        return Path(path).is_file()

    def list_vaults(self, directory: Optional[Path] = None) -> list[Path]:
        """
        List vault files in a directory.

        Raises:
            VaultNotFoundError: If the directory does not exist
        """
        base = Path(directory) if directory is not None else self.config.vaults_dir
        if not base.is_dir():
            raise VaultNotFoundError(str(base))
        return sorted(
            p for p in base.iterdir()
            if p.is_file() and p.name.endswith(self.config.file_suffix)
        )

    def save(self, container: VaultContainer, path: Union[str, Path]) -> None:
        """
        Atomically write a container to path.

        On any failure the temporary file is removed and the previous
        container at path is left as it was.

        Raises:
            VaultIOError: If writing or replacing fails
        """
        path = Path(path)
        content = container.to_json()

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=self.config.temp_suffix,
            )
        except OSError as e:
            raise VaultIOError(f"Failed to create temporary file for {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding=self.config.text_encoding) as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException as e:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            if isinstance(e, OSError):
                raise VaultIOError(f"Failed to save vault {path}: {e}") from e
            raise

        self._fsync_directory(path.parent)
        logger.debug("Saved vault container to %s (%d bytes)", path, len(content))

    def _fsync_directory(self, directory: Path) -> None:
        """Flush the directory entry so the rename survives a power loss."""
        if os.name != "posix":
            return
        try:
            dir_fd = os.open(directory, os.O_RDONLY)
        except OSError as e:
            logger.warning("Could not open %s to sync directory entry: %s", directory, e)
            return
        try:
            os.fsync(dir_fd)
        except OSError as e:
            logger.warning("Could not sync directory entry for %s: %s", directory, e)
        finally:
            os.close(dir_fd)

    def load(self, path: Union[str, Path]) -> VaultContainer:
        """
        Load a container from disk.

        Raises:
            VaultNotFoundError: If the file does not exist
            MalformedContainerError: If the content is not a vault container
            VaultIOError: If the file cannot be read
        """
        path = Path(path)
        if not path.is_file():
            raise VaultNotFoundError(str(path))

        try:
            content = path.read_text(encoding=self.config.text_encoding)
        except UnicodeDecodeError as e:
            raise MalformedContainerError(f"Vault file is not valid text: {path}") from e
        except OSError as e:
            raise VaultIOError(f"Failed to read vault {path}: {e}") from e

        container = VaultContainer.from_json(content)
        logger.debug("Loaded vault container from %s (version %d)", path, container.version)
        return container
