"""Logging setup for auenc.

All records go through the ``auenc`` package logger. Console output uses
Rich on stderr so command output on stdout stays parseable; an optional
file handler captures DEBUG for troubleshooting.

Vault modules log paths, counts and versions only. As a backstop, every
handler installed here carries RedactingFilter, which blanks anything that
looks like an Argon2 PHC hash.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(message)s"

ROOT_LOGGER = "auenc"

_PHC_HASH = re.compile(r"\$argon2(?:id|i|d)\$[^\s'\"]+")
REDACTED = "[redacted]"


class RedactingFilter(logging.Filter):
    """Replace Argon2 hashes in log messages with a placeholder."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if _PHC_HASH.search(message):
            record.msg = _PHC_HASH.sub(REDACTED, message)
            record.args = None
        return True


def _level_from_name(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    rich_output: bool = True,
) -> logging.Logger:
    """
    Configure the auenc package logger.

    Calling it again replaces the previously installed handlers.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives DEBUG and above
        rich_output: Use a RichHandler instead of a plain stream handler

    Returns:
        The ``auenc`` logger

    Raises:
        ValueError: If the level name is unknown
    """
    log_level = _level_from_name(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    if rich_output:
        handler: logging.Handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(log_level)
    handler.addFilter(RedactingFilter())
    logger.addHandler(handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(RedactingFilter())
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file else log_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger, e.g. ``get_logger(__name__)`` in auenc.vault.store."""
    return logging.getLogger(name)
