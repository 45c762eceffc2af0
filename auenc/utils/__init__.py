"""Utility modules for auenc."""

from .logging import (
    RedactingFilter,
    console,
    get_logger,
    setup_logging,
)


__all__ = [
    "setup_logging",
    "get_logger",
    "console",
    "RedactingFilter",
]
