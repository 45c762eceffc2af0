"""auenc - Local encrypted secret store."""

__version__ = "0.1.0"

from .vault import Entry, VaultConfig, VaultData, VaultManager

__all__ = [
    "__version__",
    "Entry",
    "VaultConfig",
    "VaultData",
    "VaultManager",
]
