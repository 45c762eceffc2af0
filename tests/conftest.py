"""Shared pytest fixtures for auenc tests."""

from pathlib import Path

import pytest

# Cheap Argon2 parameters so tests run in milliseconds
FAST_KDF = {
    "kdf_time_cost": 1,
    "kdf_memory_cost": 1024,
    "kdf_parallelism": 1,
}

FAST_ENV = {
    "AUENC_KDF_TIME_COST": "1",
    "AUENC_KDF_MEMORY_COST": "1024",
    "AUENC_KDF_PARALLELISM": "1",
    "AUENC_KEY_LENGTH": "32",
    "AUENC_CIPHER_ALGORITHM": "aes-256-gcm",
    "AUENC_KDF_SALT_SIZE": "16",
    "AUENC_IV_SIZE": "12",
    "AUENC_MIN_PASSWORD_LENGTH": "8",
    "AUENC_VAULT_VERSION": "1",
    "AUENC_FILE_SUFFIX": ".auenc",
    "AUENC_TEMP_SUFFIX": ".tmp",
    "AUENC_TEXT_ENCODING": "utf-8",
}


@pytest.fixture
def vaults_dir(tmp_path: Path) -> Path:
    """Provide an empty vaults directory."""
    path = tmp_path / "vaults"
    path.mkdir()
    return path


@pytest.fixture
def fast_config(vaults_dir: Path):
    """VaultConfig with cheap KDF settings and a temporary vaults directory."""
    from auenc.vault import VaultConfig

    return VaultConfig(vaults_dir=vaults_dir, **FAST_KDF)


@pytest.fixture
def vault_manager(fast_config):
    """VaultManager bound to the temporary vaults directory."""
    from auenc.vault import VaultManager

    return VaultManager(fast_config)


@pytest.fixture
def sample_vault_data(fast_config):
    """Decrypted payload with two entries and a hash of 'correcthorse123'."""
    from auenc.vault import Entry, PasswordVerifier, VaultData

    return VaultData(
        version=1,
        password_hash=PasswordVerifier(fast_config).hash("correcthorse123"),
        entries=[
            Entry(url="example.com", username="alice", password="s3cret"),
            Entry(url="mail.example.org", username="bob", password="hunter2"),
        ],
    )


@pytest.fixture
def fast_env(monkeypatch, vaults_dir: Path) -> dict[str, str]:
    """Set every AUENC_* variable with cheap KDF settings."""
    env = dict(FAST_ENV, AUENC_VAULTS_DIR=str(vaults_dir))
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env
