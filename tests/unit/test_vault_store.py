"""Unit tests for crash-safe vault persistence."""

import json
import os
from pathlib import Path

import pytest


@pytest.fixture
def store(fast_config):
    from auenc.vault import VaultStore

    return VaultStore(fast_config)


@pytest.fixture
def container():
    from auenc.vault import VaultContainer

    return VaultContainer(
        version=1,
        salt=b"s" * 16,
        nonce=b"n" * 12,
        auth_tag=b"t" * 16,
        cipher_text=b"first version",
    )


def _leftovers(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name.endswith(".tmp"))


class TestVaultStoreSaveLoad:
    """Tests for saving and loading containers."""

    def test_save_and_load(self, store, container, vaults_dir):
        """Test a saved container loads back unchanged."""
        path = vaults_dir / "personal.auenc"
        store.save(container, path)

        assert path.exists()
        assert store.load(path) == container
        assert _leftovers(vaults_dir) == []

    def test_saved_file_is_json(self, store, container, vaults_dir):
        """Test the file holds the five container fields."""
        path = vaults_dir / "personal.auenc"
        store.save(container, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"version", "kdfSalt", "iv", "authTag", "cipherText"}

    def test_save_overwrites(self, store, container, vaults_dir):
        """Test saving replaces the whole file."""
        import dataclasses

        path = vaults_dir / "personal.auenc"
        store.save(container, path)
        store.save(dataclasses.replace(container, cipher_text=b"second"), path)

        assert store.load(path).cipher_text == b"second"

    def test_load_missing(self, store, vaults_dir):
        """Test loading a missing file raises VaultNotFoundError."""
        from auenc.vault import VaultNotFoundError

        with pytest.raises(VaultNotFoundError):
            store.load(vaults_dir / "missing.auenc")

    @pytest.mark.parametrize(
        "content",
        [
            b"",
            b"{not json",
            b'{"version": 1}',
            b"\xff\xfe\x00garbage",
        ],
    )
    def test_load_malformed(self, store, vaults_dir, content):
        """Test unparseable files raise MalformedContainerError."""
        from auenc.vault import MalformedContainerError

        path = vaults_dir / "broken.auenc"
        path.write_bytes(content)

        with pytest.raises(MalformedContainerError):
            store.load(path)

    def test_save_missing_directory(self, store, container, tmp_path):
        """Test saving into a missing directory raises VaultIOError."""
        from auenc.vault import VaultIOError

        with pytest.raises(VaultIOError):
            store.save(container, tmp_path / "nope" / "personal.auenc")


class TestVaultStoreAtomicity:
    """Tests that an interrupted save leaves the previous file intact."""

    def test_failed_replace_keeps_previous(self, store, container, vaults_dir, monkeypatch):
        """Test a crash before the replace step leaves the old container readable."""
        import dataclasses

        from auenc.vault import VaultIOError

        path = vaults_dir / "personal.auenc"
        store.save(container, path)
        before = path.read_bytes()

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail_replace)

        with pytest.raises(VaultIOError, match="disk full"):
            store.save(dataclasses.replace(container, cipher_text=b"second"), path)

        assert path.read_bytes() == before
        assert store.load(path) == container
        assert _leftovers(vaults_dir) == []

    def test_failed_write_keeps_previous(self, store, container, vaults_dir, monkeypatch):
        """Test a failure while flushing the temp file leaves the old container."""
        import dataclasses

        from auenc.vault import VaultIOError

        path = vaults_dir / "personal.auenc"
        store.save(container, path)

        def fail_fsync(fd):
            raise OSError("I/O error")

        monkeypatch.setattr(os, "fsync", fail_fsync)

        with pytest.raises(VaultIOError):
            store.save(dataclasses.replace(container, cipher_text=b"second"), path)

        monkeypatch.undo()
        assert store.load(path) == container
        assert _leftovers(vaults_dir) == []

    def test_interrupt_cleans_up_and_propagates(self, store, container, vaults_dir, monkeypatch):
        """Test a KeyboardInterrupt mid-save removes the temp file and is re-raised."""
        path = vaults_dir / "personal.auenc"
        store.save(container, path)

        def interrupt(src, dst):
            raise KeyboardInterrupt

        monkeypatch.setattr(os, "replace", interrupt)

        with pytest.raises(KeyboardInterrupt):
            store.save(container, path)

        assert store.load(path) == container
        assert _leftovers(vaults_dir) == []

    def test_first_save_failure_leaves_nothing(self, store, container, vaults_dir, monkeypatch):
        """Test a failed first save creates no destination file."""
        from auenc.vault import VaultIOError

        path = vaults_dir / "new.auenc"

        def fail_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr(os, "replace", fail_replace)

        with pytest.raises(VaultIOError):
            store.save(container, path)

        assert not path.exists()
        assert list(vaults_dir.iterdir()) == []


class TestVaultStorePaths:
    """Tests for name resolution and listing."""

    def test_path_for(self, store, vaults_dir):
        """Test names map to files in the vaults directory."""
        assert store.path_for("personal") == vaults_dir / "personal.auenc"
        assert store.path_for("  work  ") == vaults_dir / "work.auenc"

    def test_path_for_custom_directory(self, store, tmp_path):
        """Test an explicit directory overrides the configured one."""
        assert store.path_for("personal", tmp_path) == tmp_path / "personal.auenc"

    @pytest.mark.parametrize("name", ["", "   ", "a/b", "..\\evil", "what?", "a:b", "..", "tab\there"])
    def test_invalid_names(self, store, name):
        """Test illegal vault names are rejected."""
        from auenc.vault import InvalidInputError

        with pytest.raises(InvalidInputError):
            store.path_for(name)

    def test_list_vaults(self, store, container, vaults_dir):
        """Test listing finds only vault files, sorted."""
        store.save(container, vaults_dir / "work.auenc")
        store.save(container, vaults_dir / "personal.auenc")
        (vaults_dir / "notes.txt").write_text("not a vault")

        assert [p.name for p in store.list_vaults()] == ["personal.auenc", "work.auenc"]

    def test_list_vaults_missing_directory(self, store, tmp_path):
        """Test listing a missing directory fails."""
        from auenc.vault import VaultNotFoundError

        with pytest.raises(VaultNotFoundError):
            store.list_vaults(tmp_path / "missing")
