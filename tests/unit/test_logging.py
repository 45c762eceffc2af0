"""Unit tests for logging setup."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger("auenc")
    level = logger.level
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_level(self):
        """Test the package logger gets the requested level."""
        from auenc.utils.logging import setup_logging

        logger = setup_logging("info")

        assert logger.name == "auenc"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_repeated_setup_replaces_handlers(self):
        """Test handlers are not stacked on repeated calls."""
        from auenc.utils.logging import setup_logging

        setup_logging("WARNING")
        logger = setup_logging("ERROR")

        assert len(logger.handlers) == 1

    def test_unknown_level(self):
        """Test an unknown level name is rejected."""
        from auenc.utils.logging import setup_logging

        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("LOUD")

    def test_file_handler(self, tmp_path):
        """Test the log file receives debug records from vault modules."""
        from auenc.utils.logging import get_logger, setup_logging

        log_file = tmp_path / "logs" / "auenc.log"
        setup_logging("ERROR", log_file=log_file, rich_output=False)

        get_logger("auenc.vault.store").debug("Saved vault container to %s", "x.auenc")
        for handler in logging.getLogger("auenc").handlers:
            handler.flush()

        assert "Saved vault container to x.auenc" in log_file.read_text(encoding="utf-8")


class TestRedactingFilter:
    """Tests for hash redaction."""

    def _record(self, msg, *args):
        return logging.LogRecord("auenc.test", logging.INFO, __file__, 1, msg, args, None)

    def test_redacts_hash_in_args(self):
        """Test a hash passed as an argument is replaced."""
        from auenc.utils.logging import REDACTED, RedactingFilter

        record = self._record("hash is %s", "$argon2id$v=19$m=1024,t=1,p=1$c2FsdA$aGFzaA")

        assert RedactingFilter().filter(record)
        assert record.getMessage() == f"hash is {REDACTED}"

    def test_leaves_other_messages(self):
        """Test ordinary messages pass through unchanged."""
        from auenc.utils.logging import RedactingFilter

        record = self._record("Saved vault %s (%d entries)", "personal.auenc", 2)

        assert RedactingFilter().filter(record)
        assert record.getMessage() == "Saved vault personal.auenc (2 entries)"
        assert record.args == ("personal.auenc", 2)
