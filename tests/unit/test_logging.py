"""Unit tests for logging configuration."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from saml_mdq.logging_audit import configure_logging
from saml_mdq.logging_audit.logger import (
    BACKUP_COUNT,
    LOG_FILE_ENV_VAR,
    MAX_LOG_FILE_SIZE,
    _installed_handlers,
)


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """Drop handlers installed by a test so they do not leak."""
    monkeypatch.delenv(LOG_FILE_ENV_VAR, raising=False)
    root_logger = logging.getLogger()
    original_level = root_logger.level
    yield
    for handler in list(_installed_handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()
    root_logger.setLevel(original_level)


def _file_handlers():
    return [h for h in _installed_handlers if isinstance(h, RotatingFileHandler)]


class TestConfigureLogging:
    """Test logging configuration."""

    def test_configure_logging_creates_file(self, tmp_path):
        """Test logging configuration creates log file."""
        # Arrange
        log_file = tmp_path / "mdq.log"

        # Act
        configure_logging(level="INFO", log_file=log_file)
        logging.getLogger(__name__).info("Test message")

        # Assert
        assert log_file.exists()
        assert "Test message" in log_file.read_text(encoding="utf-8")

    def test_console_level(self):
        configure_logging(level="WARNING")

        console = [h for h in _installed_handlers if not isinstance(h, RotatingFileHandler)]
        assert len(console) == 1
        assert console[0].level == logging.WARNING
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_debug_level(self, tmp_path):
        """Test file handler records DEBUG regardless of console level."""
        log_file = tmp_path / "mdq.log"

        configure_logging(level="ERROR", log_file=log_file)
        logging.getLogger(__name__).debug("Debug detail")

        assert _file_handlers()[0].level == logging.DEBUG
        assert "Debug detail" in log_file.read_text(encoding="utf-8")

    def test_creates_directory(self, tmp_path):
        log_file = tmp_path / "nested" / "logs" / "mdq.log"

        configure_logging(log_file=log_file)

        assert log_file.parent.is_dir()

    def test_invalid_level_raises_error(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_environment_variable(self, tmp_path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv(LOG_FILE_ENV_VAR, str(log_file))

        configure_logging(level="INFO")
        logging.getLogger(__name__).info("From env")

        assert "From env" in log_file.read_text(encoding="utf-8")

    def test_argument_overrides_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(LOG_FILE_ENV_VAR, str(tmp_path / "env.log"))
        log_file = tmp_path / "arg.log"

        configure_logging(log_file=log_file)

        assert _file_handlers()[0].baseFilename == str(log_file)

    def test_idempotent(self, tmp_path):
        """Test repeated configuration does not stack handlers."""
        log_file = tmp_path / "mdq.log"

        configure_logging(log_file=log_file)
        configure_logging(log_file=log_file)

        assert len(_installed_handlers) == 2
        assert len(_file_handlers()) == 1

    def test_rotation_config(self, tmp_path):
        configure_logging(log_file=tmp_path / "mdq.log")

        handler = _file_handlers()[0]
        assert handler.maxBytes == MAX_LOG_FILE_SIZE == 10 * 1024 * 1024
        assert handler.backupCount == BACKUP_COUNT == 5
