"""Tests for adolinks.utils.logging module."""

import importlib
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

import adolinks.utils.logging as logging_module


@pytest.fixture(autouse=True)
def reload_logging_module():
    """Restore module-level settings read from the environment."""
    yield
    logging_module.reset_logging()
    importlib.reload(logging_module)


class TestLogging:
    """Tests for logging functionality."""

    def test_log_disabled_by_default(self):
        """Logging is disabled when ADOLINKS_LOG is not set."""
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(logging_module)

            assert logging_module.LOG_ENABLED is False

    def test_log_enabled_with_env_var(self):
        with patch.dict(os.environ, {"ADOLINKS_LOG": "TRUE"}):
            importlib.reload(logging_module)

            assert logging_module.LOG_ENABLED is True

    def test_log_file_default_path(self):
        assert logging_module.LOG_FILE == Path.home() / ".adolinks.log"

    def test_log_file_custom_path(self, tmp_path):
        custom_path = tmp_path / "custom-log.log"
        with patch.dict(os.environ, {"ADOLINKS_LOG_FILE": str(custom_path)}):
            importlib.reload(logging_module)

            assert logging_module.LOG_FILE == custom_path

    def test_setup_logging_uses_package_logger(self):
        logger = logging_module.setup_logging(enabled=False)

        assert logger.name == "adolinks"
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_get_logger_returns_same_instance(self):
        assert logging_module.get_logger() is logging_module.get_logger()

    def test_log_message_when_enabled(self, tmp_path):
        """log_message writes to the log file when logging is enabled."""
        log_file = tmp_path / "logs" / "adolinks.log"
        logging_module.setup_logging(enabled=True, log_file=log_file)

        logging_module.log_message("Test message")

        for handler in logging_module.get_logger().handlers:
            handler.flush()
        content = log_file.read_text()
        assert "INFO adolinks: Test message" in content

    def test_module_loggers_write_to_file(self, tmp_path):
        """Library modules log under the package logger."""
        log_file = tmp_path / "adolinks.log"
        logging_module.setup_logging(enabled=True, log_file=log_file)

        logging.getLogger("adolinks.integrations.api_client").warning("Skipping work item 6")

        assert "WARNING adolinks.integrations.api_client: Skipping work item 6" in log_file.read_text()

    def test_reset_logging_allows_reconfiguration(self, tmp_path):
        first = logging_module.setup_logging(enabled=False)
        logging_module.reset_logging()

        second = logging_module.setup_logging(enabled=True, log_file=tmp_path / "a.log")

        assert first is second
        assert any(isinstance(h, logging.FileHandler) for h in second.handlers)
