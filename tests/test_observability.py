"""
Tests for logging configuration.
"""

import logging
from pathlib import Path

import pytest

from boxtools.core.observability.logging_config import (
    ENV_LEVEL,
    INSTALLER_OUTPUT_LOGGER,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    """Flag and environment precedence."""

    def test_precedence(self):
        env = {ENV_LEVEL: "ERROR"}
        assert resolve_level(debug=True, verbose=True, quiet=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True, environ=env) == "ERROR"
        assert resolve_level(environ=env) == "ERROR"
        assert resolve_level(environ={}) == "WARNING"


class TestSetupLogging:
    """Tests for handler configuration."""

    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_gets_its_own_level(self, tmp_path: Path):
        log_file = tmp_path / "box.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")

        logging.getLogger(INSTALLER_OUTPUT_LOGGER).debug("installer line")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "installer line" in log_file.read_text()
