"""Unit tests for logging configuration module."""

import logging
from pathlib import Path

import pytest

from indiefuture_agent.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    LOG_FILE_NAME,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if type(h) is logging.StreamHandler),
        None,
    )
    assert handler is not None
    return handler


def _file_handler():
    return next((h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)), None)


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in saved_handlers:
            handler.close()
    root_logger.handlers = saved_handlers
    root_logger.setLevel(saved_level)


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),
        ],
    )
    def test_console_handler_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert _console_handler().level == expected_level

    def test_root_logger_captures_everything(self):
        """Filtering happens at the handler, not the root logger."""
        setup_logging(log_level="WARNING", enable_file=False)

        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
        ],
    )
    def test_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        formatter = _console_handler().formatter
        assert formatter._fmt == expected_format
        assert formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandling:
    def test_file_handler_writes_into_directory(self, tmp_path: Path):
        log_dir = tmp_path / "new_logs"

        setup_logging(log_level="ERROR", enable_file=True, log_file_dir=str(log_dir))

        file_handler = _file_handler()
        assert file_handler is not None
        assert file_handler.level == logging.DEBUG
        assert Path(file_handler.baseFilename) == log_dir / LOG_FILE_NAME

    def test_no_file_handler_when_disabled(self):
        setup_logging(enable_file=False)

        assert _file_handler() is None

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1


class TestModuleLogLevels:
    def test_all_module_log_levels_configured(self):
        setup_logging(enable_file=False)

        for module_name, expected_level_str in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == getattr(logging, expected_level_str)

    def test_get_logger_inherits_module_level(self):
        setup_logging(enable_file=False)

        assert get_logger("indiefuture_agent.agent_core.runtime").level == logging.DEBUG
        assert get_logger("httpx").level == logging.WARNING


class TestGetLogger:
    def test_same_name_returns_same_instance(self):
        assert get_logger("indiefuture_agent.cli") is get_logger("indiefuture_agent.cli")

    def test_name_is_kept(self):
        assert get_logger("test.nested.module").name == "test.nested.module"
