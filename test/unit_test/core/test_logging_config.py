"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
from unittest.mock import patch

import pytest

from thoraxlab.core import logging_config
from thoraxlab.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler():
    return next(
        (h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler),
        None,
    )


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
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        handler = _console_handler()
        assert handler is not None
        assert handler.level == expected_level

    def test_root_logger_captures_everything(self):
        setup_logging(log_level="ERROR", enable_file=False)

        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    """Test setup_logging with different log formats."""

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        assert _console_handler().formatter._fmt == expected_format

    def test_date_format(self):
        setup_logging(log_format="detailed", enable_file=False)

        assert _console_handler().formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandling:
    """Test setup_logging file logging functionality."""

    def test_file_handler_written_to_log_dir(self, tmp_path):
        with (
            patch.object(logging_config, "ENABLE_FILE_LOGGING", True),
            patch.object(logging_config, "LOG_FILE_DIR", str(tmp_path / "logs")),
        ):
            setup_logging(enable_file=True)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        try:
            assert len(file_handlers) == 1
            assert file_handlers[0].level == logging.DEBUG
            assert (tmp_path / "logs" / "thoraxlab.log").exists()
        finally:
            for handler in file_handlers:
                handler.close()
            setup_logging(enable_file=False)

    def test_disabled_by_setting(self, tmp_path):
        with (
            patch.object(logging_config, "ENABLE_FILE_LOGGING", False),
            patch.object(logging_config, "LOG_FILE_DIR", str(tmp_path / "logs")),
        ):
            setup_logging(enable_file=True)

        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)
        assert not (tmp_path / "logs").exists()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1


class TestModuleLevels:
    def test_module_levels_applied(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)

    def test_noisy_libraries_quietened(self):
        assert MODULE_LOG_LEVELS["sqlalchemy.engine"] == "WARNING"
        assert MODULE_LOG_LEVELS["aiosqlite"] == "WARNING"


class TestGetLogger:
    def test_returns_named_logger(self):
        logger = get_logger("thoraxlab.server.services.auth")

        assert logger.name == "thoraxlab.server.services.auth"
        assert logger is logging.getLogger("thoraxlab.server.services.auth")
