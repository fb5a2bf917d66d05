# SPDX-License-Identifier: MIT
"""Tests for the logging configuration module."""

import logging
from unittest.mock import patch

import pytest

from drivecache.logging_config import (
    DETAIL_LOGGER_NAME,
    LOG_FILE_NAME,
    STATUS_LOGGER_NAME,
    FlushingStreamHandler,
    get_detail_logger,
    get_status_logger,
    setup_logging,
)


@pytest.fixture
def temp_log_dir(tmp_path):
    """Create a temporary directory for log files."""
    log_dir = tmp_path / "test_logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset the detail and status loggers before and after each test."""
    loggers = [
        logging.getLogger(DETAIL_LOGGER_NAME),
        logging.getLogger(STATUS_LOGGER_NAME),
    ]
    saved = [(logger.level, logger.propagate) for logger in loggers]

    for logger in loggers:
        for handler in logger.handlers[:]:
            handler.close()
        logger.handlers.clear()

    yield

    for logger, (level, propagate) in zip(loggers, saved):
        for handler in logger.handlers[:]:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(level)
        logger.propagate = propagate


class TestSetupLogging:
    """Test cases for setup_logging function."""

    def test_setup_logging_creates_log_file(self, temp_log_dir) -> None:
        """Test that setup_logging creates a log file in the specified directory."""
        setup_logging(temp_log_dir)

        log_file = temp_log_dir / LOG_FILE_NAME
        assert log_file.exists()
        assert log_file.is_file()

    def test_setup_logging_uses_default_directory_when_none(self, tmp_path) -> None:
        """Test that setup_logging uses .drivecache in cwd when log_dir is None."""
        with patch("pathlib.Path.cwd", return_value=tmp_path):
            setup_logging(log_dir=None)

        assert (tmp_path / ".drivecache" / LOG_FILE_NAME).exists()

    def test_setup_logging_returns_correct_loggers(self, temp_log_dir) -> None:
        detail_logger, status_logger = setup_logging(temp_log_dir)

        assert detail_logger.name == DETAIL_LOGGER_NAME
        assert status_logger.name == STATUS_LOGGER_NAME
        assert get_detail_logger() is detail_logger
        assert get_status_logger() is status_logger

    def test_detail_logger_configuration(self, temp_log_dir) -> None:
        """Test that detail logger writes DEBUG to the file only."""
        detail_logger, _ = setup_logging(temp_log_dir)

        assert detail_logger.level == logging.DEBUG
        assert detail_logger.propagate is False
        assert len(detail_logger.handlers) == 1
        assert isinstance(detail_logger.handlers[0], logging.FileHandler)

    def test_status_logger_configuration(self, temp_log_dir) -> None:
        """Test that status logger writes to console and file."""
        _, status_logger = setup_logging(temp_log_dir)

        assert status_logger.level == logging.INFO
        assert status_logger.propagate is False
        assert len(status_logger.handlers) == 2
        handler_types = {type(h) for h in status_logger.handlers}
        assert FlushingStreamHandler in handler_types
        assert logging.FileHandler in handler_types

    def test_messages_written_to_file(self, temp_log_dir) -> None:
        detail_logger, status_logger = setup_logging(temp_log_dir)

        detail_logger.debug("ExpireCache[sessions]: hydrate")
        status_logger.info("Default configuration written")
        for handler in detail_logger.handlers + status_logger.handlers:
            handler.flush()

        content = (temp_log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert "ExpireCache[sessions]: hydrate" in content
        assert "Default configuration written" in content
        assert "Logging initialized" in content

    def test_repeated_setup_does_not_duplicate_handlers(self, temp_log_dir) -> None:
        setup_logging(temp_log_dir)
        detail_logger, status_logger = setup_logging(temp_log_dir)

        assert len(detail_logger.handlers) == 1
        assert len(status_logger.handlers) == 2
