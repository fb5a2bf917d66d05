# SPDX-License-Identifier: MIT
"""Logging configuration for drivecache.

Two named loggers are used throughout the package:
1. Detail Logger: per-operation cache diagnostics (hydrate, store, merge, ...)
2. Status Logger: user-facing output of the command line tool
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


DETAIL_LOGGER_NAME = "drivecache.detail"
STATUS_LOGGER_NAME = "drivecache.status"

LOG_FILE_NAME = "drivecache.log"


class FlushingStreamHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler that flushes after every record."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        if self.stream and not self.stream.closed:
            self.flush()


def setup_logging(log_dir: Path | None = None) -> tuple[logging.Logger, logging.Logger]:
    """Configure the detail and status loggers.

    Detail Logger:
        - Captures all DEBUG and above messages
        - Writes to file only

    Status Logger:
        - Outputs user-facing status information
        - Writes to both stderr (console) and file

    Args:
        log_dir: Directory for log file. If None, uses .drivecache/ in current directory

    Returns:
        Tuple of (detail_logger, status_logger)
    """
    if log_dir is None:
        log_dir = Path.cwd() / ".drivecache"

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    detail_logger = logging.getLogger(DETAIL_LOGGER_NAME)
    detail_logger.setLevel(logging.DEBUG)
    _reset_handlers(detail_logger)
    detail_logger.addHandler(file_handler)
    detail_logger.propagate = False

    status_logger = logging.getLogger(STATUS_LOGGER_NAME)
    status_logger.setLevel(logging.INFO)
    _reset_handlers(status_logger)

    console_handler = FlushingStreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    status_logger.addHandler(console_handler)
    status_logger.addHandler(file_handler)
    status_logger.propagate = False

    detail_logger.info(f"Logging initialized. Log file: {log_file}")

    return detail_logger, status_logger


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        handler.close()
    logger.handlers.clear()


def get_detail_logger() -> logging.Logger:
    """Get the detail logger for verbose technical logging.

    Use this logger for:
    - Cache operation traces (get/set/store/hydrate)
    - External update merges
    - Internal state changes

    Returns:
        The detail logger instance
    """
    return logging.getLogger(DETAIL_LOGGER_NAME)


def get_status_logger() -> logging.Logger:
    """Get the status logger for user-facing messages.

    Returns:
        The status logger instance
    """
    return logging.getLogger(STATUS_LOGGER_NAME)
