"""
Structured Logging Configuration for the intelligence engine

This module provides centralized logging configuration with:
- Console and file output
- Configurable log levels
- Per-module loggers
- The active batch run id stamped on every record
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional
from datetime import datetime


DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_RUN = "-"

_run_id: ContextVar[str] = ContextVar("run_id", default=NO_RUN)


class RunIdFilter(logging.Filter):
    """Adds `run_id` (first 8 chars of the active batch run id) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id.get()[:8]
        return True


@contextmanager
def run_context(run_id: str) -> Iterator[None]:
    """
    Tag log records emitted inside the block with a batch run id.

    Tasks and `asyncio.to_thread` calls started inside the block inherit
    the tag.

    Example:
        >>> with run_context(run_id):
        ...     logger.info("Batch started")
    """
    token = _run_id.set(run_id or NO_RUN)
    try:
        yield
    finally:
        _run_id.reset(token)


def current_run_id() -> str:
    return _run_id.get()


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file (default: <log_dir>/intel_<date>.log)
        console: Whether to log to console (default: True)
        log_dir: Directory for the dated default log file

    Returns:
        Configured root logger

    Example:
        >>> logger = setup_logging(level="DEBUG")
        >>> logger.info("Batch started")
    """
    numeric_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    run_filter = RunIdFilter()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(run_filter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
    else:
        date_str = datetime.now().strftime("%Y%m%d")
        log_path = Path(log_dir) / f"intel_{date_str}.log"

    log_path.parent.mkdir(exist_ok=True, parents=True)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(run_filter)
    root_logger.addHandler(file_handler)

    root_logger.info(f"Logging initialized - Level: {level}, File: {log_path}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Name of the logger (typically __name__)

    Returns:
        Logger instance for the module
    """
    return logging.getLogger(name)


def init_cli_logging(verbose: bool = False, log_dir: Path = Path("logs")) -> logging.Logger:
    """
    Initialize logging for a CLI run.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO
        log_dir: Directory for the dated log file
    """
    level = "DEBUG" if verbose else "INFO"
    return setup_logging(level=level, log_dir=log_dir)
