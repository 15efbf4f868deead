"""
Centralized logging configuration.

Provides logging with:
- Console output through rich (INFO or DEBUG based on the run config)
- File output (always DEBUG for troubleshooting)

Loggers are created from the environment config on first use.
run_pipeline calls configure_logging with its own Config so that every
cached logger follows that run's settings.

Usage:
    from pollmerge.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Merge started")
    logger.debug("Detailed debug info")  # Only shown when DEBUG=1
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from .config import get_config

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}

# Handlers shared by every cached logger once configure_logging has run
_shared_handlers: Optional[List[logging.Handler]] = None


def _build_handlers(log_dir: Path, debug: bool, log_to_file: bool) -> List[logging.Handler]:
    console_handler = RichHandler(
        rich_tracebacks=True, show_time=True, show_level=True, show_path=False
    )
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    handlers: List[logging.Handler] = [console_handler]

    # File handler (always DEBUG level for troubleshooting)
    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{datetime.now():%Y%m%d_%H%M%S}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    return handlers


def setup_logger(
    name: str = "pollmerge",
    log_dir: Optional[Path] = None,
    debug: Optional[bool] = None,
    log_to_file: Optional[bool] = None
) -> logging.Logger:
    """
    Setup and configure a logger.

    Args:
        name: Logger name (typically __name__)
        log_dir: Directory for log files (default from config)
        debug: Enable debug mode (default from environment/config)
        log_to_file: Whether to write logs to file (default from config)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level
    logger.propagate = False

    if _shared_handlers is not None and log_dir is None and debug is None and log_to_file is None:
        handlers = _shared_handlers
    else:
        config = get_config()
        handlers = _build_handlers(
            log_dir if log_dir is not None else config.logs_dir,
            config.debug if debug is None else debug,
            config.log_to_file if log_to_file is None else log_to_file,
        )

    for handler in handlers:
        logger.addHandler(handler)

    return logger


def configure_logging(log_dir: Path, debug: bool, log_to_file: bool) -> None:
    """
    Rebuild the handlers of every cached logger for one run.

    Loggers created afterwards share the same handlers, so a run writes
    at most one log file.
    """
    global _shared_handlers

    if _shared_handlers is not None:
        for handler in _shared_handlers:
            handler.close()

    _shared_handlers = _build_handlers(log_dir, debug, log_to_file)

    for logger in _loggers.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in _shared_handlers:
            logger.addHandler(handler)

    for handler in _shared_handlers:
        if isinstance(handler, logging.FileHandler):
            get_logger().debug(f"Log file: {handler.baseFilename}")


def get_logger(name: str = "pollmerge") -> logging.Logger:
    """
    Get a logger instance.

    Creates and caches logger instances. Use this for consistent logging
    throughout the application.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]


def log_timing(logger: logging.Logger, operation: str, duration_sec: float) -> None:
    """Log timing information for an operation."""
    if duration_sec < 1:
        logger.debug(f"{operation}: {duration_sec * 1000:.1f}ms")
    elif duration_sec < 60:
        logger.info(f"{operation}: {duration_sec:.2f}s")
    else:
        minutes = int(duration_sec // 60)
        seconds = duration_sec % 60
        logger.info(f"{operation}: {minutes}m {seconds:.1f}s")
