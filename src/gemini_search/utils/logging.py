"""
Logging configuration and utilities for Gemini Search.

Provides centralized logging setup with support for:
- Console output on stderr (stdout carries search results)
- Optional rotating log file
- Per-module loggers
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gemini_search.config.settings import LoggingSettings


# Root logger name for the application
ROOT_LOGGER_NAME = "gemini_search"

# Track whether logging has been configured
_logging_configured = False


def setup_logging(
    settings: "LoggingSettings | None" = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure the application logging system.

    Should be called once at application startup.

    Args:
        settings: Logging configuration. If None, uses defaults.
        verbose: Lower the level to INFO so per-query diagnostics show.

    Returns:
        The configured root logger for the application.
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Avoid duplicate handlers if called multiple times
    if _logging_configured:
        return logger

    logger.handlers.clear()

    if settings is None:
        level = logging.ERROR
        log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        date_format = "%Y-%m-%d %H:%M:%S"
        log_to_console = True
        file_path = None
        max_file_size_mb = 10
        backup_count = 3
    else:
        level = getattr(logging, settings.level)
        log_format = settings.format
        date_format = settings.date_format
        log_to_console = settings.log_to_console
        file_path = settings.file_path
        max_file_size_mb = settings.max_file_size_mb
        backup_count = settings.backup_count

    if verbose:
        level = min(level, logging.INFO)

    logger.setLevel(level)

    formatter = logging.Formatter(fmt=log_format, datefmt=date_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file_path is not None:
        file_handler = _create_file_handler(
            file_path=file_path,
            max_bytes=max_file_size_mb * 1024 * 1024,
            backup_count=backup_count,
            level=level,
            formatter=formatter,
        )
        logger.addHandler(file_handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    _logging_configured = True

    return logger


def _create_file_handler(
    file_path: Path,
    max_bytes: int,
    backup_count: int,
    level: int,
    formatter: logging.Formatter,
) -> RotatingFileHandler:
    """Create a rotating file handler for logging."""
    file_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)

    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    All loggers are children of the application root logger, ensuring
    consistent configuration across the application.

    Args:
        name: Module name for the logger. If None, returns the root logger.
              Typically pass __name__ to get a module-specific logger.

    Returns:
        Logger instance configured as child of application root.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Performing search")
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """
    Reset the logging configuration.

    Removes all handlers and resets the configured flag.
    Useful for testing or reconfiguration.
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    logger.propagate = True
    _logging_configured = False
