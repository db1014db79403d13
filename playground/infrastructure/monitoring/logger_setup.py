"""Centralized logging configuration for the playground application.

Sets up standard Python logging with the configured level, format and
handlers (console, optional file). Log lines go to stderr so they never
interleave with tables written to stdout.
"""

import logging
import sys
from typing import Optional, Union

from playground.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = None


def parse_log_level(level: Union[int, str, None], default: int = DEFAULT_LOG_LEVEL) -> int:
    """Accepts logging constants or names like "debug"."""
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return default


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for log messages.
        log_file: Optional path to a file for logging output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers attached to the root logger
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}")

    logging.debug(f"Logging configured. Level={logging.getLevelName(log_level)}")


def setup_logging_from_config(verbose: bool = False) -> None:
    """Reads logging.level, logging.format and logging.file from configuration.

    Args:
        verbose: Forces DEBUG regardless of the configured level.
    """
    level = logging.DEBUG if verbose else parse_log_level(get_config("logging.level"))
    setup_logging(
        log_level=level,
        log_format=str(get_config("logging.format", DEFAULT_LOG_FORMAT)),
        log_file=get_config("logging.file", DEFAULT_LOG_FILE),
    )
