"""Logging setup for the wavelet_ecs package.

Modules log through logging.getLogger(__name__); nothing is emitted until
an application calls setup_logging() (or configures logging itself).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wavelet_ecs.config import Settings

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: str | None = None,
    format_string: str | None = None,
    name: str = "wavelet_ecs",
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level (int or name such as 'DEBUG')
        log_file: Path to log file (if None, only console output)
        format_string: Custom format string
        name: Logger name (defaults to the package logger)

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_settings(settings: Settings) -> logging.Logger:
    """Configure the package logger from a config.Settings instance."""
    return setup_logging(level=settings.log_level, log_file=settings.log_file)
