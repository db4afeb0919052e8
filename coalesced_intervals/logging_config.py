"""
Logging configuration for coalesced-intervals.

All modules log through children of the "coalesced_intervals" logger, which
writes plain messages to stdout.

Usage:
    from .logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Message")
"""

import logging
import sys
from typing import Union

PACKAGE_LOGGER_NAME = "coalesced_intervals"


def setup_logging(level: Union[int, str] = logging.INFO, force: bool = False) -> None:
    """
    Configure logging for the coalesced_intervals package.

    Args:
        level: Logging level or level name such as "DEBUG" (default: INFO)
        force: If True, reconfigure even if already configured
    """
    if isinstance(level, str):
        level_name = level.upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    if package_logger.handlers and not force:
        return

    if force:
        package_logger.handlers.clear()

    package_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger.addHandler(console_handler)
    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance under the package logger
    """
    setup_logging()

    if name.startswith(PACKAGE_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")
