"""
Console Initialization - Logging Module.

Module: logging.py
Configures loguru logger for the deposit tool.
Sets up log rotation and retention policies when a log file is configured.
"""

import sys

from loguru import logger


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure stderr sink and optional file sink with rotation."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level.upper(),
            encoding="utf-8",
        )

    logger.debug("Logging configured")
