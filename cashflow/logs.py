"""
Logging setup (loguru).
"""
from __future__ import annotations

import sys

from loguru import logger

from cashflow.config import LOG_LEVEL, LOG_TO_FILE, LOGS_FOLDER

_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}"


def configure_logging(level: str = LOG_LEVEL, to_file: bool = LOG_TO_FILE) -> None:
    """Replace the default loguru sink with ours. Safe to call more than once."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    if to_file:
        LOGS_FOLDER.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOGS_FOLDER / "cashflow_{time:YYYY-MM-DD}.log",
            level=level,
            rotation="1 day",
            retention="14 days",
        )
