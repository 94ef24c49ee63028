"""
Logging Setup
Replaces the default loguru sink with the project format
"""

import sys
from typing import Optional
from loguru import logger

from config.settings import settings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level: Optional[str] = None) -> None:
    """Log to stderr at the given level (defaults to settings.LOG_LEVEL)"""
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=(level or settings.LOG_LEVEL).upper(),
    )
