"""
Logging setup.

Library modules log through loguru's global logger and never configure it;
the CLI calls setup_logging() once at startup.
"""

import sys

from loguru import logger


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def setup_logging(level: str = "INFO", sink=None) -> None:
    """Replace loguru's default handler with a single sink (stderr by default)."""
    logger.remove()
    logger.add(sink or sys.stderr, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
    logger.debug("Logger initialized at level {}", level)
