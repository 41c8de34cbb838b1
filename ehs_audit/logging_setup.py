"""Logging configuration for the service (loguru)."""
import sys

from loguru import logger

from ehs_audit.config import settings


def setup_logging(level: str = None, log_format: str = None) -> None:
    """
    Replace loguru's default sink with one driven by settings.

    LOG_FORMAT=json serializes every record; anything else is human-readable.
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_format = log_format or settings.LOG_FORMAT

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        serialize=log_format == "json",
        backtrace=False,
        diagnose=False,
    )
