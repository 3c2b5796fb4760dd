"""
Logging setup for the API and pipeline.

Call setup_logging() once at startup; modules get loggers via get_logger(__name__).
"""
import logging
import sys
from typing import Optional

from incidentlens.core.config import settings

ROOT_LOGGER_NAME = "incidentlens"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package root logger with a console handler.

    Safe to call more than once; handlers are only attached the first time.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel((level or settings.log_level).upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package root so it shares its handlers."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
