"""
Logging setup for the text processing engine.

Handlers live on the package logger ('textproc'). Module loggers obtained
through get_logger() are its children and propagate to it, so a split or a
batch transition is written once to the console and once to the log file no
matter how many modules log.
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .constants import (
    LOG_LEVEL, LOG_FORMAT, LOG_FILE,
    LOG_MAX_SIZE_MB, LOG_BACKUP_COUNT
)

ROOT_LOGGER_NAME = 'textproc'


def setup_logger(
    name: str = None,
    level: Optional[str] = None,
    log_file: Optional[str] = LOG_FILE,
) -> logging.Logger:
    """
    Attach console and rotating file handlers to a logger (once).

    Args:
        name: Logger name. If None, uses 'textproc'.
        level: Level name for the logger, defaults to LOG_LEVEL.
        log_file: Path of the rotating log file. None disables file output.

    Returns:
        Configured logging.Logger instance.
    """
    logger = logging.getLogger(name or ROOT_LOGGER_NAME)

    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper()))
    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler - INFO level
    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        # File handler with rotation - DEBUG level
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = LOG_FILE) -> logging.Logger:
    """
    Replace the package logger's handlers, e.g. after settings are loaded.

    Usage:
        configure_logging(settings.log_level, settings.log_file)
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    return setup_logger(ROOT_LOGGER_NAME, level=level, log_file=log_file)


def get_logger(name: str = None) -> logging.Logger:
    """
    Logger for a module, placed under the 'textproc' hierarchy.

    Usage:
        from config.logging_config import get_logger
        logger = get_logger(__name__)
    """
    root = setup_logger(ROOT_LOGGER_NAME)
    if not name or name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + '.'):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


# Package logger for quick imports
# Usage: from config.logging_config import logger
logger = get_logger()
