"""
Configuration module for the text processing engine.
"""
from .constants import *
from .logging_config import setup_logger, configure_logging, get_logger, logger

__all__ = [
    # Logging
    'setup_logger',
    'configure_logging',
    'get_logger',
    'logger',
    # Constants (all exported via *)
]
