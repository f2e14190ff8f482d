"""
Logging Configuration
Logging setup for applications embedding the Paynow client
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

PACKAGE_LOGGER = 'paynow'


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the package hierarchy

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger whose records propagate to the 'paynow' logger
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + '.'):
        name = f'{PACKAGE_LOGGER}.{name}'
    return logging.getLogger(name)


def configure_logging(level: Union[int, str] = logging.INFO, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the package logger

    Args:
        level: Logging level name or number
        log_dir: Directory for paynow.log; created if missing

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    # Only configure if not already configured
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    ))
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'paynow.log'),
            maxBytes=10485760,  # 10MB
            backupCount=10
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger
