"""Logging setup for sshhop.

The TUI owns the terminal, so records only go to a rotating file under the
user's data directory.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .platform_utils import get_data_dir

LOG_FILE_NAME = 'sshhop.log'


def setup_logging(config=None, log_dir: Optional[str] = None) -> str:
    """Set up logging configuration and return the log file path"""
    log_dir = log_dir or get_data_dir()
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, LOG_FILE_NAME)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # File handler with rotation
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)

    verbose = bool(config is not None and config.is_debug_enabled())
    effective_level = logging.DEBUG if verbose else logging.INFO
    file_handler.setLevel(effective_level)
    root_logger.setLevel(effective_level)
    root_logger.addHandler(file_handler)

    logging.getLogger('asyncio').setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger('textual').setLevel(logging.INFO if verbose else logging.WARNING)
    logging.getLogger('sshhop').setLevel(effective_level)

    return log_path


__all__ = ["LOG_FILE_NAME", "setup_logging"]
