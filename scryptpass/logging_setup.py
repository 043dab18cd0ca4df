"""Logging configuration for scryptpass."""

import os
import logging
from datetime import datetime
from typing import Optional

from scryptpass import __version__

FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _has_console_handler(logger: logging.Logger) -> bool:
    # FileHandler subclasses StreamHandler, so compare exact types
    return any(type(h) is logging.StreamHandler for h in logger.handlers)


def setup_logging(level: str = "INFO", path: Optional[str] = None):
    """Configure and return the scryptpass logger.

    Repeated calls adjust the level and add a log file when asked, but
    never attach a second console handler.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR)
        path: Directory for a versioned log file; console only when None
    """
    logger = logging.getLogger("scryptpass")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(FORMAT)

    if not _has_console_handler(logger):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if path:
        os.makedirs(path, exist_ok=True)
        log_file = os.path.join(
            path,
            f"scryptpass({__version__})_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        )
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug(f"Log file created: {log_file}")

    return logger
