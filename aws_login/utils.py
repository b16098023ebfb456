"""
Shared utility functions for aws-login modules.
"""

import os
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a standardized logger for aws-login modules.

    Log records go to standard error: standard output is reserved for the
    export lines and console URLs that callers evaluate or capture. The
    level comes from the LOG_LEVEL environment variable (default WARNING).

    Args:
        name (str): Logger name (typically __name__ from the calling module)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers if logger already configured
    if logger.handlers:
        return logger

    level = os.getenv("LOG_LEVEL", "WARNING").upper()
    log_level = getattr(logging, level, None)
    if not isinstance(log_level, int):
        log_level = logging.WARNING
        print(
            f"Warning: Invalid log level '{level}', defaulting to WARNING",
            file=sys.stderr,
        )

    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with standard aws-login configuration.

    Args:
        name (str): Logger name (typically __name__ from the calling module)

    Returns:
        logging.Logger: Configured logger instance
    """
    return setup_logger(name)
