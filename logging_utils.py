"""
Logging setup for the annotation editor engine.

Library modules only ever call ``get_logger()``; front ends call
``setup_logging()`` once to attach a handler.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "annotab"


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """
    Set up the application logger.

    Args:
        verbose: If True, set level to DEBUG; otherwise INFO
        stream: Output stream (stderr if None)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(message)s"))
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger, or one of its children.

    Args:
        name: Optional child name, e.g. ``"engine"``

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
