"""
Logging helpers for geopro.

The library itself only emits DEBUG records for degenerate geometry; nothing
is printed unless the host application configures logging, or calls
`setup_logging` below.
"""
import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "geopro"


def setup_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a formatted console handler to the 'geopro' logger.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        stream: Stream to write to, stderr when omitted.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # avoid duplicate records when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(handler)
    return logger
