"""
Console logging setup for the command line.

The library only creates module loggers under ``tilecollapse``; handlers
are installed here, once, by the CLI.

Usage:
    from tilecollapse.logging_config import setup_logging
    setup_logging(verbosity)  # 0 = warnings, 1 = info, 2+ = debug
"""

import logging
import sys

LOGGER_NAME = "tilecollapse"

_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def level_for(verbosity: int) -> int:
    return _LEVELS[max(0, min(verbosity, len(_LEVELS) - 1))]


def setup_logging(verbosity: int = 0, stream=None) -> logging.Logger:
    """
    Configure the ``tilecollapse`` logger with a single stderr handler.

    Args:
        verbosity: Number of -v flags given on the command line
        stream: Output stream (default: sys.stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for(verbosity))

    # Clear any existing handlers (for re-initialization)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
