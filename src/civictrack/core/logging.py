"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(level_name: str = "INFO") -> logging.Logger:
    """Install a single stream handler on the ``civictrack`` logger.

    Safe to call more than once; later calls only adjust the level.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    logger = logging.getLogger("civictrack")
    logger.setLevel(level)

    if not any(getattr(handler, "_civictrack", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._civictrack = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
