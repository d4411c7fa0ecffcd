"""Logging configuration for the ``stockledger`` logger tree."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach one stderr handler to the package logger and set its level.

    Safe to call repeatedly: the handler installed by a previous call is
    replaced rather than duplicated.
    """
    logger = logging.getLogger("stockledger")
    for handler in list(logger.handlers):
        if getattr(handler, "_stockledger_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._stockledger_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
