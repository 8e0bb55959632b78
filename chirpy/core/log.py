"""Logging setup for the chirpy package."""

from __future__ import annotations

import logging

LOGGER_NAME = "chirpy"

_FORMATTER = logging.Formatter(
    "%(asctime)s.%(msecs)03d | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the ``chirpy`` logger (once per process)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_FORMATTER)
        logger.addHandler(handler)
    return logger
