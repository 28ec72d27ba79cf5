"""Logging setup for the analysis scripts."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Handler:
    """
    Send pipeline logs to stdout, next to the printed reports.

    Args:
        level: Level name (DEBUG shows per-fold CV progress)

    Returns:
        The handler attached to the root logger
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.root.addHandler(handler)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a pipeline module.

    Args:
        name: Module name (usually __name__)
    """
    return logging.getLogger(name)


__all__ = ["get_logger", "setup_logging"]
