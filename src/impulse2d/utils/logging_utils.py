"""Logging setup for scripts; library modules only call logging.getLogger."""

from __future__ import annotations

import logging
import os
from typing import Final

_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_level(level_str: str | None, default: int = logging.INFO) -> int:
    if not level_str:
        return default
    level = logging.getLevelName(level_str.strip().upper())
    return level if isinstance(level, int) else default


def get_logger(name: str = "impulse2d", level: int | str | None = None) -> logging.Logger:
    """Return a logger emitting to stderr.

    `level` wins if given; otherwise the `LOG_LEVEL` environment variable,
    falling back to INFO.
    """
    if isinstance(level, str):
        level = parse_level(level)
    chosen_level = level if level is not None else parse_level(os.environ.get("LOG_LEVEL"))

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(chosen_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(chosen_level)
    logger.propagate = False
    return logger
