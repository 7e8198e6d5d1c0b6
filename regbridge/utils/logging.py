"""Logging utilities for regbridge processes."""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_HANDLER_NAME = "_regbridge_stream_handler"


def configure_logging(
    level: int | str = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Make regbridge loggers emit to a stream with a consistent format.

    Calling this more than once reconfigures the same handler instead of
    adding a new one. Logs go to stderr by default so that they never mix
    with command output.
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level: {name}")

    logger = logging.getLogger("regbridge")
    if formatter is None:
        formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")

    existing = None
    for handler in logger.handlers:
        if getattr(handler, _HANDLER_NAME, False):
            existing = handler
            break

    if existing is None:
        existing = logging.StreamHandler(stream or sys.stderr)
        setattr(existing, _HANDLER_NAME, True)
        logger.addHandler(existing)
    elif stream is not None:
        existing.setStream(stream)

    existing.setFormatter(formatter)
    existing.setLevel(level)
    logger.setLevel(level)
    return existing
