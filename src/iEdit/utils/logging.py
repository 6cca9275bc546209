"""Logging helpers for iEdit.

Core modules log through ``logging.getLogger(__name__)``, which makes them
children of the ``iEdit`` logger configured here.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

PACKAGE_LOGGER = "iEdit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOGGER: Optional[logging.Logger] = None


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Return the iEdit logger, or one of its children when *child* is given.

    The package logger receives a single stream handler the first time it is
    requested and defaults to ``INFO``.
    """

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(PACKAGE_LOGGER)
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(logging.INFO)
    if child:
        return _LOGGER.getChild(child)
    return _LOGGER


def set_log_level(level: Union[int, str]) -> None:
    """Change the verbosity of every iEdit logger, e.g. ``"DEBUG"`` for kernel timings."""

    if isinstance(level, str):
        level = level.upper()
    get_logger().setLevel(level)


logger = get_logger("session")
