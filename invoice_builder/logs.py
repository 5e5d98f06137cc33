"""
Logging helpers.

A small logger factory so every module gets the same handler and format
without configuring the root logger (Streamlit owns that one).
"""

import logging
import os
from pathlib import Path
from typing import Set

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Names handed out by logger(); set_level leaves every other logger alone.
_CREATED: Set[str] = set()


def logger(name: str) -> logging.Logger:
    """
    Return a configured logger for ``name``.

    ``name`` may be a module name or a ``__file__`` path; paths are reduced
    to their stem.
    """
    if "/" in name or "\\" in name:
        name = Path(name).stem

    log = logging.getLogger(name)

    if not log.handlers:
        log.setLevel(getattr(logging, _LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        log.addHandler(handler)
    _CREATED.add(name)

    return log


def set_level(level: str) -> None:
    """Apply ``level`` to every logger created by :func:`logger`."""
    value = getattr(logging, level.upper(), logging.INFO)
    for name in _CREATED:
        logging.getLogger(name).setLevel(value)
