"""
Lightweight logging utilities for the LPN query toolkit.

All toolkit loggers hang off a single ``lpn_query_toolkit`` root logger
which owns the console handler, so the level can be changed in one place
(LPN_LOG_LEVEL environment variable, or ``set_log_level`` from the CLI).
"""

import logging
import os
from typing import Optional, Union

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_ROOT_LOGGER_NAME = "lpn_query_toolkit"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        root.addHandler(handler)

        level_str = os.getenv("LPN_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level_str, logging.INFO))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a toolkit logger.

    Names outside the ``lpn_query_toolkit`` namespace are nested under it so
    that they share the root handler instead of attaching their own.
    """
    root = _configure_root()
    if not name or name == _ROOT_LOGGER_NAME:
        return root
    if not name.startswith(_ROOT_LOGGER_NAME + "."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_log_level(level: Union[str, int]) -> None:
    """Override the toolkit log level (e.g. from a ``--log-level`` flag)."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _configure_root().setLevel(level)
