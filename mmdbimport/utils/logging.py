# mmdbimport/utils/logging.py

from __future__ import annotations

import logging
from typing import Optional, Union

from mmdbimport.config import LOG_LEVEL

_ROOT = "mmdbimport"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
        root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger under the package namespace.

    Module loggers ("mmdbimport.processing.validate", ...) share the single
    stderr handler installed on the package root.
    """
    root = _root_logger()
    if not name or name == _ROOT:
        return root
    if not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def configure_logging(level: Union[int, str]) -> None:
    """Set the package log level (e.g. from --log-level)."""
    if isinstance(level, str):
        level = level.upper()
    _root_logger().setLevel(level)
