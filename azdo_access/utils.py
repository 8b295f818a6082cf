"""
Shared helpers: logger factory and optional-value unwrapping.
"""
import logging
import sys
from typing import Optional, TypeVar

from azdo_access.core import config

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_root = logging.getLogger("azdo_access")


def _configure_root() -> None:
    if _root.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    _root.addHandler(handler)
    _root.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the package hierarchy.

    Modules outside the package (server.py, scripts) are nested under
    ``azdo_access`` so they share the single stream handler.
    """
    _configure_root()
    if name != "azdo_access" and not name.startswith("azdo_access."):
        name = f"azdo_access.{name}"
    return logging.getLogger(name)


def value_or_default(value: Optional[T], default: T) -> T:
    """Return ``value`` unless it is None, otherwise ``default``."""
    if value is None:
        return default
    return value
