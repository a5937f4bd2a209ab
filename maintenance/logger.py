"""Logging setup shared by the engine, the CLI and the web app."""

import logging
from typing import Optional

from .settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S%z"

_configured = False


def init_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    lvl = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(lvl)
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Module-level getter: log = get_logger(__name__)."""
    return logging.getLogger(name)
