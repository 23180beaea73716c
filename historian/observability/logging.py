"""Logger factory: one stream handler on the root logger, level from HISTORIAN_LOG_LEVEL."""

from __future__ import annotations

import logging
import os
from typing import Final

_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SDK loggers that are chatty at INFO (gRPC channel setup, HTTP request lines)
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("google", "grpc", "httpx", "urllib3")

_configured: bool = False


def _resolve_level() -> int:
    level_name = os.getenv("HISTORIAN_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _configure_root(level: int) -> None:
    global _configured

    root = logging.getLogger()
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))
        _configured = True
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the first call installs the shared handler."""
    level = _resolve_level()
    _configure_root(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
