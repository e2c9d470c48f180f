"""Centralized logging helpers for the event approval backend."""
from __future__ import annotations

import logging
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# SQL echo is handled by the engine's own ``echo`` flag, never by the root level.
QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration")


def setup_logging(level: str = "INFO") -> None:
    """Install a single JSON handler on the root logger.

    ``extra={...}`` passed to logging calls ends up as top-level JSON keys,
    which is how services attach event ids, actions and statuses.
    """

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT, rename_fields={"levelname": "level"}))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


__all__ = ["LOG_FORMAT", "get_logger", "setup_logging"]
