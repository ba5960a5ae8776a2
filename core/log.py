"""Application-wide logging into the workspace logs/ directory."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.workspace import log_path, workspace_root

APP_LOGGER = "todoquest"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3


def setup_logging(root: Path | None = None, level: str = "INFO") -> logging.Logger:
    """Attach a rotating file handler to the ``todoquest`` logger.

    Module loggers under ``core.*``, ``cli.*`` and ``ui.*`` are routed here too.
    Calling this again only adjusts the level.
    """
    if root is None:
        root = workspace_root()

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    if logger.handlers:
        for name in ("core", "cli", "ui"):
            logging.getLogger(name).setLevel(level)
        return logger

    path = log_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False

    for name in ("core", "cli", "ui"):
        child = logging.getLogger(name)
        child.setLevel(level)
        if handler not in child.handlers:
            child.addHandler(handler)
        child.propagate = False
    return logger
