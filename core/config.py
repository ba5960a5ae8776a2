"""User configuration (config.yaml) for TodoQuest.

Keys:
- timezone: IANA name used for day boundaries (default UTC)
- log_level: logging level name (default INFO, env TODOQUEST_LOG_LEVEL wins)
- toast_seconds: how long front-ends show a toast (default 2.8)
- hooks_enabled: run hooks.yaml commands on ledger events (default true)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from core.fileio import read_yaml, write_yaml_atomic
from core.workspace import config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Config:
    timezone: str = "UTC"
    log_level: str = "INFO"
    toast_seconds: float = 2.8
    hooks_enabled: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        if not d or not isinstance(d, dict):
            return cls()
        level = str(d.get("log_level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            level = "INFO"
        try:
            toast_seconds = float(d.get("toast_seconds", 2.8))
        except (TypeError, ValueError):
            toast_seconds = 2.8
        timezone = str(d.get("timezone") or "UTC")
        try:
            ZoneInfo(timezone)
        except (ValueError, ZoneInfoNotFoundError):
            logger.warning("Unknown timezone %r in config, using UTC", timezone)
            timezone = "UTC"
        return cls(
            timezone=timezone,
            log_level=level,
            toast_seconds=max(0.5, toast_seconds),
            hooks_enabled=bool(d.get("hooks_enabled", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "log_level": self.log_level,
            "toast_seconds": self.toast_seconds,
            "hooks_enabled": self.hooks_enabled,
        }

    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        return datetime.now(self.zone())


def load_config(root: Path | None = None) -> Config:
    """Load config.yaml, applying the TODOQUEST_LOG_LEVEL override."""
    if root is None:
        root = workspace_root()
    try:
        data = read_yaml(config_path(root))
    except (OSError, yaml.YAMLError):
        logger.warning("Unreadable config at %s, using defaults", config_path(root))
        data = {}
    env_level = os.environ.get("TODOQUEST_LOG_LEVEL", "").strip()
    if env_level:
        data = {**data, "log_level": env_level}
    return Config.from_dict(data)


def ensure_workspace(root: Path | None = None) -> Path:
    """Create the workspace directory and a default config.yaml if missing."""
    if root is None:
        root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    path = config_path(root)
    if not path.exists():
        write_yaml_atomic(path, Config().to_dict())
    return root
