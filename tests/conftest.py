"""Shared test fixtures for TodoQuest tests."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

UTC = ZoneInfo("UTC")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a config.yaml and no state yet."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "log_level": "DEBUG",
        "toast_seconds": 2.8,
        "hooks_enabled": True,
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["TODOQUEST_ROOT"] = str(root)
    yield root
    # Cleanup
    if "TODOQUEST_ROOT" in os.environ:
        del os.environ["TODOQUEST_ROOT"]


@pytest.fixture
def now() -> datetime:
    """Wednesday 2026-02-11 10:00 UTC."""
    return datetime(2026, 2, 11, 10, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime):
    """Mutable clock for QuestStore: set ``clock.now`` to move time."""

    class Clock:
        def __init__(self, start: datetime) -> None:
            self.now = start

        def __call__(self) -> datetime:
            return self.now

    return Clock(now)
