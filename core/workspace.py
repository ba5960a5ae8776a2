"""Workspace root and path helpers for TodoQuest."""

from __future__ import annotations

import os
from pathlib import Path


def workspace_root() -> Path:
    """Get the workspace root directory (holds state.json, config.yaml, logs/)."""
    return Path(
        os.environ.get("TODOQUEST_ROOT", str(Path.home() / "todoquest"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def state_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state.json"


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "logs" / "todoquest.log"
