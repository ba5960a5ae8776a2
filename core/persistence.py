"""Load and save the TodoQuest state file (state.json)."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from core.fileio import move_aside, read_json, write_json_atomic
from core.ledger import make_default_state
from core.models import AppState
from core.progression import level_from_xp, title_for_level
from core.workspace import state_path, workspace_root

logger = logging.getLogger(__name__)


def _quarantine(path: Path, now: datetime) -> None:
    """Keep an unusable state file around instead of letting the next save replace it."""
    try:
        target = move_aside(path, f"corrupt-{now:%Y%m%dT%H%M%S}")
    except OSError:
        logger.exception("Could not move unusable state file %s aside", path)
        return
    if target is not None:
        logger.warning("Moved unusable state file to %s", target)


def load_state(now: datetime, root: Path | None = None) -> AppState:
    """Rebuild the saved state, merging each section against defaults.

    A missing, unreadable or malformed file yields a fresh default state;
    a malformed one is first renamed out of the way.
    The profile title is re-derived from XP rather than trusted from disk.
    """
    if root is None:
        root = workspace_root()
    path = state_path(root)
    default = make_default_state(now)
    try:
        raw = read_json(path)
    except (UnicodeDecodeError, ValueError):
        logger.warning("Could not parse %s, starting from defaults", path, exc_info=True)
        _quarantine(path, now)
        return default
    except OSError:
        logger.warning("Could not read %s, starting from defaults", path, exc_info=True)
        return default
    if raw is None:
        return default
    if not isinstance(raw, dict):
        logger.warning("Unexpected content in %s, starting from defaults", path)
        _quarantine(path, now)
        return default

    state = AppState.from_dict(raw, default)
    title = title_for_level(level_from_xp(state.stats.total_xp).level)
    if state.profile.title != title:
        state = replace(state, profile=replace(state.profile, title=title))
    return state


def save_state(state: AppState, root: Path | None = None) -> bool:
    """Write *state* to disk. Failures are logged and reported as False, never raised."""
    if root is None:
        root = workspace_root()
    path = state_path(root)
    try:
        write_json_atomic(path, state.to_dict())
    except (OSError, TypeError, ValueError):
        logger.exception("Failed to save state to %s", path)
        return False
    return True
