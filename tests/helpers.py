"""Builders for quests and states used across tests."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from core.models import AppState, Quest

UTC = ZoneInfo("UTC")


def make_quest(quest_id: str, **kwargs) -> Quest:
    kwargs.setdefault("text", f"Quest {quest_id}")
    kwargs.setdefault("created_at", datetime(2026, 2, 1, 9, 0, tzinfo=UTC))
    return Quest(id=quest_id, **kwargs)


def make_state(*quests: Quest, **kwargs) -> AppState:
    return AppState(quests=tuple(quests), **kwargs)
