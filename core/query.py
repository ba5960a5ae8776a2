"""Filtering, search and ranking of quests for display.

Read-only: every call recomputes the full view from the quest sequence.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from core.models import Quest
from core.timeutil import day_bounds


FILTER_MODES = ("all", "active", "done", "dueToday", "overdue")
FILTER_ALIASES = {"today": "dueToday"}
SORT_MODES = ("smart", "due", "priority", "created")

PRIORITY_WEIGHT = {"high": 3, "normal": 2, "low": 1}
DIFFICULTY_WEIGHT = {"hard": 6, "medium": 3, "easy": 1}


@dataclass(frozen=True)
class QueryParams:
    filter: str = "all"
    text: str = ""
    sort: str = "smart"


def priority_weight(quest: Quest) -> int:
    return PRIORITY_WEIGHT.get(quest.priority, 2)


def due_key(quest: Quest) -> float:
    """Due time as a sortable number; quests without a deadline sort last."""
    return quest.due_at.timestamp() if quest.due_at is not None else math.inf


def due_urgency_bonus(quest: Quest, now: datetime) -> int:
    if quest.due_at is None:
        return 0
    delta = quest.due_at - now
    if delta < timedelta(0):
        return 40
    if delta < timedelta(hours=24):
        return 25
    if delta < timedelta(days=3):
        return 15
    return 0


def smart_score(quest: Quest, now: datetime) -> int:
    score = 0 if quest.done else 50
    score += priority_weight(quest) * 10
    score += due_urgency_bonus(quest, now)
    score += DIFFICULTY_WEIGHT.get(quest.difficulty, 1)
    return score


def matches_text(quest: Quest, text: str) -> bool:
    """Case-insensitive substring match over text, notes and tags."""
    needle = text.strip().lower()
    if not needle:
        return True
    haystack = " ".join([quest.text, quest.notes, *quest.tags]).lower()
    return needle in haystack


def matches_filter(quest: Quest, mode: str, now: datetime) -> bool:
    mode = FILTER_ALIASES.get(mode, mode)
    if mode == "active":
        return not quest.done
    if mode == "done":
        return quest.done
    if mode == "dueToday":
        today0, tomorrow0 = day_bounds(now)
        return quest.due_at is not None and today0 <= quest.due_at < tomorrow0
    if mode == "overdue":
        return not quest.done and quest.due_at is not None and quest.due_at < now
    return True


def sort_quests(quests: list[Quest], mode: str, now: datetime) -> list[Quest]:
    """Stable sort by *mode*; unknown modes keep the input order."""
    if mode == "smart":
        return sorted(quests, key=lambda q: smart_score(q, now), reverse=True)
    if mode == "due":
        return sorted(quests, key=due_key)
    if mode == "priority":
        return sorted(quests, key=lambda q: (-priority_weight(q), due_key(q)))
    if mode == "created":
        return sorted(
            quests,
            key=lambda q: q.created_at.timestamp() if q.created_at is not None else 0,
            reverse=True,
        )
    return list(quests)


def query_quests(
    quests: Iterable[Quest],
    now: datetime,
    filter_mode: str = "all",
    text: str = "",
    sort_mode: str = "smart",
) -> list[Quest]:
    """Search, filter and sort *quests* into a display list."""
    selected = [
        q for q in quests
        if matches_text(q, text) and matches_filter(q, filter_mode, now)
    ]
    return sort_quests(selected, sort_mode, now)


def run_query(quests: Iterable[Quest], params: QueryParams, now: datetime) -> list[Quest]:
    return query_quests(quests, now, params.filter, params.text, params.sort)
