"""Quest ledger: pure state transitions for TodoQuest.

Every mutating function takes the current AppState and returns a new one.
Invalid input (blank text, unknown id) returns the very same state object,
so callers can detect a no-op with ``is``. Each applied mutation stores the
prior state as the single undo snapshot.
"""

from __future__ import annotations

import secrets
from dataclasses import fields, replace
from datetime import datetime, timedelta
from typing import Any, Iterable

from core.models import (
    DIFFICULTIES,
    MAX_TAGS,
    PRIORITIES,
    AppState,
    Quest,
    UIState,
    UndoSnapshot,
)
from core.progression import Award, award_completion, base_xp_for
from core.timeutil import day_bounds, fmt_date_input, parse_date_input


EDITABLE_FIELDS = {f.name for f in fields(Quest)} - {"id"}


# ── Construction ──────────────────────────────────────────────


def new_quest_id(now: datetime) -> str:
    return secrets.token_hex(6) + format(int(now.timestamp() * 1000), "x")


def make_default_state(now: datetime) -> AppState:
    """Fresh state with two starter quests."""
    tomorrow = parse_date_input(fmt_date_input(now + timedelta(days=1)), now.tzinfo)
    return AppState(
        quests=(
            Quest(
                id=new_quest_id(now),
                text="First quest: write down a task",
                created_at=now,
                due_at=tomorrow,
                tags=("start",),
                notes="Tip: difficulty decides the XP reward.",
            ),
            Quest(
                id=new_quest_id(now),
                text="Finish something small and collect XP",
                created_at=now,
                priority="low",
                tags=("xp",),
                notes="Daily streaks earn bonus XP too.",
            ),
        ),
    )


# ── Read helpers ──────────────────────────────────────────────


def find_quest(state: AppState, quest_id: str) -> Quest | None:
    for q in state.quests:
        if q.id == quest_id:
            return q
    return None


def done_today_count(quests: Iterable[Quest], now: datetime) -> int:
    today0, tomorrow0 = day_bounds(now)
    return sum(
        1 for q in quests
        if q.done and q.completed_at is not None and today0 <= q.completed_at < tomorrow0
    )


def active_count(quests: Iterable[Quest]) -> int:
    return sum(1 for q in quests if not q.done)


def overdue_active_count(quests: Iterable[Quest], now: datetime) -> int:
    return sum(1 for q in quests if not q.done and q.due_at is not None and q.due_at < now)


# ── Internals ─────────────────────────────────────────────────


def _snapshot(prev: AppState, nxt: AppState, label: str, now: datetime) -> AppState:
    undo = UndoSnapshot(label=label, previous=prev.without_undo(), at=now)
    return replace(nxt, ui=replace(nxt.ui, last_undo=undo))


def _toast(state: AppState, message: str | None) -> AppState:
    return replace(state, ui=replace(state.ui, toast=message))


def _replace_quest(state: AppState, quest: Quest) -> AppState:
    return replace(state, quests=tuple(quest if q.id == quest.id else q for q in state.quests))


def clean_tags(raw: str | Iterable[str]) -> tuple[str, ...]:
    """Normalize tag input: comma-separated string or iterable, '#' stripped, max 12."""
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    tags = []
    for part in parts:
        tag = str(part).strip()
        if tag.startswith("#"):
            tag = tag[1:]
        if tag:
            tags.append(tag)
    return tuple(tags[:MAX_TAGS])


# ── Mutations ─────────────────────────────────────────────────


def add_quest(state: AppState, text: str, now: datetime, quest_id: str | None = None) -> AppState:
    """Prepend a new quest. Blank text is a no-op."""
    text = (text or "").strip()
    if not text:
        return state
    quest = Quest(id=quest_id or new_quest_id(now), text=text, created_at=now)
    nxt = replace(state, quests=(quest,) + state.quests)
    return _toast(_snapshot(state, nxt, "Undo add", now), "Quest added.")


def update_quest(state: AppState, quest_id: str, changes: dict[str, Any], now: datetime) -> AppState:
    """Replace the supplied fields on one quest.

    Unknown field names are ignored and ``id`` cannot change. The only check
    applied is that ``completed_at`` is set exactly when ``done`` is.
    """
    quest = find_quest(state, quest_id)
    if quest is None:
        return state
    patch = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    if "tags" in patch:
        patch["tags"] = tuple(patch["tags"] or ())
    updated = replace(quest, **patch)
    if not updated.done:
        updated = replace(updated, completed_at=None)
    elif updated.completed_at is None:
        updated = replace(updated, completed_at=now)
    return _snapshot(state, _replace_quest(state, updated), "Undo edit", now)


def edit_quest(
    state: AppState,
    quest_id: str,
    now: datetime,
    *,
    text: str | None = None,
    notes: str | None = None,
    difficulty: str | None = None,
    priority: str | None = None,
    due: str | None = None,
    tags: str | Iterable[str] | None = None,
) -> AppState:
    """Apply edit-form input to a quest.

    Blank titles keep the old title, ``due`` is a ``YYYY-MM-DD`` string ("" clears it),
    tags go through ``clean_tags`` and unknown priority/difficulty values are dropped.
    """
    quest = find_quest(state, quest_id)
    if quest is None:
        return state
    changes: dict[str, Any] = {}
    if text is not None:
        changes["text"] = text.strip() or quest.text
    if notes is not None:
        changes["notes"] = notes
    if difficulty in DIFFICULTIES:
        changes["difficulty"] = difficulty
    if priority in PRIORITIES:
        changes["priority"] = priority
    if due is not None:
        changes["due_at"] = parse_date_input(due, now.tzinfo)
    if tags is not None:
        changes["tags"] = clean_tags(tags)
    return update_quest(state, quest_id, changes, now)


def toggle_completion(state: AppState, quest_id: str, now: datetime) -> tuple[AppState, Award | None]:
    """Complete or reopen a quest.

    Completing awards XP, streak and achievements. Reopening keeps every
    reward already granted. Returns the new state and the award (None unless
    the quest was completed).
    """
    quest = find_quest(state, quest_id)
    if quest is None:
        return state, None

    if quest.done:
        reopened = replace(quest, done=False, completed_at=None)
        nxt = _snapshot(state, _replace_quest(state, reopened), "Undo uncomplete", now)
        return _toast(nxt, "Marked as active."), None

    done_before = done_today_count(state.quests, now)
    completed = replace(quest, done=True, completed_at=now)
    award = award_completion(state.stats, done_before, base_xp_for(quest.difficulty), now)
    nxt = replace(
        _replace_quest(state, completed),
        stats=award.stats,
        achievements=state.achievements.union(award.unlocked),
        profile=replace(state.profile, title=award.title),
    )
    nxt = _snapshot(state, nxt, "Undo complete", now)
    return _toast(nxt, f"+{award.xp_gained} XP (base {award.base_xp} + bonus {award.bonus})"), award


def delete_quest(state: AppState, quest_id: str, now: datetime) -> AppState:
    if find_quest(state, quest_id) is None:
        return state
    nxt = replace(state, quests=tuple(q for q in state.quests if q.id != quest_id))
    return _toast(_snapshot(state, nxt, "Undo delete", now), "Deleted.")


def undo(state: AppState) -> AppState:
    """Restore the snapshot's state. There is no redo and no second step back."""
    snapshot = state.ui.last_undo
    if snapshot is None:
        return state
    return replace(snapshot.previous, ui=UIState(toast="Undone.", last_undo=None))


def reset_all(state: AppState, now: datetime) -> AppState:
    """Replace everything with a default state; one undo brings it back."""
    return _toast(_snapshot(state, make_default_state(now), "Undo reset", now), "Reset done.")


def factory_reset(now: datetime) -> AppState:
    """Default state with no undo snapshot."""
    return make_default_state(now)


def save_settings(
    state: AppState,
    *,
    name: str | None = None,
    color: str | None = None,
    sound: bool | None = None,
    reduce_motion: bool | None = None,
) -> AppState:
    """Update profile name/color and settings. The title is left to progression."""
    profile = state.profile
    if name is not None:
        profile = replace(profile, name=name.strip() or "Player")
    if color is not None and color.strip():
        profile = replace(profile, color=color.strip())
    settings = state.settings
    if sound is not None:
        settings = replace(settings, sound=bool(sound))
    if reduce_motion is not None:
        settings = replace(settings, reduce_motion=bool(reduce_motion))
    return _toast(replace(state, profile=profile, settings=settings), "Settings saved.")


def clear_toast(state: AppState) -> AppState:
    if state.ui.toast is None:
        return state
    return _toast(state, None)
