"""Typed dataclasses for the TodoQuest data model.

All models are frozen; every change builds a new value with dataclasses.replace.
All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing or malformed keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any

from core.timeutil import parse_day, parse_timestamp


PRIORITIES = ("low", "normal", "high")
DIFFICULTIES = ("easy", "medium", "hard")
MAX_TAGS = 12


def _int(value: Any, default: int = 0) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _section(d: dict[str, Any], key: str) -> dict[str, Any]:
    value = d.get(key)
    return value if isinstance(value, dict) else {}


# ── Quests ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Quest:
    id: str = ""
    text: str = ""
    done: bool = False
    created_at: datetime | None = None
    completed_at: datetime | None = None  # set iff done
    due_at: datetime | None = None  # end of the chosen day; None = no deadline
    priority: str = "normal"  # low, normal, high
    difficulty: str = "easy"  # easy, medium, hard
    tags: tuple[str, ...] = ()
    notes: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Quest:
        done = bool(d.get("done", False))
        created_at = parse_timestamp(d.get("createdAt"))
        completed_at = parse_timestamp(d.get("completedAt")) if done else None
        if done and completed_at is None:
            completed_at = created_at
        if done and completed_at is None:
            # no timestamp to date the completion by
            done = False
        tags = d.get("tags") or []
        return cls(
            id=str(d.get("id", "")),
            text=str(d.get("text", "")),
            done=done,
            created_at=created_at,
            completed_at=completed_at,
            due_at=parse_timestamp(d.get("dueAt")),
            priority=str(d.get("priority") or "normal"),
            difficulty=str(d.get("difficulty") or "easy"),
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
            notes=str(d.get("notes") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "done": self.done,
            "createdAt": _iso(self.created_at),
            "completedAt": _iso(self.completed_at),
            "dueAt": _iso(self.due_at),
            "priority": self.priority,
            "difficulty": self.difficulty,
            "tags": list(self.tags),
            "notes": self.notes,
        }


# ── Progression ───────────────────────────────────────────────


@dataclass(frozen=True)
class Stats:
    total_xp: int = 0
    streak_days: int = 0
    last_complete_day: date | None = None
    total_completed: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Stats:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            total_xp=_int(d.get("totalXP")),
            streak_days=_int(d.get("streakDays")),
            last_complete_day=parse_day(d.get("lastCompleteDay")),
            total_completed=_int(d.get("totalCompleted")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalXP": self.total_xp,
            "streakDays": self.streak_days,
            "lastCompleteDay": self.last_complete_day.isoformat() if self.last_complete_day else None,
            "totalCompleted": self.total_completed,
        }


@dataclass(frozen=True)
class AchievementDef:
    key: str
    title: str
    description: str


ACHIEVEMENTS = (
    AchievementDef("first_done", "First Blood", "Complete your first quest."),
    AchievementDef("streak_3", "On Fire", "Keep a 3 day streak."),
    AchievementDef("streak_7", "Unstoppable", "Keep a 7 day streak."),
    AchievementDef("completed_10", "Task Slayer", "Complete 10 quests in total."),
    AchievementDef("completed_50", "Productivity Boss", "Complete 50 quests in total."),
    AchievementDef("level_5", "Level 5", "Reach level 5."),
    AchievementDef("level_10", "Level 10", "Reach level 10."),
)
ACHIEVEMENT_KEYS = tuple(a.key for a in ACHIEVEMENTS)


@dataclass(frozen=True)
class Achievements:
    """Unlocked achievement keys. Only ever grows (see ``union``)."""

    unlocked: frozenset[str] = frozenset()

    def is_unlocked(self, key: str) -> bool:
        return key in self.unlocked

    def union(self, keys: frozenset[str] | set[str]) -> Achievements:
        return Achievements(self.unlocked | (frozenset(keys) & frozenset(ACHIEVEMENT_KEYS)))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Achievements:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(frozenset(k for k in ACHIEVEMENT_KEYS if d.get(k) is True))

    def to_dict(self) -> dict[str, bool]:
        return {k: k in self.unlocked for k in ACHIEVEMENT_KEYS}


# ── Profile & settings ────────────────────────────────────────


@dataclass(frozen=True)
class Profile:
    name: str = "Player"
    title: str = "Rookie"  # derived from level, written by progression only
    color: str = "#7c3aed"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Profile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            name=str(d.get("name") or "Player"),
            title=str(d.get("title") or "Rookie"),
            color=str(d.get("color") or "#7c3aed"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "title": self.title, "color": self.color}


@dataclass(frozen=True)
class Settings:
    sound: bool = True
    reduce_motion: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            sound=bool(d.get("sound", True)),
            reduce_motion=bool(d.get("reduceMotion", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"sound": self.sound, "reduceMotion": self.reduce_motion}


# ── State ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class UndoSnapshot:
    label: str
    previous: AppState  # stored without its own snapshot
    at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "at": self.at.isoformat(), "prev": self.previous.to_dict()}


@dataclass(frozen=True)
class UIState:
    toast: str | None = None
    last_undo: UndoSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "toast": self.toast,
            "lastUndo": self.last_undo.to_dict() if self.last_undo else None,
        }


@dataclass(frozen=True)
class AppState:
    profile: Profile = field(default_factory=Profile)
    stats: Stats = field(default_factory=Stats)
    settings: Settings = field(default_factory=Settings)
    achievements: Achievements = field(default_factory=Achievements)
    quests: tuple[Quest, ...] = ()  # most recently added first
    ui: UIState = field(default_factory=UIState)

    @classmethod
    def from_dict(cls, d: dict[str, Any], default: AppState | None = None) -> AppState:
        """Rebuild a state, merging every section against *default*.

        A missing or non-list quest section keeps the default quests.
        """
        if default is None:
            default = cls()
        if not d or not isinstance(d, dict):
            return default

        raw_quests = d.get("quests", d.get("todos"))
        if isinstance(raw_quests, list):
            quests = tuple(Quest.from_dict(q) for q in raw_quests if isinstance(q, dict))
        else:
            quests = default.quests

        ui = _section(d, "ui")
        toast = ui.get("toast")
        last_undo = None
        raw_undo = ui.get("lastUndo")
        if isinstance(raw_undo, dict) and isinstance(raw_undo.get("prev"), dict):
            previous = cls.from_dict(raw_undo["prev"], default)
            last_undo = UndoSnapshot(
                label=str(raw_undo.get("label") or "Undo"),
                previous=previous.without_undo(),
                at=parse_timestamp(raw_undo.get("at")) or datetime.fromtimestamp(0, timezone.utc),
            )

        return cls(
            profile=Profile.from_dict({**default.profile.to_dict(), **_section(d, "profile")}),
            stats=Stats.from_dict({**default.stats.to_dict(), **_section(d, "stats")}),
            settings=Settings.from_dict({**default.settings.to_dict(), **_section(d, "settings")}),
            achievements=Achievements.from_dict({**default.achievements.to_dict(), **_section(d, "achievements")}),
            quests=quests,
            ui=UIState(toast=str(toast) if toast else None, last_undo=last_undo),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "stats": self.stats.to_dict(),
            "settings": self.settings.to_dict(),
            "achievements": self.achievements.to_dict(),
            "quests": [q.to_dict() for q in self.quests],
            "ui": self.ui.to_dict(),
        }

    def without_undo(self) -> AppState:
        if self.ui.last_undo is None:
            return self
        return replace(self, ui=replace(self.ui, last_undo=None))
