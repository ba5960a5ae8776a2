"""Levels, streaks, XP awards and achievements for TodoQuest."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from core.models import Stats
from core.timeutil import today_and_yesterday


MAX_LEVEL = 999

DIFFICULTY_XP = {"easy": 10, "medium": 20, "hard": 40}
DEFAULT_BASE_XP = 10

TITLES = ((10, "Legend"), (7, "Pro"), (5, "Adventurer"), (3, "Apprentice"))
DEFAULT_TITLE = "Rookie"


@dataclass(frozen=True)
class LevelInfo:
    level: int
    xp_into_level: int
    xp_for_next: int


@dataclass(frozen=True)
class Award:
    """Outcome of one completion: the new stats plus what changed."""

    stats: Stats
    xp_gained: int
    base_xp: int
    streak_bonus: int
    today_bonus: int
    level: int
    title: str
    unlocked: frozenset[str]  # achievement keys whose conditions hold after this completion

    @property
    def bonus(self) -> int:
        return self.streak_bonus + self.today_bonus


def level_requirement(level: int) -> int:
    """XP needed to go from *level* to *level* + 1."""
    return 100 + (level - 1) * 25


def level_from_xp(total_xp: int) -> LevelInfo:
    """Derive level, XP within that level, and XP needed for the next one.

    XP left over once the level passes MAX_LEVEL is discarded.
    """
    level = 1
    xp = max(0, total_xp)
    while True:
        req = level_requirement(level)
        if xp < req:
            return LevelInfo(level=level, xp_into_level=xp, xp_for_next=req)
        xp -= req
        level += 1
        if level > MAX_LEVEL:
            return LevelInfo(level=MAX_LEVEL, xp_into_level=0, xp_for_next=1)


def title_for_level(level: int) -> str:
    for threshold, title in TITLES:
        if level >= threshold:
            return title
    return DEFAULT_TITLE


def base_xp_for(difficulty: str) -> int:
    return DIFFICULTY_XP.get(difficulty, DEFAULT_BASE_XP)


def streak_bonus(streak_days: int) -> int:
    if streak_days >= 7:
        return 10
    if streak_days >= 3:
        return 5
    return 0


def next_streak(stats: Stats, now: datetime) -> int:
    """Streak after a completion at *now*.

    Same day keeps the streak, the day after extends it, any gap restarts at 1.
    """
    today, yesterday = today_and_yesterday(now)
    if stats.last_complete_day == today:
        return stats.streak_days
    if stats.last_complete_day == yesterday:
        return stats.streak_days + 1
    return 1


def unlocked_achievements(stats: Stats, level: int) -> frozenset[str]:
    """Achievement keys whose conditions *stats* and *level* satisfy."""
    keys = set()
    if stats.total_completed >= 1:
        keys.add("first_done")
    if stats.streak_days >= 3:
        keys.add("streak_3")
    if stats.streak_days >= 7:
        keys.add("streak_7")
    if stats.total_completed >= 10:
        keys.add("completed_10")
    if stats.total_completed >= 50:
        keys.add("completed_50")
    if level >= 5:
        keys.add("level_5")
    if level >= 10:
        keys.add("level_10")
    return frozenset(keys)


def award_completion(stats: Stats, done_today_before: int, base_xp: int, now: datetime) -> Award:
    """Apply one quest completion to *stats*.

    ``done_today_before`` counts completions earlier today, excluding this one;
    the first completion of a day earns a +5 bonus.
    """
    streak = next_streak(stats, now)
    s_bonus = streak_bonus(streak)
    t_bonus = 5 if done_today_before == 0 else 0
    gained = base_xp + s_bonus + t_bonus

    new_stats = replace(
        stats,
        total_xp=stats.total_xp + gained,
        streak_days=streak,
        last_complete_day=now.date(),
        total_completed=stats.total_completed + 1,
    )
    level = level_from_xp(new_stats.total_xp).level
    return Award(
        stats=new_stats,
        xp_gained=gained,
        base_xp=base_xp,
        streak_bonus=s_bonus,
        today_bonus=t_bonus,
        level=level,
        title=title_for_level(level),
        unlocked=unlocked_achievements(new_stats, level),
    )
