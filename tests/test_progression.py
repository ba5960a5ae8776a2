"""Tests for core/progression.py — levels, streaks, awards."""

from datetime import date, timedelta

import pytest

from core.models import Stats
from core.progression import (
    MAX_LEVEL,
    LevelInfo,
    award_completion,
    base_xp_for,
    level_from_xp,
    level_requirement,
    next_streak,
    streak_bonus,
    title_for_level,
    unlocked_achievements,
)


def test_level_from_xp_start():
    assert level_from_xp(0) == LevelInfo(level=1, xp_into_level=0, xp_for_next=100)


def test_level_from_xp_thresholds():
    assert level_from_xp(99) == LevelInfo(1, 99, 100)
    assert level_from_xp(100) == LevelInfo(2, 0, 125)
    assert level_from_xp(224) == LevelInfo(2, 124, 125)
    assert level_from_xp(225) == LevelInfo(3, 0, 150)
    assert level_from_xp(550).level == 5
    assert level_from_xp(1800).level == 10


def test_level_from_xp_consumes_exactly_total():
    for total in range(0, 20000, 37):
        info = level_from_xp(total)
        consumed = sum(level_requirement(lv) for lv in range(1, info.level))
        assert info.xp_into_level < info.xp_for_next
        assert consumed + info.xp_into_level == total


def test_level_from_xp_cap():
    below_cap = sum(level_requirement(lv) for lv in range(1, MAX_LEVEL))
    assert level_from_xp(below_cap) == LevelInfo(MAX_LEVEL, 0, level_requirement(MAX_LEVEL))
    assert level_from_xp(10**9) == LevelInfo(MAX_LEVEL, 0, 1)


@pytest.mark.parametrize(
    "level,title",
    [(1, "Rookie"), (2, "Rookie"), (3, "Apprentice"), (4, "Apprentice"), (5, "Adventurer"),
     (7, "Pro"), (9, "Pro"), (10, "Legend"), (999, "Legend")],
)
def test_title_for_level(level, title):
    assert title_for_level(level) == title


def test_base_xp_for_difficulty():
    assert base_xp_for("easy") == 10
    assert base_xp_for("medium") == 20
    assert base_xp_for("hard") == 40
    assert base_xp_for("legendary") == 10


def test_streak_bonus_tiers():
    assert [streak_bonus(n) for n in (0, 1, 2, 3, 6, 7, 30)] == [0, 0, 0, 5, 5, 10, 10]


def test_next_streak(now):
    today = now.date()
    assert next_streak(Stats(streak_days=4, last_complete_day=today), now) == 4
    assert next_streak(Stats(streak_days=4, last_complete_day=today - timedelta(days=1)), now) == 5
    assert next_streak(Stats(streak_days=4, last_complete_day=today - timedelta(days=2)), now) == 1
    assert next_streak(Stats(), now) == 1


def test_first_completion_scenario(now):
    award = award_completion(Stats(), done_today_before=0, base_xp=10, now=now)
    assert award.stats.total_xp == 15
    assert award.stats.streak_days == 1
    assert award.stats.total_completed == 1
    assert award.stats.last_complete_day == now.date()
    assert award.xp_gained == 15
    assert award.bonus == 5
    assert award.level == 1
    assert award.title == "Rookie"
    assert award.unlocked == frozenset({"first_done"})


def test_second_completion_same_day(now):
    first = award_completion(Stats(), 0, 10, now)
    second = award_completion(first.stats, 1, 10, now + timedelta(hours=2))
    assert second.stats.streak_days == 1
    assert second.today_bonus == 0
    assert second.xp_gained == 10
    assert second.stats.total_xp == 25
    assert second.stats.total_completed == 2


def test_consecutive_day_extends_streak(now):
    stats = Stats(total_xp=50, streak_days=2, last_complete_day=now.date() - timedelta(days=1), total_completed=3)
    award = award_completion(stats, 0, 20, now)
    assert award.stats.streak_days == 3
    assert award.streak_bonus == 5
    assert award.xp_gained == 30
    assert "streak_3" in award.unlocked


def test_seven_day_streak_bonus(now):
    stats = Stats(streak_days=6, last_complete_day=now.date() - timedelta(days=1), total_completed=6)
    award = award_completion(stats, 0, 40, now)
    assert award.stats.streak_days == 7
    assert award.streak_bonus == 10
    assert award.xp_gained == 55
    assert {"streak_3", "streak_7"} <= award.unlocked


def test_gap_resets_streak(now):
    stats = Stats(streak_days=10, last_complete_day=date(2026, 2, 1), total_completed=20)
    award = award_completion(stats, 0, 10, now)
    assert award.stats.streak_days == 1
    assert award.streak_bonus == 0


def test_level_up_unlocks_and_title(now):
    stats = Stats(total_xp=540, streak_days=1, last_complete_day=now.date(), total_completed=9)
    award = award_completion(stats, 0, 10, now)
    assert award.stats.total_xp == 555
    assert award.level == 5
    assert award.title == "Adventurer"
    assert {"level_5", "completed_10"} <= award.unlocked
    assert "level_10" not in award.unlocked


def test_unlocked_achievements_thresholds():
    stats = Stats(streak_days=7, total_completed=50)
    assert unlocked_achievements(stats, 10) == frozenset(
        {"first_done", "streak_3", "streak_7", "completed_10", "completed_50", "level_5", "level_10"}
    )
    assert unlocked_achievements(Stats(), 1) == frozenset()
