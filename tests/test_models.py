"""Tests for core/models.py — dataclass serialization round-trips."""

from datetime import date, datetime

from core.models import (
    ACHIEVEMENT_KEYS,
    Achievements,
    AppState,
    Profile,
    Quest,
    Settings,
    Stats,
    UIState,
    UndoSnapshot,
)
from tests.helpers import UTC, make_quest, make_state


def test_quest_roundtrip():
    q = make_quest(
        "q1",
        done=True,
        completed_at=datetime(2026, 2, 11, 10, 0, tzinfo=UTC),
        due_at=datetime(2026, 2, 12, 23, 59, 59, tzinfo=UTC),
        priority="high",
        difficulty="hard",
        tags=("home", "errand"),
        notes="bring receipt",
    )
    d = q.to_dict()
    assert d["createdAt"].startswith("2026-02-01T09:00")
    assert d["tags"] == ["home", "errand"]
    assert Quest.from_dict(d) == q


def test_quest_from_dict_defaults():
    q = Quest.from_dict({"id": "x", "text": "Hi"})
    assert q.done is False
    assert q.priority == "normal"
    assert q.difficulty == "easy"
    assert q.tags == ()
    assert q.due_at is None and q.completed_at is None


def test_quest_completed_at_follows_done_on_load():
    open_with_stamp = Quest.from_dict({"id": "a", "done": False, "completedAt": "2026-02-11T10:00:00+00:00"})
    assert open_with_stamp.completed_at is None
    done_without_stamp = Quest.from_dict({"id": "b", "done": True, "createdAt": "2026-02-01T09:00:00+00:00"})
    assert done_without_stamp.completed_at == datetime(2026, 2, 1, 9, 0, tzinfo=UTC)


def test_quest_done_without_any_timestamp_loads_active():
    q = Quest.from_dict({"id": "c", "text": "Mystery", "done": True})
    assert q.done is False
    assert q.completed_at is None


def test_stats_roundtrip():
    s = Stats(total_xp=340, streak_days=4, last_complete_day=date(2026, 2, 10), total_completed=21)
    d = s.to_dict()
    assert d == {"totalXP": 340, "streakDays": 4, "lastCompleteDay": "2026-02-10", "totalCompleted": 21}
    assert Stats.from_dict(d) == s


def test_stats_from_dict_malformed():
    s = Stats.from_dict({"totalXP": "lots", "streakDays": -3, "lastCompleteDay": "yesterday"})
    assert s == Stats()


def test_achievements_from_dict_only_true_flags():
    a = Achievements.from_dict({"first_done": True, "streak_3": "yes", "bogus": True, "level_5": 1})
    assert a.unlocked == frozenset({"first_done"})
    assert set(a.to_dict()) == set(ACHIEVEMENT_KEYS)


def test_achievements_union_ignores_unknown_keys():
    a = Achievements(frozenset({"first_done"})).union({"streak_3", "made_up"})
    assert a.unlocked == frozenset({"first_done", "streak_3"})


def test_profile_and_settings_defaults():
    assert Profile.from_dict({}) == Profile()
    assert Settings.from_dict({"reduceMotion": True}) == Settings(sound=True, reduce_motion=True)
    assert Settings(sound=False).to_dict() == {"sound": False, "reduceMotion": False}


def test_appstate_roundtrip_with_undo():
    prev = make_state(make_quest("a"))
    snapshot = UndoSnapshot(label="Undo delete", previous=prev, at=datetime(2026, 2, 11, tzinfo=UTC))
    state = make_state(ui=UIState(toast="Deleted.", last_undo=snapshot))
    restored = AppState.from_dict(state.to_dict())
    assert restored == state


def test_appstate_strips_nested_undo():
    inner = {"label": "Undo add", "at": "2026-02-10T00:00:00+00:00", "prev": {"quests": []}}
    outer = {
        "quests": [],
        "ui": {"lastUndo": {"label": "Undo edit", "at": "2026-02-11T00:00:00+00:00",
                            "prev": {"quests": [], "ui": {"lastUndo": inner}}}},
    }
    state = AppState.from_dict(outer)
    assert state.ui.last_undo.label == "Undo edit"
    assert state.ui.last_undo.previous.ui.last_undo is None


def test_appstate_merges_partial_sections():
    default = make_state(make_quest("starter"), profile=Profile(name="Default"))
    state = AppState.from_dict({"profile": {"color": "#000000"}, "stats": {"totalXP": 120}}, default)
    assert state.profile.name == "Default"
    assert state.profile.color == "#000000"
    assert state.stats.total_xp == 120
    assert [q.id for q in state.quests] == ["starter"]
    assert state.settings == Settings()


def test_appstate_non_list_quests_keep_default():
    default = make_state(make_quest("starter"))
    assert AppState.from_dict({"quests": "oops"}, default).quests == default.quests
    assert AppState.from_dict({"quests": []}, default).quests == ()


def test_appstate_accepts_todos_key():
    state = AppState.from_dict({"todos": [{"id": "legacy", "text": "Old"}]})
    assert [q.id for q in state.quests] == ["legacy"]


def test_appstate_from_garbage_returns_default():
    default = make_state(make_quest("starter"))
    assert AppState.from_dict(None, default) is default
    assert AppState.from_dict([], default) is default


def test_without_undo():
    state = make_state()
    assert state.without_undo() is state
    snap = UndoSnapshot(label="Undo add", previous=state, at=datetime(2026, 2, 11, tzinfo=UTC))
    with_undo = make_state(ui=UIState(toast="x", last_undo=snap))
    stripped = with_undo.without_undo()
    assert stripped.ui.last_undo is None
    assert stripped.ui.toast == "x"
