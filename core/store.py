"""QuestStore: the application state container.

Owns the single current AppState for one workspace. Each method runs a pure
ledger function, and when the state actually changed it publishes the new
state: save to disk, notify subscribers, queue hooks for the background
runner. Front-ends (TUI, API)
talk to this class only.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from core import ledger
from core.config import Config, load_config
from core.hooks import HookRunner
from core.models import ACHIEVEMENTS, AppState, Quest
from core.persistence import load_state, save_state
from core.progression import Award, LevelInfo, level_from_xp
from core.query import query_quests
from core.workspace import workspace_root

logger = logging.getLogger(__name__)

Subscriber = Callable[[AppState], None]

# Actions whose ledger function sets a fresh toast message.
TOAST_ACTIONS = {"add", "delete", "toggle", "undo", "reset_all", "save_settings"}


class QuestStore:
    def __init__(
        self,
        root: Path | None = None,
        now_fn: Callable[[], datetime] | None = None,
        config: Config | None = None,
    ) -> None:
        self.root = root if root is not None else workspace_root()
        self.config = config if config is not None else load_config(self.root)
        self._now_fn = now_fn or self.config.now
        self._hooks = HookRunner(self.root)
        self._subscribers: list[Subscriber] = []
        self._state = load_state(self._now_fn(), self.root)

    @property
    def state(self) -> AppState:
        return self._state

    def now(self) -> datetime:
        return self._now_fn()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call *callback* with every newly published state. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ── Publishing ─────────────────────────────────────────────

    def _publish(self, new_state: AppState, action: str, award: Award | None = None) -> bool:
        if new_state is self._state:
            return False
        old_state = self._state
        self._state = new_state
        logger.debug("Applied %s (%d quests)", action, len(new_state.quests))

        save_state(new_state, self.root)

        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception:
                logger.exception("State subscriber %r failed", callback)

        self._fire_hooks(old_state, new_state, action, award)
        return True

    def _fire_hooks(self, old: AppState, new: AppState, action: str, award: Award | None) -> None:
        if action in TOAST_ACTIONS and new.ui.toast:
            self._emit("on_toast", {"message": new.ui.toast, "action": action})
        if award is None:
            return
        if new.settings.sound:
            self._emit("on_xp_award", {"xp": award.xp_gained, "base": award.base_xp, "bonus": award.bonus})
        old_level = level_from_xp(old.stats.total_xp).level
        if award.level > old_level:
            logger.info("Level up: %d -> %d (%s)", old_level, award.level, award.title)
            self._emit("on_level_up", {"level": award.level, "title": award.title})
        fresh = sorted(new.achievements.unlocked - old.achievements.unlocked)
        if fresh:
            logger.info("Achievements unlocked: %s", ", ".join(fresh))
            self._emit("on_achievement", {"keys": fresh})

    def _emit(self, hook_point: str, context: dict[str, Any]) -> None:
        if not self.config.hooks_enabled:
            return
        self._hooks.submit(hook_point, context)

    def wait_for_hooks(self, timeout: float | None = None) -> bool:
        """Block until queued hook commands have finished. False on timeout."""
        return self._hooks.wait(timeout)

    # ── Ledger operations ──────────────────────────────────────

    def add(self, text: str) -> Quest | None:
        """Add a quest; returns it, or None when the text was blank."""
        new_state = ledger.add_quest(self._state, text, self.now())
        if not self._publish(new_state, "add"):
            return None
        return new_state.quests[0]

    def update(self, quest_id: str, changes: dict[str, Any]) -> bool:
        return self._publish(ledger.update_quest(self._state, quest_id, changes, self.now()), "update")

    def edit(self, quest_id: str, **form: Any) -> bool:
        return self._publish(ledger.edit_quest(self._state, quest_id, self.now(), **form), "edit")

    def delete(self, quest_id: str) -> bool:
        return self._publish(ledger.delete_quest(self._state, quest_id, self.now()), "delete")

    def toggle(self, quest_id: str) -> Award | None:
        """Toggle completion; returns the award when the quest was completed."""
        new_state, award = ledger.toggle_completion(self._state, quest_id, self.now())
        self._publish(new_state, "toggle", award)
        return award

    def undo(self) -> bool:
        return self._publish(ledger.undo(self._state), "undo")

    def reset_all(self) -> bool:
        return self._publish(ledger.reset_all(self._state, self.now()), "reset_all")

    def factory_reset(self) -> bool:
        return self._publish(ledger.factory_reset(self.now()), "factory_reset")

    def save_settings(self, **settings: Any) -> bool:
        return self._publish(ledger.save_settings(self._state, **settings), "save_settings")

    def clear_toast(self) -> bool:
        return self._publish(ledger.clear_toast(self._state), "clear_toast")

    # ── Read side ──────────────────────────────────────────────

    def find(self, quest_id: str) -> Quest | None:
        return ledger.find_quest(self._state, quest_id)

    def view(self, filter_mode: str = "all", text: str = "", sort_mode: str = "smart") -> list[Quest]:
        return query_quests(self._state.quests, self.now(), filter_mode, text, sort_mode)

    def level_info(self) -> LevelInfo:
        return level_from_xp(self._state.stats.total_xp)

    def hud(self) -> dict[str, Any]:
        """Numbers for a status line: level, XP progress, streak, counts."""
        now = self.now()
        info = self.level_info()
        quests = self._state.quests
        return {
            "name": self._state.profile.name,
            "title": self._state.profile.title,
            "level": info.level,
            "xpIntoLevel": info.xp_into_level,
            "xpForNext": info.xp_for_next,
            "totalXP": self._state.stats.total_xp,
            "streakDays": self._state.stats.streak_days,
            "totalCompleted": self._state.stats.total_completed,
            "active": ledger.active_count(quests),
            "doneToday": ledger.done_today_count(quests, now),
            "overdue": ledger.overdue_active_count(quests, now),
            "canUndo": self._state.ui.last_undo is not None,
            "undoLabel": self._state.ui.last_undo.label if self._state.ui.last_undo else None,
        }

    def achievements_view(self) -> list[dict[str, Any]]:
        """Catalog entries with their unlocked flag.

        Level achievements also show as unlocked when the current level
        already qualifies, even if the flag was never stored.
        """
        level = self.level_info().level
        unlocked = self._state.achievements
        out = []
        for a in ACHIEVEMENTS:
            is_unlocked = unlocked.is_unlocked(a.key)
            if a.key == "level_5":
                is_unlocked = is_unlocked or level >= 5
            elif a.key == "level_10":
                is_unlocked = is_unlocked or level >= 10
            out.append({"key": a.key, "title": a.title, "description": a.description, "unlocked": is_unlocked})
        return out
