#!/usr/bin/env python3
"""TodoQuest TUI — interactive terminal quest log powered by Textual."""

from __future__ import annotations

import logging

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Select,
    Static,
)
from textual.widgets.data_table import CellDoesNotExist, RowDoesNotExist

from core import (
    FILTER_MODES,
    SORT_MODES,
    AppState,
    Quest,
    QuestStore,
    QueryParams,
    ensure_workspace,
    fmt_date_input,
    load_config,
    progress_pct,
    run_query,
    setup_logging,
    workspace_root,
)
from core.models import DIFFICULTIES, PRIORITIES

logger = logging.getLogger(__name__)


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#hud {
    height: auto;
    padding: 0 2;
    background: $primary-background;
    color: $text;
}

#view-line {
    height: 1;
    padding: 0 2;
    color: $text-muted;
}

#new-quest {
    margin: 0 1;
}

#search {
    margin: 0 1;
    display: none;
}

#quests {
    height: 1fr;
}

.modal-body {
    width: 70;
    height: auto;
    max-height: 90%;
    padding: 1 2;
    border: tall $primary-background-darken-2;
    background: $surface;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
}

.button-row {
    height: auto;
    margin: 1 0 0 0;
}

.button-row Button {
    margin: 0 1 0 0;
}

EditQuestScreen, AchievementsScreen, SettingsScreen {
    align: center middle;
}
"""


# ── Helpers ────────────────────────────────────────────────────


def _tags_cell(tags: tuple[str, ...]) -> str:
    shown = " ".join(f"#{t}" for t in tags[:4])
    if len(tags) > 4:
        shown += f" +{len(tags) - 4}"
    return shown


def _progress_bar(value: int, maximum: int, width: int = 20) -> str:
    filled = int(round(progress_pct(value, maximum) / 100 * width))
    return "█" * filled + "░" * (width - filled)


# ── Modal screens ──────────────────────────────────────────────


class EditQuestScreen(ModalScreen[dict | None]):
    """Edit form for a single quest. Dismisses with the form values or None."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, quest: Quest) -> None:
        super().__init__()
        self.quest = quest

    def compose(self) -> ComposeResult:
        q = self.quest
        with VerticalScroll(classes="modal-body"):
            yield Label("Edit quest", classes="section-title")
            yield Label("Title")
            yield Input(value=q.text, id="edit-text")
            yield Label("Notes")
            yield Input(value=q.notes, id="edit-notes")
            yield Label("Difficulty")
            yield Select(
                [(d.capitalize(), d) for d in DIFFICULTIES],
                value=q.difficulty if q.difficulty in DIFFICULTIES else "easy",
                allow_blank=False,
                id="edit-difficulty",
            )
            yield Label("Priority")
            yield Select(
                [(p.capitalize(), p) for p in PRIORITIES],
                value=q.priority if q.priority in PRIORITIES else "normal",
                allow_blank=False,
                id="edit-priority",
            )
            yield Label("Due date (YYYY-MM-DD, empty = none)")
            yield Input(value=fmt_date_input(q.due_at), id="edit-due")
            yield Label("Tags (comma separated)")
            yield Input(value=", ".join(q.tags), id="edit-tags")
            with Horizontal(classes="button-row"):
                yield Button("Save", variant="primary", id="edit-save")
                yield Button("Cancel", id="edit-cancel")

    @on(Button.Pressed, "#edit-save")
    def _save(self) -> None:
        self.dismiss({
            "text": self.query_one("#edit-text", Input).value,
            "notes": self.query_one("#edit-notes", Input).value,
            "difficulty": self.query_one("#edit-difficulty", Select).value,
            "priority": self.query_one("#edit-priority", Select).value,
            "due": self.query_one("#edit-due", Input).value,
            "tags": self.query_one("#edit-tags", Input).value,
        })

    @on(Button.Pressed, "#edit-cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class AchievementsScreen(ModalScreen[None]):
    """Read-only achievement list."""

    BINDINGS = [Binding("escape", "close", "Close"), Binding("a", "close", "Close")]

    def __init__(self, items: list[dict], level: int) -> None:
        super().__init__()
        self.items = items
        self.level = level

    def compose(self) -> ComposeResult:
        unlocked = sum(1 for it in self.items if it["unlocked"])
        with Vertical(classes="modal-body"):
            yield Label(f"Achievements  {unlocked}/{len(self.items)}  ·  Level {self.level}", classes="section-title")
            table: DataTable = DataTable(id="achievements-table")
            yield table
            yield Button("Close", id="ach-close")

    def on_mount(self) -> None:
        table = self.query_one("#achievements-table", DataTable)
        table.add_columns("", "Achievement", "Description")
        for it in self.items:
            table.add_row("🏆" if it["unlocked"] else "🔒", it["title"], it["description"])

    @on(Button.Pressed, "#ach-close")
    def action_close(self) -> None:
        self.dismiss(None)


class SettingsScreen(ModalScreen[dict | None]):
    """Profile and settings form. Dismisses with values, {"factory_reset": True}, or None."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, state: AppState) -> None:
        super().__init__()
        self.app_state = state

    def compose(self) -> ComposeResult:
        profile, settings = self.app_state.profile, self.app_state.settings
        with Vertical(classes="modal-body"):
            yield Label("Settings", classes="section-title")
            yield Label("Player name")
            yield Input(value=profile.name, id="set-name")
            yield Label("Accent color")
            yield Input(value=profile.color, id="set-color")
            yield Checkbox("Sound on XP", value=settings.sound, id="set-sound")
            yield Checkbox("Reduce motion", value=settings.reduce_motion, id="set-motion")
            with Horizontal(classes="button-row"):
                yield Button("Save", variant="primary", id="set-save")
                yield Button("Factory reset", variant="error", id="set-factory")
                yield Button("Cancel", id="set-cancel")

    @on(Button.Pressed, "#set-save")
    def _save(self) -> None:
        self.dismiss({
            "name": self.query_one("#set-name", Input).value,
            "color": self.query_one("#set-color", Input).value,
            "sound": self.query_one("#set-sound", Checkbox).value,
            "reduce_motion": self.query_one("#set-motion", Checkbox).value,
        })

    @on(Button.Pressed, "#set-factory")
    def _factory(self) -> None:
        self.dismiss({"factory_reset": True})

    @on(Button.Pressed, "#set-cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


# ── Main app ───────────────────────────────────────────────────


class TodoQuestApp(App):
    """TodoQuest — to-dos with XP, levels and streaks."""

    TITLE = "TodoQuest"
    CSS = CSS

    BINDINGS = [
        Binding("ctrl+k", "focus_new", "New"),
        Binding("space", "toggle_done", "Done"),
        Binding("e", "edit_quest", "Edit"),
        Binding("x", "delete_quest", "Delete"),
        Binding("ctrl+z", "undo", "Undo"),
        Binding("f", "cycle_filter", "Filter"),
        Binding("o", "cycle_sort", "Sort"),
        Binding("slash", "search", "Search"),
        Binding("a", "show_achievements", "Achievements"),
        Binding("s", "show_settings", "Settings"),
        Binding("ctrl+r", "reset_all", "Reset"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    filter_mode: reactive[str] = reactive("all")
    sort_mode: reactive[str] = reactive("smart")
    search_text: reactive[str] = reactive("")

    def __init__(self, store: QuestStore) -> None:
        super().__init__()
        self.store = store
        self._ready = False
        self._unsubscribe = store.subscribe(self._on_state)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Keep single-key bindings out of the way while typing."""
        typing = isinstance(self.focused, Input)
        if typing and action in {"toggle_done", "edit_quest", "delete_quest", "cycle_filter",
                                 "cycle_sort", "search", "show_achievements", "show_settings", "quit_app"}:
            return False
        if action == "undo":
            return True if self.store.state.ui.last_undo else None
        return True

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="hud")
        yield Input(placeholder="New quest… (Enter to add)", id="new-quest")
        yield Input(placeholder="Search text, notes, tags…", id="search")
        yield Static(id="view-line")
        yield DataTable(id="quests", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#quests", DataTable)
        table.add_columns("", "Quest", "Priority", "Difficulty", "Due", "Tags")
        self._ready = True
        self._refresh()
        table.focus()

    # ── Rendering ──────────────────────────────────────────────

    def _on_state(self, state: AppState) -> None:
        if state.ui.toast:
            message = state.ui.toast
            self.notify(message, timeout=self.store.config.toast_seconds)
            self.set_timer(self.store.config.toast_seconds, lambda: self._expire_toast(message))
        self._refresh()

    def _expire_toast(self, message: str) -> None:
        if self.store.state.ui.toast == message:
            self.store.clear_toast()

    def _refresh(self) -> None:
        self._render_hud()
        self._render_table()
        self.refresh_bindings()

    def _render_hud(self) -> None:
        hud = self.store.hud()
        self.sub_title = f"{hud['name']} · {hud['title']}"
        bar = _progress_bar(hud["xpIntoLevel"], hud["xpForNext"])
        lines = [
            f"Lv {hud['level']}  {bar}  {hud['xpIntoLevel']}/{hud['xpForNext']} XP   "
            f"🔥 {hud['streakDays']}d   ✔ today {hud['doneToday']}   "
            f"open {hud['active']}   overdue {hud['overdue']}",
        ]
        if hud["canUndo"]:
            lines.append(f"ctrl+z: {hud['undoLabel']}")
        self.query_one("#hud", Static).update("\n".join(lines))
        search = f'   search "{self.search_text}"' if self.search_text else ""
        self.query_one("#view-line", Static).update(
            f"filter: {self.filter_mode}   sort: {self.sort_mode}{search}"
        )

    def _render_table(self) -> None:
        table = self.query_one("#quests", DataTable)
        selected = self._selected_id()
        table.clear()
        now = self.store.now()
        params = QueryParams(filter=self.filter_mode, text=self.search_text, sort=self.sort_mode)
        for q in run_query(self.store.state.quests, params, now):
            due = fmt_date_input(q.due_at)
            if due and not q.done and q.due_at < now:
                due += " !"
            table.add_row(
                "✔" if q.done else "·",
                q.text,
                q.priority,
                q.difficulty,
                due,
                _tags_cell(q.tags),
                key=q.id,
            )
        if selected is not None:
            try:
                table.move_cursor(row=table.get_row_index(selected))
            except RowDoesNotExist:
                pass

    def _selected_id(self) -> str | None:
        table = self.query_one("#quests", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except CellDoesNotExist:
            return None
        return row_key.value

    def watch_filter_mode(self) -> None:
        if self._ready:
            self._refresh()

    def watch_sort_mode(self) -> None:
        if self._ready:
            self._refresh()

    def watch_search_text(self) -> None:
        if self._ready:
            self._refresh()

    # ── Input events ───────────────────────────────────────────

    @on(Input.Submitted, "#new-quest")
    def _on_new_quest(self, event: Input.Submitted) -> None:
        if self.store.add(event.value) is not None:
            event.input.value = ""

    @on(Input.Changed, "#search")
    def _on_search(self, event: Input.Changed) -> None:
        self.search_text = event.value

    # ── Actions ────────────────────────────────────────────────

    def action_focus_new(self) -> None:
        self.query_one("#new-quest", Input).focus()

    def action_blur_focus(self) -> None:
        self.query_one("#quests", DataTable).focus()
        self.refresh_bindings()

    def action_search(self) -> None:
        search = self.query_one("#search", Input)
        search.display = True
        search.focus()

    def action_toggle_done(self) -> None:
        quest_id = self._selected_id()
        if quest_id is None:
            return
        award = self.store.toggle(quest_id)
        if award is not None and self.store.state.settings.sound:
            self.bell()

    def action_delete_quest(self) -> None:
        quest_id = self._selected_id()
        if quest_id is not None:
            self.store.delete(quest_id)

    def action_undo(self) -> None:
        self.store.undo()

    def action_reset_all(self) -> None:
        self.store.reset_all()

    def action_cycle_filter(self) -> None:
        idx = FILTER_MODES.index(self.filter_mode)
        self.filter_mode = FILTER_MODES[(idx + 1) % len(FILTER_MODES)]

    def action_cycle_sort(self) -> None:
        idx = SORT_MODES.index(self.sort_mode)
        self.sort_mode = SORT_MODES[(idx + 1) % len(SORT_MODES)]

    def action_edit_quest(self) -> None:
        quest_id = self._selected_id()
        quest = self.store.find(quest_id) if quest_id else None
        if quest is None:
            return

        def apply(form: dict | None) -> None:
            if form is not None:
                self.store.edit(quest.id, **form)

        self.push_screen(EditQuestScreen(quest), apply)

    def action_show_achievements(self) -> None:
        self.push_screen(AchievementsScreen(self.store.achievements_view(), self.store.level_info().level))

    def action_show_settings(self) -> None:
        def apply(form: dict | None) -> None:
            if form is None:
                return
            if form.get("factory_reset"):
                self.store.factory_reset()
            else:
                self.store.save_settings(**form)

        self.push_screen(SettingsScreen(self.store.state), apply)

    def action_quit_app(self) -> None:
        self._unsubscribe()
        if not self.store.wait_for_hooks(timeout=2.0):
            logger.warning("Exiting with hook commands still running")
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = ensure_workspace(workspace_root())
    config = load_config(root)
    setup_logging(root, config.log_level)
    logger.info("Starting TodoQuest in %s", root)

    app = TodoQuestApp(QuestStore(root, config=config))
    app.run()


if __name__ == "__main__":
    main()
