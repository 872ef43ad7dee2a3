#!/usr/bin/env python3
"""Accountability TUI — daily lists and weekly goals, powered by Textual."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Input, Label, ListItem, ListView, Static

from core import (
    DAILY,
    SECTION_CYCLE,
    WEEKLY,
    AppConfig,
    Item,
    PeriodLifecycle,
    PeriodRecord,
    format_share_text,
    init_workspace,
    load_config,
    log_path,
    needs_reminder,
    now_local,
    open_daily,
    open_weekly,
    outcome_counts,
    period_title,
    status_emoji,
    workspace_root,
)

logger = logging.getLogger(__name__)


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#list-pane {
    width: 3fr;
    padding: 0 1;
}

#share-pane {
    width: 2fr;
    min-width: 30;
    border-left: tall $primary-background-darken-2;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#items-table {
    height: 1fr;
}

#new-item, #explanation {
    height: 3;
}

#explanation {
    display: none;
}

#share-text {
    height: auto;
    padding: 1 1;
    color: $text-muted;
}

#user-picker {
    padding: 1 2;
}

#history-table {
    height: 1fr;
}
"""


# ── Overlays ───────────────────────────────────────────────────


class UserPicker(Vertical):
    """Who are you? — one row per configured user."""

    def __init__(self, config: AppConfig, **kwargs) -> None:
        super().__init__(**kwargs)
        self.config = config

    def compose(self) -> ComposeResult:
        yield Label("Who are you?", classes="section-title")
        yield ListView(
            *[ListItem(Label(f"[{u.color}]●[/] {u.name}")) for u in self.config.users],
            id="user-list",
        )


class HistoryScreen(Vertical):
    """Past periods with outcome tallies, newest first."""

    def __init__(self, records: list[PeriodRecord], **kwargs) -> None:
        super().__init__(**kwargs)
        self.records = records

    def compose(self) -> ComposeResult:
        yield Label("History", classes="section-title")
        yield DataTable(id="history-table")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#history-table", DataTable)
        table.add_columns("Period", "Status", "🟢", "🟡", "🔴", "Items")
        for r in self.records:
            counts = outcome_counts(r)
            table.add_row(
                period_title(r),
                r.status.upper(),
                str(counts["green"]),
                str(counts["yellow"]),
                str(counts["red"]),
                str(len(r.items)),
            )


# ── Main app ───────────────────────────────────────────────────


class AccountableApp(App):
    """Accountability — daily lists and weekly goals."""

    TITLE = "Accountability"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("w", "toggle_period", "Daily/Weekly"),
        Binding("a", "focus_new_item", "Add"),
        Binding("1", "set_status('green')", "Green"),
        Binding("2", "set_status('yellow')", "Yellow"),
        Binding("3", "set_status('red')", "Red"),
        Binding("0", "set_status('')", "Clear"),
        Binding("p", "cycle_section", "Section"),
        Binding("x", "remove_item", "Remove"),
        Binding("c", "toggle_completed", "Complete"),
        Binding("s", "share", "Share"),
        Binding("h", "show_history", "History"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    granularity: reactive[str] = reactive(DAILY)

    def __init__(self, owner: str | None = None) -> None:
        super().__init__()
        self.config = load_config()
        self.owner = owner
        self._record: PeriodRecord | None = None
        self._period_key = ""

    def _lifecycle(self) -> PeriodLifecycle:
        return open_daily() if self.granularity == DAILY else open_weekly()

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("", id="period-title", classes="section-title"),
                DataTable(id="items-table", cursor_type="row"),
                Input(placeholder="Add item… (enter)", id="new-item"),
                Input(placeholder="What got in the way? (enter)", id="explanation"),
                id="list-pane",
            ),
            Vertical(
                Label("Share", classes="section-title"),
                Static(id="share-text"),
                id="share-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#items-table", DataTable).add_columns("#", "Item", "Status", "Note")
        if self.owner is None and len(self.config.users) == 1:
            self.owner = self.config.users[0].id
        if self.owner is None and self.config.users:
            self._show_overlay(UserPicker(self.config, id="user-picker", classes="overlay-screen"))
            return
        if self.owner is None:
            self.owner = "me"
        self._load_period()

    # ── Data ───────────────────────────────────────────────────

    def _load_period(self) -> None:
        """Initialize (carrying items over) and display the current period."""
        lifecycle = self._lifecycle()
        now = now_local()
        self._period_key = lifecycle.current_key(now)
        try:
            lifecycle.initialize(self.owner, self._period_key, now)
        except Exception as e:
            logger.exception("Initialize failed")
            self.notify(f"Error: {e}", title="Error", severity="error")
        self._record = lifecycle.get(self.owner, self._period_key)
        self._render_record()

        if self.granularity == WEEKLY:
            days = lifecycle.days_since_last_update(self.owner, now)
            if needs_reminder(days, self.config.reminder_threshold_days):
                self.notify(f"Weekly goals untouched for {days} days.", title="Reminder", severity="warning")

    def _render_record(self) -> None:
        record = self._record
        user = self.config.find_user(self.owner or "")
        name = user.name if user else self.owner
        self.sub_title = f"{name}  [{self.granularity.upper()}]"

        table = self.query_one("#items-table", DataTable)
        table.clear()
        title = self.query_one("#period-title", Label)
        if record is None:
            title.update("(no record)")
            self.query_one("#share-text", Static).update("")
            return

        title.update(f"{period_title(record)} — {record.status.upper()}")
        for n, item in enumerate(record.items, start=1):
            text = item.text
            if item.section:
                text = f"[{item.section}] {text}"
            if item.carried_over:
                text = f"{text} ↻"
            table.add_row(str(n), text, status_emoji(item.status), item.explanation or "")
        self.query_one("#share-text", Static).update(format_share_text(record))

    def _save_items(self, items: list[Item], outcome_only: bool = False) -> None:
        """Persist *items*: outcome edits patch items only, list edits replace items + status."""
        lifecycle = self._lifecycle()
        now = now_local()
        try:
            if outcome_only:
                lifecycle.update_items(self.owner, self._period_key, items, now)
            else:
                status = self._record.status if self._record else "draft"
                lifecycle.set_items(self.owner, self._period_key, items, status, now)
        except Exception as e:
            logger.exception("Save failed")
            self.notify(f"Error: {e}", title="Error", severity="error")
            return
        self._record = lifecycle.get(self.owner, self._period_key)
        self._render_record()

    def _selected_index(self) -> int | None:
        if self._record is None or not self._record.items:
            return None
        row = self.query_one("#items-table", DataTable).cursor_row
        if row is None or row < 0 or row >= len(self._record.items):
            return None
        return row

    # ── Events ─────────────────────────────────────────────────

    @on(ListView.Selected, "#user-list")
    def _on_user_selected(self, event: ListView.Selected) -> None:
        idx = event.list_view.index
        if idx is None:
            return
        self.owner = self.config.users[idx].id
        for old in self.query(".overlay-screen"):
            old.remove()
        self.query_one("#main-layout").display = True
        self._load_period()

    @on(Input.Submitted, "#new-item")
    def _on_new_item(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        if not text:
            return
        if self._record is not None and self._record.is_completed:
            self.notify("Revert to draft to add items.", severity="warning")
            return
        items = list(self._record.items) if self._record else []
        items.append(Item(text=text))
        event.input.value = ""
        self._save_items(items)

    @on(Input.Submitted, "#explanation")
    def _on_explanation(self, event: Input.Submitted) -> None:
        idx = self._selected_index()
        explanation_input = self.query_one("#explanation", Input)
        explanation_input.display = False
        if idx is None:
            return
        items = list(self._record.items)
        items[idx] = items[idx].with_status("yellow", event.value.strip() or None)
        event.input.value = ""
        self._save_items(items, outcome_only=True)

    # ── Actions ────────────────────────────────────────────────

    def action_toggle_period(self) -> None:
        self.granularity = WEEKLY if self.granularity == DAILY else DAILY
        self._close_overlays()
        self._load_period()

    def action_focus_new_item(self) -> None:
        self.query_one("#new-item", Input).focus()

    def action_blur_focus(self) -> None:
        self.query_one("#explanation", Input).display = False
        self._close_overlays()
        self.set_focus(None)

    def action_set_status(self, status: str) -> None:
        idx = self._selected_index()
        if idx is None:
            return
        if not self._record.is_completed:
            self.notify("Mark the period completed before rating items.", severity="warning")
            return
        items = list(self._record.items)
        items[idx] = items[idx].with_status(status or None)
        self._save_items(items, outcome_only=True)
        if status == "yellow":
            explanation_input = self.query_one("#explanation", Input)
            explanation_input.value = items[idx].explanation or ""
            explanation_input.display = True
            explanation_input.focus()

    def action_cycle_section(self) -> None:
        idx = self._selected_index()
        if idx is None or self.granularity != DAILY or self._record.is_completed:
            return
        items = list(self._record.items)
        current = items[idx].section
        nxt = SECTION_CYCLE[(SECTION_CYCLE.index(current) + 1) % len(SECTION_CYCLE)]
        items[idx] = replace(items[idx], section=nxt)
        self._save_items(items)

    def action_remove_item(self) -> None:
        idx = self._selected_index()
        if idx is None:
            return
        if self._record.is_completed:
            self.notify("Revert to draft to remove items.", severity="warning")
            return
        items = list(self._record.items)
        del items[idx]
        self._save_items(items)

    def action_toggle_completed(self) -> None:
        if self._record is None:
            return
        lifecycle = self._lifecycle()
        now = now_local()
        if self._record.is_completed:
            lifecycle.revert_to_draft(self.owner, self._period_key, now)
        else:
            lifecycle.mark_completed(self.owner, self._period_key, now)
        self._record = lifecycle.get(self.owner, self._period_key)
        self._render_record()

    def action_share(self) -> None:
        if self._record is None:
            return
        text = format_share_text(self._record)
        self.copy_to_clipboard(text)
        self.notify("Copied to clipboard.", title="Share")

    def action_show_history(self) -> None:
        if self.query(".overlay-screen"):
            self._close_overlays()
            return
        records = self._lifecycle().list_all(self.owner)
        self._show_overlay(HistoryScreen(records, classes="overlay-screen"))

    def action_quit_app(self) -> None:
        self.exit()

    # ── Overlay switching ──────────────────────────────────────

    def _show_overlay(self, widget: Vertical) -> None:
        self._close_overlays()
        self.query_one("#main-layout").display = False
        self.mount(widget, before=self.query_one(Footer))

    def _close_overlays(self) -> None:
        for old in self.query(".overlay-screen"):
            old.remove()
        self.query_one("#main-layout").display = True


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(description="Daily and weekly accountability tracker")
    parser.add_argument("user", nargs="?", help="user id (prompted when omitted)")
    parser.add_argument("--init", action="store_true", help="create the workspace if missing")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    root = workspace_root()
    if args.init:
        init_workspace(root)
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set ACCOUNTABLE_ROOT or run with --init first.")
        sys.exit(1)

    # Textual owns the terminal; stderr output would draw over the screen
    logging.basicConfig(
        filename=log_path(root),
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = AccountableApp(owner=args.user)
    app.run()


if __name__ == "__main__":
    main()
