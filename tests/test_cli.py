"""Tests for cli/accountable.py — user picker and logging setup."""

import asyncio
import logging
import sys

import yaml
from textual.widgets import ListView

from cli import accountable
from cli.accountable import AccountableApp
from core.workspace import config_path, log_path


def test_user_picker_handles_ids_with_dots_and_spaces(workspace):
    config_path(workspace).write_text(yaml.dump({
        "timezone": "UTC",
        "users": [{"id": "first.last"}, {"id": "team a"}],
    }), encoding="utf-8")

    async def pick_second_user():
        app = AccountableApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            list_view = app.query_one("#user-list", ListView)
            list_view.focus()
            list_view.index = 1
            await pilot.press("enter")
            await pilot.pause()
            return app.owner

    assert asyncio.run(pick_second_user()) == "team a"


def test_main_logs_to_workspace_file(workspace, monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    monkeypatch.setattr(AccountableApp, "run", lambda self: None)
    monkeypatch.setattr(sys, "argv", ["accountable", "alice", "-v"])

    accountable.main()

    assert calls[0]["filename"] == log_path(workspace.resolve())
    assert calls[0]["level"] == logging.DEBUG
