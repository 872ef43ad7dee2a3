"""Shared test fixtures for accountability tests."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from core.store import MemoryStore


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with config and an empty data dir."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "users": [
            {"id": "alice", "name": "Alice", "color": "#3b82f6"},
            {"id": "bob", "name": "Bob", "initial": "B", "color": "#22c55e"},
        ],
        "weekly_history_limit": 12,
        "reminder_threshold_days": 7,
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["ACCOUNTABLE_ROOT"] = str(root)
    yield root
    # Cleanup
    if "ACCOUNTABLE_ROOT" in os.environ:
        del os.environ["ACCOUNTABLE_ROOT"]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def now() -> datetime:
    """Wednesday 2026-02-11 (ISO week 7, which starts Monday 2026-02-09)."""
    return datetime(2026, 2, 11, 21, 30, tzinfo=ZoneInfo("UTC"))
