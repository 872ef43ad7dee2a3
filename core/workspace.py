"""Workspace root, configuration, timezone and path helpers."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.daily import daily_lifecycle
from core.fileio import read_yaml, write_yaml_atomic
from core.lifecycle import PeriodLifecycle
from core.models import AppConfig
from core.store import JsonFileStore
from core.weekly import weekly_lifecycle

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains config.yaml and data/)."""
    return Path(
        os.environ.get("ACCOUNTABLE_ROOT", str(Path.home() / "accountable"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def daily_store_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "daily_lists.json"


def weekly_store_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "weekly_goals.json"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "accountable.log"


# ── Config ────────────────────────────────────────────────────

def load_config(root: Path | None = None) -> AppConfig:
    """Load config.yaml into an AppConfig, defaulting every missing key."""
    return AppConfig.from_dict(read_yaml(config_path(root)))


def init_workspace(root: Path | None = None) -> Path:
    """Create the workspace layout and a default config.yaml if missing."""
    if root is None:
        root = workspace_root()
    (root / "data").mkdir(parents=True, exist_ok=True)
    cp = config_path(root)
    if not cp.exists():
        write_yaml_atomic(cp, AppConfig().to_dict())
        logger.info("Wrote default config to %s", cp)
    return root


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the configured timezone, defaulting to UTC."""
    name = load_config(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in config, using UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_user_timezone(root))


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the configured timezone."""
    return now_local(root).date().isoformat()


# ── Lifecycles bound to the workspace stores ──────────────────

def open_daily(root: Path | None = None) -> PeriodLifecycle:
    return daily_lifecycle(JsonFileStore(daily_store_path(root)))


def open_weekly(root: Path | None = None) -> PeriodLifecycle:
    config = load_config(root)
    return weekly_lifecycle(
        JsonFileStore(weekly_store_path(root)),
        history_limit=config.weekly_history_limit,
    )
