"""Typed dataclasses for the accountability data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


ITEM_STATUSES = {"green", "yellow", "red"}  # None = unset
RECORD_STATUSES = {"draft", "completed"}
SECTIONS = ("personal", "work")
SECTION_CYCLE = (None, "personal", "work")


# ── Items ─────────────────────────────────────────────────────


@dataclass
class Item:
    """One task/goal line."""

    text: str = ""
    status: str | None = None  # green, yellow, red; None = unset
    explanation: str | None = None  # only meaningful when yellow
    section: str | None = None  # daily only: personal, work
    carried_over: bool | None = None  # weekly only

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Item:
        if not d or not isinstance(d, dict):
            return cls()
        status = d.get("status", d.get("emoji"))
        carried = d.get("carriedOver")
        return cls(
            text=str(d.get("text", "")),
            status=str(status) if status else None,
            explanation=d.get("explanation"),
            section=d.get("section") or None,
            carried_over=bool(carried) if carried is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"text": self.text, "status": self.status}
        # Explanations only survive on yellow items
        if self.status == "yellow" and self.explanation:
            d["explanation"] = self.explanation
        if self.section:
            d["section"] = self.section
        if self.carried_over is not None:
            d["carriedOver"] = self.carried_over
        return d

    def with_status(self, status: str | None, explanation: str | None = None) -> Item:
        """Copy with a new outcome status; the explanation is kept only for yellow."""
        if status != "yellow":
            explanation = None
        elif explanation is None:
            explanation = self.explanation
        return replace(self, status=status, explanation=explanation)


# ── Period records ────────────────────────────────────────────


@dataclass
class WeekMeta:
    week_start: str = ""
    week_end: str = ""
    week_number: int = 0
    year: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WeekMeta:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            week_start=str(d.get("weekStart", "")),
            week_end=str(d.get("weekEnd", "")),
            week_number=int(d.get("weekNumber", 0)),
            year=int(d.get("year", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekStart": self.week_start,
            "weekEnd": self.week_end,
            "weekNumber": self.week_number,
            "year": self.year,
        }


@dataclass
class PeriodRecord:
    """One tracked day or week for one owner."""

    id: str = ""
    owner: str = ""
    period_key: str = ""
    status: str = "draft"
    items: list[Item] = field(default_factory=list)
    week: WeekMeta | None = None  # weekly records only
    last_updated: str | None = None  # ISO timestamp, weekly records only

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PeriodRecord:
        if not d or not isinstance(d, dict):
            return cls()
        week = d.get("week")
        return cls(
            id=str(d.get("id", "")),
            owner=str(d.get("owner", "")),
            period_key=str(d.get("periodKey", "")),
            status=str(d.get("status", "draft")),
            items=[Item.from_dict(i) for i in (d.get("items") or [])],
            week=WeekMeta.from_dict(week) if week else None,
            last_updated=d.get("lastUpdated"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "owner": self.owner,
            "periodKey": self.period_key,
            "status": self.status,
            "items": [i.to_dict() for i in self.items],
        }
        if self.week is not None:
            d["week"] = self.week.to_dict()
        if self.last_updated is not None:
            d["lastUpdated"] = self.last_updated
        return d


# ── Config ────────────────────────────────────────────────────


@dataclass
class User:
    id: str
    name: str = ""
    initial: str = ""
    color: str = "#3b82f6"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> User:
        uid = str(d.get("id", ""))
        name = str(d.get("name", "")) or uid.capitalize()
        return cls(
            id=uid,
            name=name,
            initial=str(d.get("initial", "")) or name[:1].upper(),
            color=str(d.get("color", "#3b82f6")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "initial": self.initial, "color": self.color}


@dataclass
class AppConfig:
    timezone: str = "UTC"
    users: list[User] = field(default_factory=list)
    weekly_history_limit: int = 12
    reminder_threshold_days: int = 7

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AppConfig:
        if not d or not isinstance(d, dict):
            return cls()
        users = [User.from_dict(u) for u in (d.get("users") or []) if isinstance(u, dict) and u.get("id")]
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            users=users,
            weekly_history_limit=int(d.get("weekly_history_limit", 12)),
            reminder_threshold_days=int(d.get("reminder_threshold_days", 7)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "users": [u.to_dict() for u in self.users],
            "weekly_history_limit": self.weekly_history_limit,
            "reminder_threshold_days": self.reminder_threshold_days,
        }

    def find_user(self, user_id: str) -> User | None:
        for u in self.users:
            if u.id == user_id:
                return u
        return None


# ── Validation ────────────────────────────────────────────────


def validate_item(item: dict[str, Any]) -> list[str]:
    """Validate one item document and return list of errors (empty if valid)."""
    errors = []
    if not isinstance(item, dict):
        return ["Item must be an object"]
    text = item.get("text")
    if not isinstance(text, str) or not text.strip():
        errors.append("Missing required field: text")
    status = item.get("status", item.get("emoji"))
    if status is not None and status not in ITEM_STATUSES:
        errors.append(f"Invalid item status: {status}")
    if item.get("explanation") is not None:
        if not isinstance(item["explanation"], str):
            errors.append("explanation must be a string")
        elif status != "yellow" and item["explanation"]:
            errors.append("explanation is only allowed on yellow items")
    if item.get("section") is not None and item["section"] not in SECTIONS:
        errors.append(f"Invalid section: {item['section']}")
    if item.get("carriedOver") is not None and not isinstance(item["carriedOver"], bool):
        errors.append("carriedOver must be a boolean")
    return errors


def validate_items(items: Any) -> list[str]:
    """Validate a list of item documents, prefixing errors with the item index."""
    if not isinstance(items, list):
        return ["items must be a list"]
    errors = []
    for i, item in enumerate(items):
        errors.extend(f"items[{i}]: {e}" for e in validate_item(item))
    return errors
