"""Daily lists: one record per owner per calendar date."""

from __future__ import annotations

from core.lifecycle import PeriodLifecycle
from core.models import Item, PeriodRecord
from core.periods import DAILY
from core.store import RecordStore


def carry_over_daily(prev: PeriodRecord | None) -> list[Item]:
    """Everything from yesterday that did not go green, reset to unset."""
    if prev is None:
        return []
    return [
        Item(text=item.text, section=item.section)
        for item in prev.items
        if item.status != "green"
    ]


def daily_lifecycle(store: RecordStore) -> PeriodLifecycle:
    return PeriodLifecycle(store, DAILY, carry_over_daily)
