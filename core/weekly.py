"""Weekly goals: one record per owner per ISO week (keyed by Monday).

Carry-over depends on how last week ended. A reviewed (completed) week only
passes on the goals flagged yellow or red; a week left in draft was never
reviewed, so all of its goals move forward.
"""

from __future__ import annotations

from core.lifecycle import PeriodLifecycle
from core.models import Item, PeriodRecord
from core.periods import WEEKLY
from core.store import RecordStore

DEFAULT_HISTORY_LIMIT = 12
DEFAULT_REMINDER_THRESHOLD = 7


def carry_over_weekly(prev: PeriodRecord | None) -> list[Item]:
    if prev is None or not prev.items:
        return []
    if prev.is_completed:
        carried = [i for i in prev.items if i.status in ("yellow", "red")]
    else:
        carried = prev.items
    return [Item(text=i.text, carried_over=True) for i in carried]


def weekly_lifecycle(store: RecordStore, history_limit: int | None = DEFAULT_HISTORY_LIMIT) -> PeriodLifecycle:
    return PeriodLifecycle(
        store,
        WEEKLY,
        carry_over_weekly,
        track_updates=True,
        history_limit=history_limit,
    )


def needs_reminder(days_since_update: int, threshold: int = DEFAULT_REMINDER_THRESHOLD) -> bool:
    return days_since_update >= threshold
