"""Period lifecycle: absent -> draft <-> completed.

One state machine serves both daily lists and weekly goals. A lifecycle is
configured with a granularity (period key arithmetic), a carry-over function
(which items of the previous period seed a new one), whether mutations stamp
``lastUpdated`` and an optional cap on history listings.

Every entry point takes the owner and the period key or ``now`` explicitly;
nothing here reads the wall clock. Weekly keys may name any day of the week
and are moved to its Monday.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from core.models import RECORD_STATUSES, Item, PeriodRecord
from core.periods import WEEKLY, current_period_key, parse_key, period_metadata, previous_period_key
from core.store import DuplicateRecordError, RecordStore

logger = logging.getLogger(__name__)

CarryOver = Callable[[PeriodRecord | None], list[Item]]


def _timestamp(now: datetime) -> str:
    return now.isoformat(timespec="seconds")


def elapsed_days(last_updated: str, now: datetime) -> int:
    """Whole days between an ISO timestamp and *now* (never negative)."""
    last = datetime.fromisoformat(last_updated)
    if (last.tzinfo is None) != (now.tzinfo is None):
        last = last.replace(tzinfo=None)
        now = now.replace(tzinfo=None)
    return max(0, int((now - last).total_seconds() // 86400))


class PeriodLifecycle:
    def __init__(
        self,
        store: RecordStore,
        granularity: str,
        carry_over: CarryOver,
        track_updates: bool = False,
        history_limit: int | None = None,
    ) -> None:
        self.store = store
        self.granularity = granularity
        self.carry_over = carry_over
        self.track_updates = track_updates
        self.history_limit = history_limit

    def _key(self, period_key: str) -> str:
        """Validate *period_key* and move weekly keys to their Monday."""
        return current_period_key(self.granularity, parse_key(period_key))

    # ── Reads ──────────────────────────────────────────────────

    def get(self, owner: str, period_key: str) -> PeriodRecord | None:
        doc = self.store.find_by_key(owner, self._key(period_key))
        return PeriodRecord.from_dict(doc) if doc else None

    def current_key(self, now: datetime) -> str:
        return current_period_key(self.granularity, now)

    def get_current(self, owner: str, now: datetime) -> PeriodRecord | None:
        return self.get(owner, self.current_key(now))

    def list_all(self, owner: str) -> list[PeriodRecord]:
        """Records for *owner*, newest first, capped at history_limit."""
        docs = self.store.list_by_owner(owner, limit=self.history_limit)
        return [PeriodRecord.from_dict(d) for d in docs]

    def days_since_last_update(self, owner: str, now: datetime) -> int:
        """Days since the current period (or failing that, the latest one) was touched."""
        record = self.get_current(owner, now)
        if record is None:
            latest = self.store.list_by_owner(owner, limit=1)
            if not latest:
                return 0
            record = PeriodRecord.from_dict(latest[0])
        if not record.last_updated:
            return 0
        return elapsed_days(record.last_updated, now)

    # ── Creation ───────────────────────────────────────────────

    def _new_document(
        self, owner: str, period_key: str, status: str, items: list[Item], now: datetime
    ) -> dict[str, Any]:
        record = PeriodRecord(owner=owner, period_key=period_key, status=status, items=items)
        if self.granularity == WEEKLY:
            record.week = period_metadata(period_key)
        if self.track_updates:
            record.last_updated = _timestamp(now)
        doc = record.to_dict()
        doc.pop("id")
        return doc

    def initialize(self, owner: str, period_key: str, now: datetime) -> str:
        """Create the record for *period_key*, seeded from the previous period.

        Idempotent: an existing record is returned untouched.
        """
        period_key = self._key(period_key)
        existing = self.store.find_by_key(owner, period_key)
        if existing:
            return existing["id"]

        prev = self.get(owner, previous_period_key(period_key, self.granularity))
        items = self.carry_over(prev)
        doc = self._new_document(owner, period_key, "draft", items, now)
        try:
            record_id = self.store.create(doc)
        except DuplicateRecordError:
            # Lost a create race; the other writer's record wins.
            logger.warning("Concurrent initialize for %s/%s", owner, period_key)
            winner = self.store.find_by_key(owner, period_key)
            if winner is None:
                raise
            return winner["id"]
        logger.info(
            "Initialized %s %s for %s with %d carried item(s)",
            self.granularity, period_key, owner, len(items),
        )
        return record_id

    def initialize_current(self, owner: str, now: datetime) -> str:
        return self.initialize(owner, self.current_key(now), now)

    # ── Mutations ──────────────────────────────────────────────

    def _patch(self, owner: str, period_key: str, fields: dict[str, Any], now: datetime) -> str | None:
        existing = self.store.find_by_key(owner, self._key(period_key))
        if not existing:
            logger.debug("No %s record for %s/%s; skipping update", self.granularity, owner, period_key)
            return None
        if self.track_updates:
            fields["lastUpdated"] = _timestamp(now)
        return self.store.patch(existing["id"], fields)

    def set_items(
        self, owner: str, period_key: str, items: list[Item], status: str, now: datetime
    ) -> str:
        """Replace items and status, creating the record if it is absent."""
        if status not in RECORD_STATUSES:
            raise ValueError(f"Invalid record status: {status!r}")
        period_key = self._key(period_key)
        fields = {"items": [i.to_dict() for i in items], "status": status}
        record_id = self._patch(owner, period_key, fields, now)
        if record_id is not None:
            return record_id
        return self.store.create(self._new_document(owner, period_key, status, list(items), now))

    def mark_completed(self, owner: str, period_key: str, now: datetime) -> str | None:
        return self._patch(owner, period_key, {"status": "completed"}, now)

    def revert_to_draft(self, owner: str, period_key: str, now: datetime) -> str | None:
        return self._patch(owner, period_key, {"status": "draft"}, now)

    def update_items(self, owner: str, period_key: str, items: list[Item], now: datetime) -> str | None:
        """Replace only the items (outcome colors, explanations)."""
        return self._patch(owner, period_key, {"items": [i.to_dict() for i in items]}, now)
