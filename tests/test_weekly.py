"""Tests for core/weekly.py — weekly goals, carry-over and reminders."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from core.lifecycle import elapsed_days
from core.models import Item, PeriodRecord
from core.store import DuplicateRecordError, MemoryStore
from core.weekly import carry_over_weekly, needs_reminder, weekly_lifecycle

UTC = ZoneInfo("UTC")
MONDAY = datetime(2026, 2, 9, 8, 0, tzinfo=UTC)


@pytest.fixture
def weekly(store):
    return weekly_lifecycle(store)


def test_completed_week_carries_only_yellow_and_red(weekly):
    weekly.set_items("alice", "2026-02-02", [
        Item("X", status="green"),
        Item("Y", status="yellow", explanation="ran out of time"),
        Item("Z"),
        Item("W", status="red"),
    ], "completed", MONDAY)

    weekly.initialize("alice", "2026-02-09", MONDAY)
    items = weekly.get("alice", "2026-02-09").items
    assert [i.to_dict() for i in items] == [
        {"text": "Y", "status": None, "carriedOver": True},
        {"text": "W", "status": None, "carriedOver": True},
    ]


def test_draft_week_carries_everything(weekly):
    weekly.set_items("alice", "2026-02-02", [Item("X"), Item("Y", status="green")], "draft", MONDAY)
    weekly.initialize("alice", "2026-02-09", MONDAY)
    items = weekly.get("alice", "2026-02-09").items
    assert [(i.text, i.status, i.carried_over) for i in items] == [
        ("X", None, True),
        ("Y", None, True),
    ]


def test_carry_over_without_previous_or_items():
    assert carry_over_weekly(None) == []
    assert carry_over_weekly(PeriodRecord(status="completed", items=[])) == []
    assert carry_over_weekly(PeriodRecord(status="draft", items=[])) == []


def test_carry_over_drops_section_and_explanation():
    prev = PeriodRecord(status="completed", items=[
        Item("Y", status="yellow", explanation="meh", section="work", carried_over=True),
    ])
    assert carry_over_weekly(prev) == [Item("Y", carried_over=True)]


def test_initialize_sets_week_metadata_and_timestamp(weekly):
    weekly.initialize_current("alice", MONDAY)
    record = weekly.get_current("alice", MONDAY)
    assert record.period_key == "2026-02-09"
    assert record.week.week_end == "2026-02-15"
    assert record.week.week_number == 7
    assert record.week.year == 2026
    assert record.last_updated == "2026-02-09T08:00:00+00:00"


def test_week_metadata_is_not_recomputed_on_patch(weekly, store):
    record_id = weekly.initialize("alice", "2026-02-09", MONDAY)
    store.patch(record_id, {"week": {"weekStart": "2026-02-09", "weekEnd": "x", "weekNumber": 99, "year": 1}})
    weekly.mark_completed("alice", "2026-02-09", MONDAY)
    assert weekly.get("alice", "2026-02-09").week.week_number == 99


def test_mutations_stamp_last_updated(weekly):
    weekly.initialize("alice", "2026-02-09", MONDAY)
    later = MONDAY + timedelta(days=2)
    weekly.mark_completed("alice", "2026-02-09", later)
    assert weekly.get("alice", "2026-02-09").last_updated == later.isoformat(timespec="seconds")

    latest = later + timedelta(hours=3)
    weekly.update_items("alice", "2026-02-09", [Item("G", status="green")], latest)
    assert weekly.get("alice", "2026-02-09").last_updated == latest.isoformat(timespec="seconds")


def test_complete_then_revert_keeps_items(weekly):
    items = [Item("G", carried_over=True), Item("H")]
    weekly.set_items("alice", "2026-02-09", items, "draft", MONDAY)
    weekly.mark_completed("alice", "2026-02-09", MONDAY)
    weekly.revert_to_draft("alice", "2026-02-09", MONDAY)
    record = weekly.get("alice", "2026-02-09")
    assert record.status == "draft"
    assert record.items == items


def test_initialize_is_idempotent(weekly, store):
    first = weekly.initialize("alice", "2026-02-09", MONDAY)
    second = weekly.initialize("alice", "2026-02-09", MONDAY + timedelta(days=1))
    assert first == second
    assert weekly.get("alice", "2026-02-09").last_updated == "2026-02-09T08:00:00+00:00"
    assert len(store.list_by_owner("alice")) == 1


def test_midweek_key_maps_to_same_record_as_monday(weekly, store):
    wednesday = weekly.initialize("alice", "2026-02-11", MONDAY)
    monday = weekly.initialize("alice", "2026-02-09", MONDAY)
    assert wednesday == monday

    docs = store.list_by_owner("alice")
    assert len(docs) == 1
    assert docs[0]["periodKey"] == "2026-02-09"
    assert docs[0]["week"]["weekStart"] == "2026-02-09"


def test_midweek_key_carries_over_from_previous_week(weekly):
    weekly.set_items("alice", "2026-02-02", [Item("X")], "draft", MONDAY)
    weekly.initialize("alice", "2026-02-11", MONDAY)
    assert [i.text for i in weekly.get("alice", "2026-02-13").items] == ["X"]


def test_midweek_key_mutations_hit_the_week_record(weekly, store):
    weekly.set_items("alice", "2026-02-12", [Item("A")], "draft", MONDAY)
    assert weekly.mark_completed("alice", "2026-02-15", MONDAY) is not None
    assert weekly.update_items("alice", "2026-02-10", [Item("A", status="green")], MONDAY) is not None

    docs = store.list_by_owner("alice")
    assert len(docs) == 1
    assert docs[0]["periodKey"] == "2026-02-09"
    assert docs[0]["status"] == "completed"
    assert docs[0]["items"] == [{"text": "A", "status": "green"}]


def test_invalid_key_rejected(weekly):
    with pytest.raises(ValueError):
        weekly.initialize("alice", "2026-W07", MONDAY)


def test_initialize_lost_race_returns_winner():
    class RacyStore(MemoryStore):
        """Hides an existing record from the first lookup, as a concurrent writer would."""

        hide_once = True

        def find_by_key(self, owner, period_key):
            if self.hide_once and period_key == "2026-02-09":
                self.hide_once = False
                return None
            return super().find_by_key(owner, period_key)

    store = RacyStore()
    winner = store.create({"owner": "alice", "periodKey": "2026-02-09", "status": "draft", "items": []})
    lifecycle = weekly_lifecycle(store)

    assert lifecycle.initialize("alice", "2026-02-09", MONDAY) == winner
    assert len(store.list_by_owner("alice")) == 1


def test_initialize_reraises_when_duplicate_vanishes():
    class BrokenStore(MemoryStore):
        def create(self, document):
            raise DuplicateRecordError(document["owner"], document["periodKey"])

    with pytest.raises(DuplicateRecordError):
        weekly_lifecycle(BrokenStore()).initialize("alice", "2026-02-09", MONDAY)


def test_list_all_capped_at_history_limit(weekly):
    start = datetime(2025, 10, 6, tzinfo=UTC)  # a Monday
    for n in range(15):
        weekly.initialize("alice", (start + timedelta(weeks=n)).date().isoformat(), start)
    records = weekly.list_all("alice")
    assert len(records) == 12
    assert records[0].period_key == (start + timedelta(weeks=14)).date().isoformat()
    assert records[0].period_key > records[-1].period_key


def test_list_all_uncapped(store):
    lifecycle = weekly_lifecycle(store, history_limit=None)
    for key in ["2026-01-05", "2026-01-12", "2026-01-19"]:
        lifecycle.initialize("alice", key, MONDAY)
    assert len(lifecycle.list_all("alice")) == 3


def test_days_since_last_update_current_week(weekly):
    weekly.initialize("alice", "2026-02-09", MONDAY)
    assert weekly.days_since_last_update("alice", MONDAY + timedelta(days=3, hours=5)) == 3


def test_days_since_last_update_falls_back_to_latest_week(weekly):
    weekly.initialize("alice", "2026-01-26", datetime(2026, 1, 26, 9, 0, tzinfo=UTC))
    weekly.initialize("alice", "2026-02-02", datetime(2026, 2, 3, 9, 0, tzinfo=UTC))
    # week of 2026-02-16 has no record yet
    now = datetime(2026, 2, 16, 10, 0, tzinfo=UTC)
    assert weekly.days_since_last_update("alice", now) == 13


def test_days_since_last_update_without_records(weekly):
    assert weekly.days_since_last_update("alice", MONDAY) == 0


def test_days_since_is_read_only(weekly, store):
    weekly.days_since_last_update("alice", MONDAY)
    assert store.list_by_owner("alice") == []


def test_elapsed_days_mixed_naive_and_aware():
    assert elapsed_days("2026-02-09T08:00:00", MONDAY + timedelta(days=2)) == 2
    assert elapsed_days("2026-02-12T08:00:00+00:00", MONDAY) == 0


def test_needs_reminder_threshold():
    assert needs_reminder(7) is True
    assert needs_reminder(6) is False
    assert needs_reminder(3, threshold=3) is True
