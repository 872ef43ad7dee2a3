"""Tests for core/daily.py and the shared lifecycle — daily lists."""

import pytest

from core.daily import carry_over_daily, daily_lifecycle
from core.models import Item, PeriodRecord


@pytest.fixture
def daily(store):
    return daily_lifecycle(store)


def test_carry_over_drops_green_and_resets(daily, now):
    daily.set_items("alice", "2026-02-10", [
        Item("A", status="green"),
        Item("B", status="red"),
        Item("C"),
    ], "completed", now)

    daily.initialize("alice", "2026-02-11", now)
    record = daily.get("alice", "2026-02-11")

    assert record.status == "draft"
    assert [i.to_dict() for i in record.items] == [
        {"text": "B", "status": None},
        {"text": "C", "status": None},
    ]


def test_carry_over_keeps_section_drops_explanation():
    prev = PeriodRecord(items=[
        Item("Gym", status="yellow", explanation="only 20 minutes", section="personal"),
        Item("Deploy", status="green", section="work"),
        Item("Inbox zero", status="red", section="work"),
    ])
    assert carry_over_daily(prev) == [
        Item("Gym", section="personal"),
        Item("Inbox zero", section="work"),
    ]


def test_carry_over_from_draft_day_takes_everything_not_green():
    prev = PeriodRecord(status="draft", items=[Item("A"), Item("B", status="green")])
    assert [i.text for i in carry_over_daily(prev)] == ["A"]


def test_initialize_without_previous_is_empty(daily, now):
    record_id = daily.initialize("alice", "2026-02-11", now)
    record = daily.get("alice", "2026-02-11")
    assert record.id == record_id
    assert record.items == []
    assert record.status == "draft"
    assert record.week is None
    assert record.last_updated is None


def test_initialize_only_looks_at_the_day_before(daily, now):
    daily.set_items("alice", "2026-02-09", [Item("Old")], "draft", now)
    daily.initialize("alice", "2026-02-11", now)
    assert daily.get("alice", "2026-02-11").items == []


def test_initialize_is_idempotent(daily, store, now):
    daily.set_items("alice", "2026-02-10", [Item("A", status="red")], "completed", now)
    first = daily.initialize("alice", "2026-02-11", now)
    daily.update_items("alice", "2026-02-11", [Item("A"), Item("New")], now)

    # previous day changes after the fact must not leak in
    daily.update_items("alice", "2026-02-10", [Item("A", status="red"), Item("Late", status="red")], now)
    second = daily.initialize("alice", "2026-02-11", now)

    assert first == second
    assert [i.text for i in daily.get("alice", "2026-02-11").items] == ["A", "New"]
    assert len(store.list_by_owner("alice")) == 2


def test_initialize_is_scoped_to_owner(daily, now):
    daily.set_items("alice", "2026-02-10", [Item("Alice task", status="red")], "completed", now)
    daily.initialize("bob", "2026-02-11", now)
    assert daily.get("bob", "2026-02-11").items == []


def test_initialize_current_uses_now(daily, now):
    daily.initialize_current("alice", now)
    assert daily.get_current("alice", now).period_key == "2026-02-11"


def test_set_items_creates_without_carry_over(daily, now):
    daily.set_items("alice", "2026-02-10", [Item("A", status="red")], "completed", now)
    daily.set_items("alice", "2026-02-11", [Item("Fresh")], "draft", now)
    assert [i.text for i in daily.get("alice", "2026-02-11").items] == ["Fresh"]


def test_set_items_replaces_items_and_status(daily, now):
    record_id = daily.set_items("alice", "2026-02-11", [Item("A"), Item("B"), Item("C")], "draft", now)
    again = daily.set_items("alice", "2026-02-11", [Item("A"), Item("C")], "draft", now)
    assert again == record_id
    assert [i.text for i in daily.get("alice", "2026-02-11").items] == ["A", "C"]


def test_set_items_rejects_unknown_status(daily, now):
    with pytest.raises(ValueError):
        daily.set_items("alice", "2026-02-11", [], "archived", now)


def test_mutations_on_absent_record_are_noops(daily, store, now):
    assert daily.mark_completed("alice", "2026-02-11", now) is None
    assert daily.revert_to_draft("alice", "2026-02-11", now) is None
    assert daily.update_items("alice", "2026-02-11", [Item("A")], now) is None
    assert store.list_by_owner("alice") == []


def test_complete_then_revert_keeps_items(daily, now):
    items = [Item("A", section="work"), Item("B")]
    record_id = daily.set_items("alice", "2026-02-11", items, "draft", now)

    assert daily.mark_completed("alice", "2026-02-11", now) == record_id
    assert daily.get("alice", "2026-02-11").is_completed

    assert daily.revert_to_draft("alice", "2026-02-11", now) == record_id
    record = daily.get("alice", "2026-02-11")
    assert record.status == "draft"
    assert record.items == items


def test_update_items_keeps_status(daily, now):
    daily.set_items("alice", "2026-02-11", [Item("A")], "completed", now)
    daily.update_items("alice", "2026-02-11", [Item("A", status="yellow", explanation="halfway")], now)
    record = daily.get("alice", "2026-02-11")
    assert record.is_completed
    assert record.items[0].explanation == "halfway"


def test_non_yellow_status_never_persists_explanation(daily, store, now):
    daily.set_items("alice", "2026-02-11", [Item("A", status="yellow", explanation="blocked")], "completed", now)
    changed = daily.get("alice", "2026-02-11").items[0]
    # caller forgets to clear the explanation
    changed.status = "green"
    daily.update_items("alice", "2026-02-11", [changed], now)

    doc = store.find_by_key("alice", "2026-02-11")
    assert doc["items"] == [{"text": "A", "status": "green"}]


def test_list_all_newest_first(daily, now):
    for key in ["2026-02-09", "2026-02-11", "2026-02-10"]:
        daily.initialize("alice", key, now)
    assert [r.period_key for r in daily.list_all("alice")] == ["2026-02-11", "2026-02-10", "2026-02-09"]
