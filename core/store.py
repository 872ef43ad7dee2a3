"""Record store adapters.

A store holds period documents (plain dicts, see ``PeriodRecord.to_dict``)
keyed by ``(owner, periodKey)``. Two implementations ship here: an in-memory
one and a JSON file per collection. Neither offers insert-if-absent, so two
callers can both see "absent" and race on ``create``; the loser gets
``DuplicateRecordError``.
"""

from __future__ import annotations

import copy
import logging
import uuid
from pathlib import Path
from typing import Any

from core.fileio import read_json, write_json_atomic

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class DuplicateRecordError(StoreError):
    def __init__(self, owner: str, period_key: str) -> None:
        super().__init__(f"Record already exists: {owner}/{period_key}")
        self.owner = owner
        self.period_key = period_key


class RecordNotFoundError(StoreError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id


class RecordStore:
    """Keyed document store interface."""

    def find_by_key(self, owner: str, period_key: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def list_by_owner(self, owner: str, limit: int | None = None) -> list[dict[str, Any]]:
        """All documents for *owner*, newest period first."""
        raise NotImplementedError

    def create(self, document: dict[str, Any]) -> str:
        raise NotImplementedError

    def patch(self, record_id: str, fields: dict[str, Any]) -> str:
        raise NotImplementedError


# ── Shared helpers over a {id: document} mapping ──────────────


def _find(records: dict[str, dict[str, Any]], owner: str, period_key: str) -> dict[str, Any] | None:
    for doc in records.values():
        if doc.get("owner") == owner and doc.get("periodKey") == period_key:
            return copy.deepcopy(doc)
    return None


def _list(records: dict[str, dict[str, Any]], owner: str, limit: int | None) -> list[dict[str, Any]]:
    docs = [d for d in records.values() if d.get("owner") == owner]
    docs.sort(key=lambda d: d.get("periodKey", ""), reverse=True)
    if limit is not None:
        docs = docs[:limit]
    return [copy.deepcopy(d) for d in docs]


def _insert(records: dict[str, dict[str, Any]], document: dict[str, Any]) -> str:
    owner = document.get("owner", "")
    period_key = document.get("periodKey", "")
    if _find(records, owner, period_key) is not None:
        raise DuplicateRecordError(owner, period_key)
    record_id = document.get("id") or uuid.uuid4().hex
    doc = copy.deepcopy(document)
    doc["id"] = record_id
    records[record_id] = doc
    return record_id


def _apply_patch(records: dict[str, dict[str, Any]], record_id: str, fields: dict[str, Any]) -> str:
    if record_id not in records:
        raise RecordNotFoundError(record_id)
    updates = {k: copy.deepcopy(v) for k, v in fields.items() if k not in ("id", "owner", "periodKey")}
    records[record_id].update(updates)
    return record_id


# ── Implementations ───────────────────────────────────────────


class MemoryStore(RecordStore):
    """Process-local store; documents are deep-copied in and out."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    def find_by_key(self, owner: str, period_key: str) -> dict[str, Any] | None:
        return _find(self._records, owner, period_key)

    def list_by_owner(self, owner: str, limit: int | None = None) -> list[dict[str, Any]]:
        return _list(self._records, owner, limit)

    def create(self, document: dict[str, Any]) -> str:
        return _insert(self._records, document)

    def patch(self, record_id: str, fields: dict[str, Any]) -> str:
        return _apply_patch(self._records, record_id, fields)


class JsonFileStore(RecordStore):
    """One JSON file per collection: ``{"records": {id: document}}``.

    Every call re-reads the file, so readers always see the last committed
    write. Writes replace the file atomically.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, dict[str, Any]]:
        records = read_json(self.path).get("records") or {}
        return records if isinstance(records, dict) else {}

    def _save(self, records: dict[str, dict[str, Any]]) -> None:
        write_json_atomic(self.path, {"records": records})

    def find_by_key(self, owner: str, period_key: str) -> dict[str, Any] | None:
        return _find(self._load(), owner, period_key)

    def list_by_owner(self, owner: str, limit: int | None = None) -> list[dict[str, Any]]:
        return _list(self._load(), owner, limit)

    def create(self, document: dict[str, Any]) -> str:
        records = self._load()
        record_id = _insert(records, document)
        self._save(records)
        logger.debug("Created %s in %s", record_id, self.path.name)
        return record_id

    def patch(self, record_id: str, fields: dict[str, Any]) -> str:
        records = self._load()
        _apply_patch(records, record_id, fields)
        self._save(records)
        return record_id
