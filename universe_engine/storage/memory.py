"""In-process record store.

Rows live in plain lists keyed by table name.  Every read and write works
on copies so callers can never mutate stored state by accident.  Used by
the demo entrypoint and as the base for test fakes.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Iterable, Mapping

from universe_engine.storage.base import Filter, Row, StorageError, matches


class InMemoryStore:
    """Dictionary-backed implementation of :class:`RecordStore`."""

    def __init__(self, tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = {}
        for table, rows in (tables or {}).items():
            self._tables[table] = [self._with_id(row) for row in rows]

    @staticmethod
    def _with_id(row: Mapping[str, Any]) -> Row:
        stored = copy.deepcopy(dict(row))
        if stored.get("id") is None:
            stored["id"] = str(uuid.uuid4())
        return stored

    def _table(self, table: str) -> list[Row]:
        return self._tables.setdefault(table, [])

    # -- RecordStore ------------------------------------------------------

    def select(self, table: str, filters: Filter | None = None) -> list[Row]:
        return [copy.deepcopy(r) for r in self._table(table) if matches(r, filters)]

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        stored = [self._with_id(row) for row in rows]
        existing = {r["id"] for r in self._table(table)}
        for row in stored:
            if row["id"] in existing:
                raise StorageError(
                    f"Duplicate id {row['id']!r} in '{table}'",
                    table=table,
                    operation="insert",
                )
            existing.add(row["id"])
        self._table(table).extend(stored)
        return copy.deepcopy(stored)

    def update(self, table: str, filters: Filter, patch: Mapping[str, Any]) -> list[Row]:
        updated: list[Row] = []
        for row in self._table(table):
            if matches(row, filters):
                row.update(copy.deepcopy(dict(patch)))
                updated.append(copy.deepcopy(row))
        return updated

    def delete(self, table: str, filters: Filter) -> int:
        rows = self._table(table)
        kept = [r for r in rows if not matches(r, filters)]
        removed = len(rows) - len(kept)
        self._tables[table] = kept
        return removed

    def __repr__(self) -> str:
        counts = ", ".join(f"{t}={len(r)}" for t, r in sorted(self._tables.items()))
        return f"InMemoryStore({counts})"
