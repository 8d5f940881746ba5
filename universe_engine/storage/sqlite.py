"""SQLite-backed record store.

Each :class:`RecordStore` call runs in its own transaction, so a single
insert, update or delete is atomic.  Nothing spans several calls unless
the caller groups them with :meth:`SQLiteStore.transaction`.  The schema
is fixed: table and column names are checked against :data:`SCHEMA`
before any SQL is built.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from universe_engine.storage.base import (
    CARS,
    DRIVERS,
    HISTORY_CHAMPIONS,
    PREDICTIONS_CONSTRUCTORS,
    PREDICTIONS_DRIVERS,
    RACES,
    SEASONS,
    SPONSOR_OBJECTIVES,
    STAFF_MEMBERS,
    STANDINGS_CONSTRUCTORS,
    STANDINGS_DRIVERS,
    TEAMS,
    Filter,
    Row,
    StorageError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_STANDING_COLUMNS: dict[str, str] = {
    "position": "INTEGER",
    "points": "REAL",
    "wins": "INTEGER",
    "podiums": "INTEGER",
    "poles": "INTEGER",
}

SCHEMA: dict[str, dict[str, str]] = {
    SEASONS: {
        "universe_id": "TEXT NOT NULL",
        "year": "INTEGER NOT NULL",
        "status": "TEXT",
        "predictions_locked": "BOOLEAN",
    },
    TEAMS: {
        "season_id": "TEXT NOT NULL",
        "name": "TEXT NOT NULL",
        "surperformance_bonus": "INTEGER",
    },
    CARS: {
        "season_id": "TEXT",
        "team_id": "TEXT",
        "motor": "INTEGER",
        "aero": "INTEGER",
        "chassis": "INTEGER",
        "engine_change_penalty": "BOOLEAN",
        "total": "REAL",
    },
    DRIVERS: {
        "season_id": "TEXT NOT NULL",
        "team_id": "TEXT",
        "first_name": "TEXT",
        "last_name": "TEXT",
        "full_name": "TEXT",
        "age": "INTEGER",
        "note": "REAL",
        "effective_note": "REAL",
        "potential_min": "INTEGER",
        "potential_max": "INTEGER",
        "potential_final": "INTEGER",
        "potential_revealed": "BOOLEAN",
        "is_rookie": "BOOLEAN",
        "world_titles": "INTEGER",
        "contract_years_remaining": "INTEGER",
        "years_in_team": "INTEGER",
    },
    STAFF_MEMBERS: {
        "season_id": "TEXT NOT NULL",
        "team_id": "TEXT",
        "name": "TEXT",
        "role": "TEXT",
        "contract_years_remaining": "INTEGER",
        "years_in_team": "INTEGER",
    },
    HISTORY_CHAMPIONS: {
        "universe_id": "TEXT NOT NULL",
        "year": "INTEGER NOT NULL",
        "champion_driver_id": "TEXT",
        "champion_driver_name": "TEXT",
        "champion_driver_points": "REAL",
        "champion_driver_team": "TEXT",
        "champion_team_id": "TEXT",
        "champion_team_name": "TEXT",
        "champion_team_points": "REAL",
        "season_summary": "TEXT",
    },
    PREDICTIONS_DRIVERS: {
        "season_id": "TEXT NOT NULL",
        "driver_id": "TEXT NOT NULL",
        "predicted_position": "INTEGER NOT NULL",
        "score": "REAL",
    },
    PREDICTIONS_CONSTRUCTORS: {
        "season_id": "TEXT NOT NULL",
        "team_id": "TEXT NOT NULL",
        "predicted_position": "INTEGER NOT NULL",
        "score": "REAL",
    },
    STANDINGS_DRIVERS: {
        "season_id": "TEXT NOT NULL",
        "driver_id": "TEXT NOT NULL",
        "team_id": "TEXT",
        "team_name": "TEXT",
        **_STANDING_COLUMNS,
    },
    STANDINGS_CONSTRUCTORS: {
        "season_id": "TEXT NOT NULL",
        "team_id": "TEXT NOT NULL",
        **_STANDING_COLUMNS,
    },
    RACES: {
        "season_id": "TEXT NOT NULL",
        "circuit_id": "TEXT",
        "name": "TEXT",
        "winner_driver_id": "TEXT",
        "rain_probability": "INTEGER",
    },
    SPONSOR_OBJECTIVES: {
        "season_id": "TEXT NOT NULL",
        "team_id": "TEXT NOT NULL",
        "objective_type": "TEXT NOT NULL",
        "target_value": "REAL",
        "target_entity_id": "TEXT",
        "description": "TEXT",
        "is_met": "BOOLEAN",
        "evaluated_value": "REAL",
    },
}


class SQLiteStore:
    """:class:`RecordStore` over a single SQLite database file."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._savepoint_seq = 0

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Open a transaction, or a SAVEPOINT inside one already open.

        Wrapping several store calls in ``with store.transaction():`` makes
        them atomic together; each call then runs as a savepoint, so a
        failed call is undone alone and the outer block may carry on.
        """
        cur = self._conn.cursor()
        savepoint = None
        if self._conn.in_transaction:
            self._savepoint_seq += 1
            savepoint = f"sp_{self._savepoint_seq}"
            cur.execute(f"SAVEPOINT {savepoint};")
        else:
            cur.execute("BEGIN;")
        try:
            yield cur
        except Exception:
            if savepoint is None:
                self._conn.rollback()
            else:
                cur.execute(f"ROLLBACK TO SAVEPOINT {savepoint};")
                cur.execute(f"RELEASE SAVEPOINT {savepoint};")
            raise
        else:
            if savepoint is None:
                self._conn.commit()
            else:
                cur.execute(f"RELEASE SAVEPOINT {savepoint};")
        finally:
            cur.close()

    def init_db(self) -> None:
        """Create every table of :data:`SCHEMA` that does not exist yet."""
        with self.transaction() as cur:
            for table, columns in SCHEMA.items():
                ddl = ", ".join(f"{col} {decl}" for col, decl in columns.items())
                cur.execute(f"CREATE TABLE IF NOT EXISTS {table} (id TEXT PRIMARY KEY, {ddl});")
        logger.debug("schema ready db=%s tables=%d", self.db_path, len(SCHEMA))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _columns(table: str, operation: str) -> dict[str, str]:
        try:
            return SCHEMA[table]
        except KeyError:
            raise StorageError(
                f"Unknown table '{table}'", table=table, operation=operation
            ) from None

    def _check_fields(self, table: str, fields: Iterable[str], operation: str) -> None:
        columns = self._columns(table, operation)
        for field in fields:
            if field != "id" and field not in columns:
                raise StorageError(
                    f"Unknown column '{field}' in '{table}'",
                    table=table,
                    operation=operation,
                )

    @staticmethod
    def _where(filters: Filter | None) -> tuple[str, list[Any]]:
        if not filters:
            return "", []
        clauses: list[str] = []
        params: list[Any] = []
        for field, expected in filters.items():
            if isinstance(expected, (list, tuple, set, frozenset)):
                values = list(expected)
                if not values:
                    clauses.append("0")
                    continue
                clauses.append(f"{field} IN ({', '.join('?' for _ in values)})")
                params.extend(values)
            elif expected is None:
                clauses.append(f"{field} IS NULL")
            else:
                clauses.append(f"{field} = ?")
                params.append(expected)
        return " WHERE " + " AND ".join(clauses), params

    def _to_row(self, table: str, record: sqlite3.Row) -> Row:
        columns = SCHEMA[table]
        row: Row = dict(record)
        for col, decl in columns.items():
            if decl.startswith("BOOLEAN") and row.get(col) is not None:
                row[col] = bool(row[col])
        return row

    def _run(self, table: str, operation: str, fn):
        try:
            with self.transaction() as cur:
                return fn(cur)
        except sqlite3.Error as exc:
            logger.error("sqlite %s failed table=%s: %s", operation, table, exc)
            raise StorageError(str(exc), table=table, operation=operation) from exc

    # ------------------------------------------------------------------
    # RecordStore
    # ------------------------------------------------------------------

    def select(self, table: str, filters: Filter | None = None) -> list[Row]:
        self._check_fields(table, (filters or {}).keys(), "select")
        where, params = self._where(filters)

        def _select(cur: sqlite3.Cursor) -> list[Row]:
            records = cur.execute(f"SELECT * FROM {table}{where};", params).fetchall()
            return [self._to_row(table, r) for r in records]

        return self._run(table, "select", _select)

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        prepared: list[Row] = []
        for row in rows:
            stored = dict(row)
            if stored.get("id") is None:
                stored["id"] = str(uuid.uuid4())
            self._check_fields(table, stored.keys(), "insert")
            prepared.append(stored)

        def _insert(cur: sqlite3.Cursor) -> list[Row]:
            for stored in prepared:
                cols = list(stored)
                cur.execute(
                    f"INSERT INTO {table} ({', '.join(cols)}) "
                    f"VALUES ({', '.join('?' for _ in cols)});",
                    [stored[c] for c in cols],
                )
            return prepared

        return self._run(table, "insert", _insert)

    def update(self, table: str, filters: Filter, patch: Mapping[str, Any]) -> list[Row]:
        self._check_fields(table, list(filters.keys()) + list(patch.keys()), "update")
        where, params = self._where(filters)
        assignments = ", ".join(f"{col} = ?" for col in patch)

        def _update(cur: sqlite3.Cursor) -> list[Row]:
            ids = [r["id"] for r in cur.execute(f"SELECT id FROM {table}{where};", params)]
            if not ids or not patch:
                return []
            marks = ", ".join("?" for _ in ids)
            cur.execute(
                f"UPDATE {table} SET {assignments} WHERE id IN ({marks});",
                [*patch.values(), *ids],
            )
            records = cur.execute(f"SELECT * FROM {table} WHERE id IN ({marks});", ids)
            return [self._to_row(table, r) for r in records.fetchall()]

        return self._run(table, "update", _update)

    def delete(self, table: str, filters: Filter) -> int:
        self._check_fields(table, filters.keys(), "delete")
        where, params = self._where(filters)

        def _delete(cur: sqlite3.Cursor) -> int:
            return cur.execute(f"DELETE FROM {table}{where};", params).rowcount

        return self._run(table, "delete", _delete)
