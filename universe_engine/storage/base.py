"""Persistence port for the universe engine.

The engine reaches storage only through :class:`RecordStore`: a generic
record store addressed by table name and an equality filter.  A filter
value that is a list, tuple or set matches any of its members.

Adapters raise :class:`StorageError` for every failed read or write.
Services let these errors propagate unchanged.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

Row = dict[str, Any]
Filter = Mapping[str, Any]

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

DRIVERS = "drivers"
TEAMS = "teams"
CARS = "cars"
SEASONS = "seasons"
STAFF_MEMBERS = "staff_members"
HISTORY_CHAMPIONS = "history_champions"
PREDICTIONS_DRIVERS = "predictions_drivers"
PREDICTIONS_CONSTRUCTORS = "predictions_constructors"
STANDINGS_DRIVERS = "standings_drivers"
STANDINGS_CONSTRUCTORS = "standings_constructors"
RACES = "races"
SPONSOR_OBJECTIVES = "sponsor_objectives"

TABLES: tuple[str, ...] = (
    DRIVERS,
    TEAMS,
    CARS,
    SEASONS,
    STAFF_MEMBERS,
    HISTORY_CHAMPIONS,
    PREDICTIONS_DRIVERS,
    PREDICTIONS_CONSTRUCTORS,
    STANDINGS_DRIVERS,
    STANDINGS_CONSTRUCTORS,
    RACES,
    SPONSOR_OBJECTIVES,
)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class StorageError(Exception):
    """A read or write against the record store failed.

    Attributes:
        table: Table the operation targeted.
        operation: ``"select"``, ``"insert"``, ``"update"`` or ``"delete"``.
    """

    def __init__(self, message: str, *, table: str | None = None, operation: str | None = None) -> None:
        super().__init__(message)
        self.table = table
        self.operation = operation


class RecordNotFoundError(StorageError):
    """A row that had to exist was not found."""


# ---------------------------------------------------------------------------
# Port
# ---------------------------------------------------------------------------


@runtime_checkable
class RecordStore(Protocol):
    """Minimal table-oriented storage interface."""

    def select(self, table: str, filters: Filter | None = None) -> list[Row]:
        """Return copies of every row of *table* matching *filters*."""
        ...

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """Insert *rows* and return them as stored (ids filled in)."""
        ...

    def update(self, table: str, filters: Filter, patch: Mapping[str, Any]) -> list[Row]:
        """Apply *patch* to every matching row and return the updated rows."""
        ...

    def delete(self, table: str, filters: Filter) -> int:
        """Delete every matching row and return how many were removed."""
        ...


def matches(row: Mapping[str, Any], filters: Filter | None) -> bool:
    """Return True when *row* satisfies every condition in *filters*."""
    if not filters:
        return True
    for field, expected in filters.items():
        value = row.get(field)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def select_one(store: RecordStore, table: str, filters: Filter) -> Row:
    """Return the single row matching *filters*.

    Raises:
        RecordNotFoundError: If no row matches.
    """
    rows = store.select(table, filters)
    if not rows:
        raise RecordNotFoundError(
            f"No row in '{table}' matches {dict(filters)!r}",
            table=table,
            operation="select",
        )
    return rows[0]
