"""Tests for the prediction generation workflow."""

import logging

import pytest

from universe_engine.services.predictions import (
    PredictionsLockedError,
    generate_predictions,
    load_ratings,
    lock_predictions,
)
from universe_engine.storage import InMemoryStore, RecordNotFoundError, StorageError
from universe_engine.storage.base import (
    CARS,
    DRIVERS,
    PREDICTIONS_CONSTRUCTORS,
    PREDICTIONS_DRIVERS,
    SEASONS,
    TEAMS,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _tables(locked: bool = False) -> dict:
    return {
        SEASONS: [{"id": "s1", "universe_id": "u1", "year": 2030, "predictions_locked": locked}],
        TEAMS: [
            {"id": "t1", "season_id": "s1", "name": "Apex"},
            {"id": "t2", "season_id": "s1", "name": "Boreal"},
        ],
        CARS: [
            {"id": "c1", "team_id": "t1", "total": 24},
            {"id": "c2", "team_id": "t2", "motor": 9, "aero": 9, "chassis": 9},
        ],
        DRIVERS: [
            {"id": "d1", "season_id": "s1", "team_id": "t1", "full_name": "A", "note": 9},
            {"id": "d2", "season_id": "s1", "team_id": "t1", "full_name": "B", "note": 7},
            {"id": "d3", "season_id": "s1", "team_id": "t2", "full_name": "C", "effective_note": 6, "note": 8},
        ],
    }


class FailingInsertStore(InMemoryStore):
    """Fails every insert into one table."""

    def __init__(self, tables, fail_table: str) -> None:
        super().__init__(tables)
        self.fail_table = fail_table

    def insert(self, table, rows):
        if table == self.fail_table:
            raise StorageError("insert refused", table=table, operation="insert")
        return super().insert(table, rows)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_load_ratings_derives_missing_car_total() -> None:
    drivers, cars = load_ratings(InMemoryStore(_tables()), "s1")
    assert [d.skill for d in drivers] == [9, 7, 6]
    assert {c.team_id: c.total for c in cars} == {"t1": 24, "t2": 27}


def test_generate_persists_both_types() -> None:
    store = InMemoryStore(_tables())
    drivers, constructors = generate_predictions(store, "s1")

    assert [p.driver_id for p in drivers] == ["d1", "d3", "d2"]
    assert [p.team_id for p in constructors] == ["t2", "t1"]

    stored = {r["driver_id"]: r["predicted_position"] for r in store.select(PREDICTIONS_DRIVERS)}
    assert stored == {"d1": 1, "d3": 2, "d2": 3}
    stored_teams = {r["team_id"]: r["score"] for r in store.select(PREDICTIONS_CONSTRUCTORS)}
    assert stored_teams == {"t2": 33, "t1": 32}


def test_regenerate_replaces_previous_rows() -> None:
    store = InMemoryStore(_tables())
    store.insert(PREDICTIONS_DRIVERS, [{"season_id": "s1", "driver_id": "old", "predicted_position": 1}])
    store.insert(PREDICTIONS_DRIVERS, [{"season_id": "s2", "driver_id": "other", "predicted_position": 1}])

    generate_predictions(store, "s1")
    generate_predictions(store, "s1")

    s1_rows = store.select(PREDICTIONS_DRIVERS, {"season_id": "s1"})
    assert len(s1_rows) == 3
    assert "old" not in {r["driver_id"] for r in s1_rows}
    assert len(store.select(PREDICTIONS_DRIVERS, {"season_id": "s2"})) == 1


def test_locked_season_is_refused() -> None:
    store = InMemoryStore(_tables(locked=True))
    with pytest.raises(PredictionsLockedError):
        generate_predictions(store, "s1")
    assert store.select(PREDICTIONS_DRIVERS) == []


def test_unknown_season() -> None:
    with pytest.raises(RecordNotFoundError):
        generate_predictions(InMemoryStore(_tables()), "nope")


def test_failed_insert_leaves_type_empty() -> None:
    store = FailingInsertStore(_tables(), fail_table=PREDICTIONS_DRIVERS)
    store.insert(PREDICTIONS_CONSTRUCTORS, [{"season_id": "s1", "team_id": "t1", "predicted_position": 1}])
    InMemoryStore.insert(store, PREDICTIONS_DRIVERS, [{"season_id": "s1", "driver_id": "old", "predicted_position": 1}])

    with pytest.raises(StorageError):
        generate_predictions(store, "s1")

    assert store.select(PREDICTIONS_DRIVERS, {"season_id": "s1"}) == []
    # constructor replacement never started
    assert len(store.select(PREDICTIONS_CONSTRUCTORS, {"season_id": "s1"})) == 1


def test_lock_predictions(caplog) -> None:
    store = InMemoryStore(_tables())
    with caplog.at_level(logging.INFO):
        lock_predictions(store, "s1")
    assert store.select(SEASONS, {"id": "s1"})[0]["predictions_locked"] is True
    assert "predictions locked" in caplog.text

    with pytest.raises(PredictionsLockedError):
        generate_predictions(store, "s1")


def test_lock_unknown_season() -> None:
    with pytest.raises(RecordNotFoundError):
        lock_predictions(InMemoryStore(_tables()), "nope")
