"""Prediction generation workflow.

Reads a season's drivers, teams and cars from the store, runs the pure
scorer and replaces the stored predictions.  Each prediction type is
replaced with a delete followed by an insert; if the insert fails the
delete stays committed and that type is left empty until predictions are
generated again.  The error is re-raised to the caller.
"""

from __future__ import annotations

import logging

from universe_engine.core.car import CarRating, CarStats
from universe_engine.core.driver import DriverRating
from universe_engine.core.predictions import (
    ConstructorPrediction,
    DriverPrediction,
    predict_constructors,
    predict_drivers,
)
from universe_engine.storage.base import (
    CARS,
    DRIVERS,
    PREDICTIONS_CONSTRUCTORS,
    PREDICTIONS_DRIVERS,
    SEASONS,
    TEAMS,
    RecordNotFoundError,
    RecordStore,
    Row,
    select_one,
)

logger = logging.getLogger(__name__)


class PredictionsLockedError(ValueError):
    """Predictions for the season are locked and cannot be regenerated."""


def _car_rating(row: Row) -> CarRating:
    # stored rows may carry only component notes
    if row.get("total") is None and row.get("team_id") is not None and any(
        row.get(k) is not None for k in ("motor", "aero", "chassis")
    ):
        return CarStats.from_row(row).to_rating()
    return CarRating.from_row(row)


def load_ratings(store: RecordStore, season_id: str) -> tuple[list[DriverRating], list[CarRating]]:
    """Read the driver and car ratings of a season."""
    drivers = [DriverRating.from_row(r) for r in store.select(DRIVERS, {"season_id": season_id})]
    team_ids = [t["id"] for t in store.select(TEAMS, {"season_id": season_id})]

    cars: list[CarRating] = []
    if team_ids:
        cars = [_car_rating(r) for r in store.select(CARS, {"team_id": team_ids})]
    return drivers, cars


def generate_predictions(
    store: RecordStore, season_id: str
) -> tuple[list[DriverPrediction], list[ConstructorPrediction]]:
    """Compute and persist fresh driver and constructor predictions.

    Raises:
        PredictionsLockedError: If the season's predictions are locked.
        StorageError: If any read, delete or insert fails.
    """
    season = select_one(store, SEASONS, {"id": season_id})
    if season.get("predictions_locked"):
        raise PredictionsLockedError(f"Predictions for season {season_id} are locked.")

    drivers, cars = load_ratings(store, season_id)
    driver_predictions = predict_drivers(drivers, cars)
    constructor_predictions = predict_constructors(drivers, cars)

    store.delete(PREDICTIONS_DRIVERS, {"season_id": season_id})
    if driver_predictions:
        store.insert(
            PREDICTIONS_DRIVERS,
            [
                {
                    "season_id": season_id,
                    "driver_id": p.driver_id,
                    "predicted_position": p.predicted_position,
                    "score": p.score,
                }
                for p in driver_predictions
            ],
        )

    store.delete(PREDICTIONS_CONSTRUCTORS, {"season_id": season_id})
    if constructor_predictions:
        store.insert(
            PREDICTIONS_CONSTRUCTORS,
            [
                {
                    "season_id": season_id,
                    "team_id": p.team_id,
                    "predicted_position": p.predicted_position,
                    "score": p.score,
                }
                for p in constructor_predictions
            ],
        )

    logger.info(
        "predictions generated season=%s drivers=%d constructors=%d",
        season_id,
        len(driver_predictions),
        len(constructor_predictions),
    )
    return driver_predictions, constructor_predictions


def lock_predictions(store: RecordStore, season_id: str) -> None:
    """Freeze the season's predictions once the first race is run."""
    updated = store.update(SEASONS, {"id": season_id}, {"predictions_locked": True})
    if not updated:
        raise RecordNotFoundError(
            f"No season with id {season_id!r}", table=SEASONS, operation="update"
        )
    logger.info("predictions locked season=%s", season_id)
