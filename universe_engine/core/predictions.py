"""Pre-season prediction scorer for the universe engine.

Two ranked lists are produced once per season, before the first race:

* **Drivers** -- ``score = skill + car total of the driver's team``.
* **Constructors** -- ``score = car total + mean skill of the team's drivers``.

Both lists are sorted by descending score and numbered ``1..N``.  The sort
is stable, so entries with identical scores keep their input order.
Drivers with an unknown id, team or skill are left out of the ranking
rather than reported as errors.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from universe_engine.core.car import CarRating
from universe_engine.core.driver import DriverRating

# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DriverPrediction:
    """Predicted finishing position of a single driver."""

    driver_id: str
    name: str | None
    score: float
    predicted_position: int


@dataclass(frozen=True)
class ConstructorPrediction:
    """Predicted finishing position of a single constructor.

    Attributes:
        team_id: Team identifier.
        score: ``car_total + avg_driver_note``.
        car_total: Car total used in the score (0 when the team has no car).
        avg_driver_note: Arithmetic mean of the team's driver skills.
        predicted_position: Rank in ``1..N``.
    """

    team_id: str
    score: float
    car_total: float
    avg_driver_note: float
    predicted_position: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _car_totals(cars: Iterable[CarRating]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for car in cars:
        if car.team_id is not None:
            totals[car.team_id] = car.total or 0
    return totals


# ---------------------------------------------------------------------------
# Scorers
# ---------------------------------------------------------------------------


def predict_drivers(
    drivers: Sequence[DriverRating],
    cars: Sequence[CarRating],
) -> list[DriverPrediction]:
    """Rank drivers by skill plus car total.

    Args:
        drivers: Driver ratings for the season.
        cars: Car ratings for the season's teams.

    Returns:
        One :class:`DriverPrediction` per rankable driver, ordered by
        ``predicted_position``.
    """
    totals = _car_totals(cars)

    scored: list[tuple[DriverRating, float]] = [
        (drv, drv.skill + totals.get(drv.team_id, 0))
        for drv in drivers
        if drv.is_rankable
    ]
    scored.sort(key=lambda item: item[1], reverse=True)

    return [
        DriverPrediction(
            driver_id=drv.id,
            name=drv.name,
            score=score,
            predicted_position=pos,
        )
        for pos, (drv, score) in enumerate(scored, start=1)
    ]


def predict_constructors(
    drivers: Sequence[DriverRating],
    cars: Sequence[CarRating],
) -> list[ConstructorPrediction]:
    """Rank constructors by car total plus mean driver skill.

    Teams are discovered from the drivers list: a team appears once it
    fields at least one driver with a known skill, whether or not it has a
    car record.
    """
    totals = _car_totals(cars)

    # dicts keep first-seen order, which is the tie-break order
    notes_by_team: dict[str, list[float]] = {}
    for drv in drivers:
        if drv.team_id is None or drv.skill is None:
            continue
        notes_by_team.setdefault(drv.team_id, []).append(drv.skill)

    scored: list[tuple[str, float, float, float]] = []
    for team_id, notes in notes_by_team.items():
        avg_note = float(np.mean(notes))
        car_total = totals.get(team_id, 0)
        scored.append((team_id, car_total + avg_note, car_total, avg_note))

    scored.sort(key=lambda item: item[1], reverse=True)

    return [
        ConstructorPrediction(
            team_id=team_id,
            score=score,
            car_total=car_total,
            avg_driver_note=avg_note,
            predicted_position=pos,
        )
        for pos, (team_id, score, car_total, avg_note) in enumerate(scored, start=1)
    ]


def predictions_frame(
    predictions: Sequence[DriverPrediction] | Sequence[ConstructorPrediction],
) -> pd.DataFrame:
    """Return a ranked list as a DataFrame indexed by ``predicted_position``."""
    frame = pd.DataFrame([asdict(p) for p in predictions])
    if frame.empty:
        return frame
    return frame.set_index("predicted_position").sort_index()
