"""Championship points and standings for the universe engine.

Race results accumulate into driver and constructor standings.  Points
are looked up from the universe's points system (position -> points);
a classified finish in the top ten with the fastest lap earns one extra
point, and a DNF scores nothing.

Standings are ordered by points, then wins, then podiums.  Any remaining
tie keeps the order in which subjects first appear in the results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import pandas as pd

FASTEST_LAP_BONUS: int = 1
FASTEST_LAP_MAX_POSITION: int = 10

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RaceEntry:
    """One driver's classification in one race.

    Attributes:
        race_id: Race identifier.
        driver_id: Driver identifier.
        team_id: Team the driver raced for.
        finish_position: Classified position, ``None`` for a DNF.
        is_pole: Started from pole position.
        is_fastest_lap: Set the fastest lap of the race.
    """

    race_id: str
    driver_id: str
    team_id: str
    finish_position: int | None
    is_pole: bool = False
    is_fastest_lap: bool = False


@dataclass(frozen=True)
class Standing:
    subject_id: str
    position: int
    points: float
    wins: int
    podiums: int
    poles: int


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


def build_points_map(rows: Iterable[Mapping[str, int]]) -> dict[int, float]:
    """Build ``{position: points}`` from points-system rows."""
    return {int(row["position"]): row["points"] for row in rows}


def driver_race_points(
    finish_position: int | None,
    is_fastest_lap: bool,
    points_map: Mapping[int, float],
) -> float:
    """Points scored by a driver in a single race."""
    if finish_position is None:
        return 0
    base = points_map.get(finish_position, 0)
    bonus = (
        FASTEST_LAP_BONUS
        if is_fastest_lap and finish_position <= FASTEST_LAP_MAX_POSITION
        else 0
    )
    return base + bonus


# ---------------------------------------------------------------------------
# Standings
# ---------------------------------------------------------------------------


def _scored_frame(
    results: Sequence[RaceEntry], points_map: Mapping[int, float]
) -> pd.DataFrame:
    rows = []
    for entry in results:
        pos = entry.finish_position
        rows.append(
            {
                "driver_id": entry.driver_id,
                "team_id": entry.team_id,
                "points": driver_race_points(pos, entry.is_fastest_lap, points_map),
                "wins": int(pos == 1),
                "podiums": int(pos is not None and pos <= 3),
                "poles": int(entry.is_pole),
            }
        )
    return pd.DataFrame(rows)


def _rank(frame: pd.DataFrame, key: str) -> list[Standing]:
    if frame.empty:
        return []

    totals = frame.groupby(key, sort=False)[["points", "wins", "podiums", "poles"]].sum()
    totals = totals.sort_values(
        ["points", "wins", "podiums"], ascending=False, kind="stable"
    )

    return [
        Standing(
            subject_id=str(subject_id),
            position=pos,
            points=float(row["points"]),
            wins=int(row["wins"]),
            podiums=int(row["podiums"]),
            poles=int(row["poles"]),
        )
        for pos, (subject_id, row) in enumerate(totals.iterrows(), start=1)
    ]


def compute_driver_standings(
    results: Sequence[RaceEntry], points_map: Mapping[int, float]
) -> list[Standing]:
    """Aggregate race results into the drivers' championship."""
    return _rank(_scored_frame(results, points_map), "driver_id")


def compute_constructor_standings(
    results: Sequence[RaceEntry], points_map: Mapping[int, float]
) -> list[Standing]:
    """Aggregate race results into the constructors' championship."""
    return _rank(_scored_frame(results, points_map), "team_id")
