"""Season surperformance loader.

Joins the stored pre-season predictions with the final standings of a
season and evaluates every driver and constructor.  Subjects without a
final standing (or, for drivers, without a driver row) are skipped.
"""

from __future__ import annotations

from universe_engine.core.surperformance import (
    DriverSurperformance,
    DriverSurperformanceInput,
    TeamSurperformance,
    TeamSurperformanceInput,
    evaluate_drivers,
    evaluate_teams,
)
from universe_engine.storage.base import (
    DRIVERS,
    PREDICTIONS_CONSTRUCTORS,
    PREDICTIONS_DRIVERS,
    STANDINGS_CONSTRUCTORS,
    STANDINGS_DRIVERS,
    TEAMS,
    RecordStore,
    Row,
)


def driver_display_name(row: Row) -> str:
    if row.get("full_name"):
        return str(row["full_name"])
    parts = [row.get("first_name"), row.get("last_name")]
    return " ".join(str(p) for p in parts if p)


def load_season_surperformance(
    store: RecordStore, season_id: str
) -> tuple[list[DriverSurperformance], list[TeamSurperformance]]:
    """Evaluate the season's drivers and constructors against their predictions."""
    scope = {"season_id": season_id}

    drivers = {r["id"]: r for r in store.select(DRIVERS, scope)}
    team_names = {r["id"]: r.get("name") or "" for r in store.select(TEAMS, scope)}

    driver_final = {r["driver_id"]: r for r in store.select(STANDINGS_DRIVERS, scope)}
    team_final = {r["team_id"]: r for r in store.select(STANDINGS_CONSTRUCTORS, scope)}

    driver_inputs: list[DriverSurperformanceInput] = []
    for pred in sorted(store.select(PREDICTIONS_DRIVERS, scope), key=lambda p: p["predicted_position"]):
        standing = driver_final.get(pred["driver_id"])
        driver = drivers.get(pred["driver_id"])
        if standing is None or driver is None:
            continue
        driver_inputs.append(
            DriverSurperformanceInput(
                driver_id=pred["driver_id"],
                name=driver_display_name(driver),
                team=standing.get("team_name") or team_names.get(driver.get("team_id"), "-"),
                age=driver.get("age"),
                predicted_position=pred["predicted_position"],
                final_position=standing.get("position"),
            )
        )

    team_inputs: list[TeamSurperformanceInput] = []
    for pred in sorted(
        store.select(PREDICTIONS_CONSTRUCTORS, scope), key=lambda p: p["predicted_position"]
    ):
        standing = team_final.get(pred["team_id"])
        if standing is None:
            continue
        team_inputs.append(
            TeamSurperformanceInput(
                team_id=pred["team_id"],
                name=team_names.get(pred["team_id"], ""),
                predicted_position=pred["predicted_position"],
                final_position=standing.get("position"),
            )
        )

    return evaluate_drivers(driver_inputs), evaluate_teams(team_inputs)
