"""CLI entrypoint for the universe season progression engine."""

from __future__ import annotations

import sys

import numpy as np

from universe_engine import __version__
from universe_engine.config import load_demo_universe, load_points_presets, load_settings
from universe_engine.core.evolution import describe_evolution
from universe_engine.core.rain import rain_label, roll_race_weather
from universe_engine.core.standings import (
    RaceEntry,
    build_points_map,
    compute_constructor_standings,
    compute_driver_standings,
)
from universe_engine.services.archive import archive_season
from universe_engine.services.predictions import generate_predictions, lock_predictions
from universe_engine.services.season_end import prepare_season_end
from universe_engine.storage.base import (
    CARS,
    DRIVERS,
    RACES,
    SEASONS,
    SPONSOR_OBJECTIVES,
    STAFF_MEMBERS,
    STANDINGS_CONSTRUCTORS,
    STANDINGS_DRIVERS,
    TEAMS,
)
from universe_engine.storage.memory import InMemoryStore


def _race_entries(races: list[dict], team_of: dict[str, str]) -> list[RaceEntry]:
    entries: list[RaceEntry] = []
    for race in races:
        for pos, driver_id in enumerate(race["classification"], start=1):
            entries.append(
                RaceEntry(
                    race_id=race["race_id"],
                    driver_id=driver_id,
                    team_id=team_of[driver_id],
                    finish_position=pos,
                    is_pole=race.get("pole") == driver_id,
                    is_fastest_lap=race.get("fastest_lap") == driver_id,
                )
            )
        for driver_id in race.get("dnf", []):
            entries.append(
                RaceEntry(
                    race_id=race["race_id"],
                    driver_id=driver_id,
                    team_id=team_of[driver_id],
                    finish_position=None,
                    is_pole=race.get("pole") == driver_id,
                )
            )
    return entries


def main() -> None:
    """Run one demo season from predictions to archival."""
    settings = load_settings()
    settings.configure_logging()

    print(f"Universe Season Engine v{__version__}")
    print("=" * 56)

    # -- Seed an in-memory universe --------------------------------------------
    demo = load_demo_universe()
    season = demo["season"]
    season_id = season["id"]
    scope = {"season_id": season_id}

    store = InMemoryStore(
        {
            SEASONS: [{**season, "universe_id": demo["universe_id"], "predictions_locked": False}],
            TEAMS: [{**t, **scope} for t in demo["teams"]],
            CARS: [{**c, **scope} for c in demo.get("cars", [])],
            DRIVERS: [{**d, **scope} for d in demo["drivers"]],
            STAFF_MEMBERS: [{**s, **scope} for s in demo.get("staff", [])],
            SPONSOR_OBJECTIVES: [{**o, **scope} for o in demo.get("sponsor_objectives", [])],
        }
    )
    driver_names = {d["id"]: d["full_name"] for d in demo["drivers"]}
    team_names = {t["id"]: t["name"] for t in demo["teams"]}

    # -- Pre-season predictions ------------------------------------------------
    driver_preds, team_preds = generate_predictions(store, season_id)
    lock_predictions(store, season_id)

    print(f"\nPredicted drivers' championship {season['year']}:")
    for p in driver_preds:
        print(f"  P{p.predicted_position:<2d} {driver_names[p.driver_id]:<16} {p.score:6.1f}")
    print("\nPredicted constructors' championship:")
    for p in team_preds:
        print(f"  P{p.predicted_position:<2d} {team_names[p.team_id]:<18} {p.score:6.1f}")

    # -- Season ------------------------------------------------------------------
    rng = np.random.default_rng(settings.rain_seed)
    print("\nWeather:")
    race_rows = []
    for race in demo["race_results"]:
        tier = roll_race_weather(race.get("base_rain_probability"), rng=rng)
        print(f"  {race['circuit']:<20} {rain_label(tier)}")
        race_rows.append(
            {
                **scope,
                "id": race["race_id"],
                "circuit_id": race.get("circuit_id"),
                "name": race["circuit"],
                "winner_driver_id": race["classification"][0],
                "rain_probability": tier,
            }
        )
    store.insert(RACES, race_rows)

    presets = load_points_presets()
    points_map = build_points_map(presets[demo.get("points_preset", settings.points_preset)])
    team_of = {d["id"]: d["team_id"] for d in demo["drivers"]}
    entries = _race_entries(demo["race_results"], team_of)

    driver_standings = compute_driver_standings(entries, points_map)
    team_standings = compute_constructor_standings(entries, points_map)
    store.insert(
        STANDINGS_DRIVERS,
        [
            {
                **scope,
                "driver_id": s.subject_id,
                "team_id": team_of[s.subject_id],
                "team_name": team_names[team_of[s.subject_id]],
                "position": s.position,
                "points": s.points,
                "wins": s.wins,
                "podiums": s.podiums,
                "poles": s.poles,
            }
            for s in driver_standings
        ],
    )
    store.insert(
        STANDINGS_CONSTRUCTORS,
        [
            {
                **scope,
                "team_id": s.subject_id,
                "position": s.position,
                "points": s.points,
                "wins": s.wins,
                "podiums": s.podiums,
                "poles": s.poles,
            }
            for s in team_standings
        ],
    )

    # -- Season end ----------------------------------------------------------------
    review = prepare_season_end(store, season_id)
    print("\nSurperformance (most notable first):")
    for s in review.driver_surperformances:
        print(
            f"  {s.name:<16} P{s.predicted_position} -> P{s.final_position}"
            f"  delta {s.delta:+d}  {s.effect}"
        )

    # Draws are settled on the middle of the range in the demo.
    manual = {
        driver_id: (drv.potential_min + drv.potential_max) // 2
        for driver_id, _ in review.pending_reveals.items()
        for drv in review.drivers
        if drv.id == driver_id
        and drv.potential_min is not None
        and drv.potential_max is not None
    }
    archive_input = review.to_archive_input(
        manual, season_summary=f"{season['year']} season of the demo universe."
    )

    print("\nSponsor objectives:")
    for objective in review.sponsor_objectives:
        result = review.sponsor_results[objective.id]
        verdict = "met" if result.is_met else "missed"
        print(
            f"  {team_names[objective.team_id]:<18} {objective.description or objective.objective_type:<28}"
            f" {result.label:<8} {verdict}"
        )

    print("\nEvolutions:")
    for evo in archive_input.driver_evolutions:
        print(f"  {driver_names[evo.driver_id]:<16} {describe_evolution(evo)}")

    report = archive_season(store, archive_input)
    print(f"\nSeason {season['year']} {report.status}: "
          f"champion {archive_input.champion_driver_name}, "
          f"constructors' champion {archive_input.champion_team_name}.")


if __name__ == "__main__":
    sys.exit(main() or 0)
