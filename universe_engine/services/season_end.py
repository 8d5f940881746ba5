"""Season-end review assembly.

Gathers what the player reviews before archiving a season and turns it
into an :class:`ArchiveInput`.  Sponsor objectives are evaluated against
the final standings and race wins; ``custom`` ones take the player's
verdict.  Rookie reveals that end in a draw stay
pending until a value is chosen with
:meth:`SeasonEndReview.to_archive_input`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from universe_engine.core.evolution import (
    DriverProfile,
    build_driver_evolutions,
    build_team_budget_changes,
    propose_rookie_reveals,
)
from universe_engine.core.rookie import RookieReveal
from universe_engine.core.sponsors import (
    EvaluationContext,
    EvaluationResult,
    SponsorEvaluation,
    SponsorObjective,
    evaluate_objectives,
    team_win_circuits,
)
from universe_engine.core.standings import Standing
from universe_engine.core.surperformance import DriverSurperformance, TeamSurperformance
from universe_engine.services.archive import ArchiveInput
from universe_engine.services.surperformance import (
    driver_display_name,
    load_season_surperformance,
)
from universe_engine.storage.base import (
    DRIVERS,
    RACES,
    SEASONS,
    SPONSOR_OBJECTIVES,
    STANDINGS_CONSTRUCTORS,
    STANDINGS_DRIVERS,
    TEAMS,
    RecordStore,
    Row,
    select_one,
)


@dataclass
class SeasonEndReview:
    """Derived season-end values awaiting the player's confirmation."""

    season: Row
    drivers: list[DriverProfile]
    driver_surperformances: list[DriverSurperformance]
    team_surperformances: list[TeamSurperformance]
    rookie_reveals: dict[str, RookieReveal]
    champion_driver: Row | None = None
    champion_team: Row | None = None
    driver_names: dict[str, str] = field(default_factory=dict)
    team_names: dict[str, str] = field(default_factory=dict)
    sponsor_objectives: list[SponsorObjective] = field(default_factory=list)
    sponsor_results: dict[str, EvaluationResult] = field(default_factory=dict)

    @property
    def pending_reveals(self) -> dict[str, RookieReveal]:
        """Rookie reveals that still need a manual choice."""
        return {k: v for k, v in self.rookie_reveals.items() if v.needs_manual_choice}

    def to_archive_input(
        self,
        manual_reveals: Mapping[str, int] | None = None,
        *,
        season_summary: str | None = None,
        contract_decrements: bool = True,
        champion_bonus_enabled: bool = True,
        sponsor_overrides: Mapping[str, bool] | None = None,
    ) -> ArchiveInput:
        """Freeze the review into an :class:`ArchiveInput`.

        Args:
            manual_reveals: Chosen potentials for rookies whose reveal was
                a draw.  A draw left without a choice is simply not
                revealed this season.
            season_summary: Free text stored with the champions.
            contract_decrements: Whether contracts roll over.
            champion_bonus_enabled: Whether the champion gets ``+1``.
            sponsor_overrides: ``{objective_id: is_met}`` verdicts that replace
                the computed ones, typically for ``custom`` objectives.
        """
        reveals: dict[str, int | None] = {
            driver_id: reveal.auto_value for driver_id, reveal in self.rookie_reveals.items()
        }
        for driver_id, value in (manual_reveals or {}).items():
            if driver_id in self.rookie_reveals:
                reveals[driver_id] = value

        champion_driver_id = self.champion_driver["driver_id"] if self.champion_driver else None
        evolutions = build_driver_evolutions(
            self.drivers,
            self.driver_surperformances,
            champion_driver_id,
            champion_bonus_enabled=champion_bonus_enabled,
            rookie_reveals=reveals,
        )
        budgets = build_team_budget_changes(self.team_surperformances)
        overrides = sponsor_overrides or {}
        sponsors = tuple(
            SponsorEvaluation(
                objective_id=objective_id,
                is_met=overrides.get(objective_id, result.is_met),
                evaluated_value=result.evaluated_value,
            )
            for objective_id, result in self.sponsor_results.items()
        )

        champion_team_id = self.champion_team["team_id"] if self.champion_team else None
        return ArchiveInput(
            season_id=str(self.season["id"]),
            universe_id=str(self.season["universe_id"]),
            year=int(self.season["year"]),
            champion_driver_id=champion_driver_id,
            champion_driver_name=self.driver_names.get(champion_driver_id or ""),
            champion_driver_points=self.champion_driver.get("points") if self.champion_driver else None,
            champion_driver_team=self.champion_driver.get("team_name") if self.champion_driver else None,
            champion_team_id=champion_team_id,
            champion_team_name=self.team_names.get(champion_team_id or ""),
            champion_team_points=self.champion_team.get("points") if self.champion_team else None,
            season_summary=season_summary,
            driver_evolutions=tuple(evolutions),
            team_budget_changes=tuple(budgets),
            contract_decrements=contract_decrements,
            sponsor_evaluations=sponsors,
        )


def _leader(rows: list[Row]) -> Row | None:
    ranked = [r for r in rows if r.get("position") is not None]
    if not ranked:
        return None
    return min(ranked, key=lambda r: r["position"])


def _standing(row: Row, key: str) -> Standing:
    return Standing(
        subject_id=str(row[key]),
        position=int(row["position"]),
        points=row.get("points") or 0,
        wins=row.get("wins") or 0,
        podiums=row.get("podiums") or 0,
        poles=row.get("poles") or 0,
    )


def _sponsor_context(
    driver_standings: list[Row],
    constructor_standings: list[Row],
    driver_rows: list[Row],
    race_rows: list[Row],
) -> EvaluationContext:
    driver_teams = {r["id"]: r["team_id"] for r in driver_rows if r.get("team_id")}
    winners = [
        (r["winner_driver_id"], r.get("circuit_id")) for r in race_rows if r.get("winner_driver_id")
    ]
    return EvaluationContext(
        driver_standings=[
            _standing(r, "driver_id") for r in driver_standings if r.get("position") is not None
        ],
        constructor_standings=[
            _standing(r, "team_id") for r in constructor_standings if r.get("position") is not None
        ],
        driver_teams=driver_teams,
        team_win_circuits=team_win_circuits(winners, driver_teams),
    )


def prepare_season_end(store: RecordStore, season_id: str) -> SeasonEndReview:
    """Read the season and derive every value the review screen shows."""
    season = select_one(store, SEASONS, {"id": season_id})
    scope = {"season_id": season_id}

    driver_rows = store.select(DRIVERS, scope)
    team_rows = store.select(TEAMS, scope)
    driver_surp, team_surp = load_season_surperformance(store, season_id)

    driver_standings = store.select(STANDINGS_DRIVERS, scope)
    constructor_standings = store.select(STANDINGS_CONSTRUCTORS, scope)
    objectives = [SponsorObjective.from_row(r) for r in store.select(SPONSOR_OBJECTIVES, scope)]
    context = _sponsor_context(
        driver_standings, constructor_standings, driver_rows, store.select(RACES, scope)
    )

    drivers = [DriverProfile.from_row(r) for r in driver_rows]
    return SeasonEndReview(
        season=season,
        drivers=drivers,
        driver_surperformances=driver_surp,
        team_surperformances=team_surp,
        rookie_reveals=propose_rookie_reveals(drivers, driver_surp),
        champion_driver=_leader(driver_standings),
        champion_team=_leader(constructor_standings),
        driver_names={r["id"]: driver_display_name(r) for r in driver_rows},
        team_names={r["id"]: r.get("name") or "" for r in team_rows},
        sponsor_objectives=objectives,
        sponsor_results=evaluate_objectives(objectives, context),
    )
