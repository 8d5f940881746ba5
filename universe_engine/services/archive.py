"""Season archival orchestrator.

Applies a confirmed :class:`ArchiveInput` to the store as six ordered
steps:

1. insert the champion-of-record row for the universe;
2. apply every driver evolution (note, world titles, rookie reveal);
3. apply every team budget change;
4. decrement contracts and increment tenure for drivers and staff;
5. record the sponsor objective outcomes;
6. mark the season ``"completed"``.

Each write is atomic on its own but nothing spans steps.  The first
failing read or write aborts the remaining steps and its
:class:`StorageError` reaches the caller unchanged.  Steps already
committed stay committed, and because the status flip is the last step a
season that failed to archive is still recognisably pending.  Running
the same input again after a partial failure re-applies the deltas of
the steps that had succeeded, so callers must rebuild the input from
fresh data before retrying.

Archival runs for the same universe are serialised with a process-local
lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from universe_engine.core.evolution import DriverEvolution, TeamBudgetChange
from universe_engine.core.sponsors import SponsorEvaluation
from universe_engine.storage.base import (
    DRIVERS,
    HISTORY_CHAMPIONS,
    SEASONS,
    SPONSOR_OBJECTIVES,
    STAFF_MEMBERS,
    TEAMS,
    RecordNotFoundError,
    RecordStore,
    Row,
    StorageError,
    select_one,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SEASON_STATUS_COMPLETED: str = "completed"
NOTE_FLOOR: float = 1
DEFAULT_NOTE_CEILING: float = 10

# ---------------------------------------------------------------------------
# Intent and report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArchiveInput:
    """Everything the player confirmed on the season-end review.

    Attributes:
        season_id: Season being archived.
        universe_id: Universe owning the season.
        year: Season year.
        champion_driver_id: Drivers' champion row id.
        champion_driver_name: Drivers' champion display name.
        champion_driver_points: Drivers' champion points.
        champion_driver_team: Drivers' champion team name.
        champion_team_id: Constructors' champion row id.
        champion_team_name: Constructors' champion name.
        champion_team_points: Constructors' champion points.
        season_summary: Free-text summary stored with the champions.
        driver_evolutions: Per-driver changes to apply.
        team_budget_changes: Per-team budget changes to apply.
        contract_decrements: Whether contracts and tenure roll over.
        sponsor_evaluations: Confirmed sponsor objective outcomes.
    """

    season_id: str
    universe_id: str
    year: int
    champion_driver_id: str | None = None
    champion_driver_name: str | None = None
    champion_driver_points: float | None = None
    champion_driver_team: str | None = None
    champion_team_id: str | None = None
    champion_team_name: str | None = None
    champion_team_points: float | None = None
    season_summary: str | None = None
    driver_evolutions: tuple[DriverEvolution, ...] = ()
    team_budget_changes: tuple[TeamBudgetChange, ...] = ()
    contract_decrements: bool = True
    sponsor_evaluations: tuple[SponsorEvaluation, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ArchiveInput:
        """Build an input from a plain mapping (YAML or JSON document).

        Raises:
            ValueError: If ``season_id``, ``universe_id`` or ``year`` is
                missing, or a flag is not a boolean.
        """
        for key in ("season_id", "universe_id", "year"):
            if payload.get(key) is None:
                raise ValueError(f"archive payload is missing required field '{key}'")

        evolutions = tuple(
            DriverEvolution(
                driver_id=str(e["driver_id"]),
                potential_change=int(e.get("potential_change", 0)),
                decline=int(e.get("decline", 0)),
                progression=int(e.get("progression", 0)),
                champion_bonus=int(e.get("champion_bonus", 0)),
                rookie_reveal=e.get("rookie_reveal"),
            )
            for e in payload.get("driver_evolutions") or ()
        )
        budgets = tuple(
            TeamBudgetChange(
                team_id=str(c["team_id"]),
                surperformance_delta=int(c.get("surperformance_delta", 0)),
            )
            for c in payload.get("team_budget_changes") or ()
        )
        sponsors = tuple(
            SponsorEvaluation(
                objective_id=str(e["objective_id"]),
                is_met=_flag(e, "is_met", default=False),
                evaluated_value=e.get("evaluated_value"),
            )
            for e in payload.get("sponsor_evaluations") or ()
        )

        return cls(
            season_id=str(payload["season_id"]),
            universe_id=str(payload["universe_id"]),
            year=int(payload["year"]),
            champion_driver_id=payload.get("champion_driver_id"),
            champion_driver_name=payload.get("champion_driver_name"),
            champion_driver_points=payload.get("champion_driver_points"),
            champion_driver_team=payload.get("champion_driver_team"),
            champion_team_id=payload.get("champion_team_id"),
            champion_team_name=payload.get("champion_team_name"),
            champion_team_points=payload.get("champion_team_points"),
            season_summary=payload.get("season_summary"),
            driver_evolutions=evolutions,
            team_budget_changes=budgets,
            contract_decrements=_flag(payload, "contract_decrements", default=True),
            sponsor_evaluations=sponsors,
        )


def _flag(payload: Mapping[str, Any], key: str, *, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(
            f"archive payload: '{key}' must be a boolean, got {value!r}"
        )
    return value


@dataclass
class ArchiveReport:
    """What an archival run actually committed."""

    season_id: str
    completed_steps: list[str] = field(default_factory=list)
    champion_record_id: str | None = None
    drivers_updated: list[str] = field(default_factory=list)
    teams_updated: list[str] = field(default_factory=list)
    contracts_updated: int = 0
    staff_updated: int = 0
    objectives_updated: list[str] = field(default_factory=list)
    status: str | None = None


# ---------------------------------------------------------------------------
# Per-universe locks
# ---------------------------------------------------------------------------

_UNIVERSE_LOCKS: dict[str, threading.Lock] = {}
_UNIVERSE_LOCKS_GUARD = threading.Lock()


def universe_lock(universe_id: str) -> threading.Lock:
    """Return the advisory lock shared by every archival of *universe_id*."""
    with _UNIVERSE_LOCKS_GUARD:
        lock = _UNIVERSE_LOCKS.get(universe_id)
        if lock is None:
            lock = threading.Lock()
            _UNIVERSE_LOCKS[universe_id] = lock
        return lock


# ---------------------------------------------------------------------------
# Pure per-row rules
# ---------------------------------------------------------------------------


def clamp_note(current: float, change: float, ceiling: float | None) -> float:
    """Apply *change* and clamp to ``[1, ceiling or 10]``."""
    upper = DEFAULT_NOTE_CEILING if ceiling is None else ceiling
    return max(NOTE_FLOOR, min(upper, current + change))


def driver_patch(row: Row, evolution: DriverEvolution) -> dict[str, Any]:
    """Return the update to write for *evolution* given the fresh driver *row*."""
    patch: dict[str, Any] = {}
    if evolution.total_change != 0:
        patch["note"] = clamp_note(
            row.get("note") or 0, evolution.total_change, row.get("potential_final")
        )
    if evolution.champion_bonus > 0:
        patch["world_titles"] = (row.get("world_titles") or 0) + 1
    if evolution.rookie_reveal is not None:
        patch["potential_final"] = evolution.rookie_reveal
        patch["potential_revealed"] = True
        patch["is_rookie"] = False
    return patch


def budget_bonus(current: int | None, delta: int) -> int:
    return max(0, (current or 0) + delta)


def rolled_contract(row: Row) -> dict[str, int]:
    return {
        "contract_years_remaining": max(0, (row.get("contract_years_remaining") or 0) - 1),
        "years_in_team": (row.get("years_in_team") or 0) + 1,
    }


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class SeasonArchiver:
    """Runs the archival sequence against an injected :class:`RecordStore`."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def archive(self, archive_input: ArchiveInput) -> ArchiveReport:
        """Apply *archive_input* step by step.

        Returns:
            An :class:`ArchiveReport` of everything committed.

        Raises:
            StorageError: From the first failing step, unchanged.  Earlier
                steps are not rolled back.
        """
        report = ArchiveReport(season_id=archive_input.season_id)
        steps: list[tuple[str, Callable[[ArchiveInput, ArchiveReport], None]]] = [
            ("champion", self._insert_champion),
            ("driver_evolutions", self._apply_driver_evolutions),
            ("team_budgets", self._apply_budget_changes),
            ("contracts", self._roll_contracts),
            ("sponsor_objectives", self._record_sponsor_objectives),
            ("status", self._complete_season),
        ]

        with universe_lock(archive_input.universe_id):
            logger.info(
                "archiving season=%s universe=%s year=%s",
                archive_input.season_id,
                archive_input.universe_id,
                archive_input.year,
            )
            for name, step in steps:
                try:
                    step(archive_input, report)
                except StorageError as exc:
                    logger.error(
                        "archive step %s failed season=%s completed=%s: %s",
                        name,
                        archive_input.season_id,
                        report.completed_steps,
                        exc,
                    )
                    raise
                report.completed_steps.append(name)
                logger.info("archive step %s done season=%s", name, archive_input.season_id)

        return report

    # -- steps ------------------------------------------------------------

    def _insert_champion(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        inserted = self.store.insert(
            HISTORY_CHAMPIONS,
            [
                {
                    "universe_id": archive_input.universe_id,
                    "year": archive_input.year,
                    "champion_driver_id": archive_input.champion_driver_id,
                    "champion_driver_name": archive_input.champion_driver_name,
                    "champion_driver_points": archive_input.champion_driver_points,
                    "champion_driver_team": archive_input.champion_driver_team,
                    "champion_team_id": archive_input.champion_team_id,
                    "champion_team_name": archive_input.champion_team_name,
                    "champion_team_points": archive_input.champion_team_points,
                    "season_summary": archive_input.season_summary,
                }
            ],
        )
        report.champion_record_id = inserted[0]["id"] if inserted else None

    def _apply_driver_evolutions(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        for evolution in archive_input.driver_evolutions:
            if not evolution.has_effect:
                continue
            # re-read: the review screen may be stale
            row = select_one(self.store, DRIVERS, {"id": evolution.driver_id})
            patch = driver_patch(row, evolution)
            if not patch:
                continue
            self._update_one(DRIVERS, evolution.driver_id, patch)
            report.drivers_updated.append(evolution.driver_id)

    def _apply_budget_changes(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        for change in archive_input.team_budget_changes:
            if change.surperformance_delta == 0:
                continue
            row = select_one(self.store, TEAMS, {"id": change.team_id})
            bonus = budget_bonus(row.get("surperformance_bonus"), change.surperformance_delta)
            self._update_one(TEAMS, change.team_id, {"surperformance_bonus": bonus})
            report.teams_updated.append(change.team_id)

    def _roll_contracts(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        if not archive_input.contract_decrements:
            return
        scope = {"season_id": archive_input.season_id}
        for row in self.store.select(DRIVERS, scope):
            self._update_one(DRIVERS, row["id"], rolled_contract(row))
            report.contracts_updated += 1
        for row in self.store.select(STAFF_MEMBERS, scope):
            self._update_one(STAFF_MEMBERS, row["id"], rolled_contract(row))
            report.staff_updated += 1

    def _record_sponsor_objectives(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        for evaluation in archive_input.sponsor_evaluations:
            self._update_one(
                SPONSOR_OBJECTIVES,
                evaluation.objective_id,
                {"is_met": evaluation.is_met, "evaluated_value": evaluation.evaluated_value},
            )
            report.objectives_updated.append(evaluation.objective_id)

    def _complete_season(self, archive_input: ArchiveInput, report: ArchiveReport) -> None:
        self._update_one(SEASONS, archive_input.season_id, {"status": SEASON_STATUS_COMPLETED})
        report.status = SEASON_STATUS_COMPLETED

    def _update_one(self, table: str, row_id: str, patch: Mapping[str, Any]) -> None:
        if not self.store.update(table, {"id": row_id}, patch):
            raise RecordNotFoundError(
                f"No row in '{table}' with id {row_id!r}", table=table, operation="update"
            )


def archive_season(store: RecordStore, archive_input: ArchiveInput) -> ArchiveReport:
    """Convenience wrapper around :class:`SeasonArchiver`."""
    return SeasonArchiver(store).archive(archive_input)
