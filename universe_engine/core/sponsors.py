"""Sponsor objective evaluation for the universe engine.

Each team may carry sponsor objectives for a season.  At season end every
objective is checked against the final standings and the season's race
wins.  ``custom`` objectives cannot be computed and keep whatever verdict
the player recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from universe_engine.core.standings import Standing

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OBJECTIVE_TYPES: tuple[str, ...] = (
    "constructor_position",
    "driver_position",
    "wins",
    "podiums",
    "points_minimum",
    "beat_team",
    "beat_driver",
    "race_win_at_circuit",
    "custom",
)
UNRANKED_POSITION: int = 99  # stands in for a subject missing from the standings
NO_VALUE_LABEL: str = "-"

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SponsorObjective:
    """One sponsor objective of a team.

    Attributes:
        id: Objective row identifier.
        team_id: Team the objective belongs to.
        objective_type: One of :data:`OBJECTIVE_TYPES`.
        target_value: Position ceiling or count / points floor.
        target_entity_id: Driver, rival team or circuit the objective names.
        is_met: Verdict recorded by the player (``custom`` only).
        description: Free text.
    """

    id: str
    team_id: str
    objective_type: str
    target_value: float | None = None
    target_entity_id: str | None = None
    is_met: bool | None = None
    description: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SponsorObjective:
        return cls(
            id=str(row["id"]),
            team_id=str(row["team_id"]),
            objective_type=str(row["objective_type"]),
            target_value=row.get("target_value"),
            target_entity_id=row.get("target_entity_id"),
            is_met=row.get("is_met"),
            description=row.get("description"),
        )


@dataclass(frozen=True)
class EvaluationResult:
    is_met: bool
    evaluated_value: float | None
    label: str


@dataclass(frozen=True)
class SponsorEvaluation:
    """Confirmed outcome of one objective, written at archival."""

    objective_id: str
    is_met: bool
    evaluated_value: float | None = None


@dataclass(frozen=True)
class EvaluationContext:
    """Final season data the objectives are checked against.

    Attributes:
        driver_standings: Final drivers' championship.
        constructor_standings: Final constructors' championship.
        driver_teams: ``{driver_id: team_id}`` for the season.
        team_win_circuits: ``{team_id: {circuit_id, ...}}`` of race wins.
    """

    driver_standings: Sequence[Standing]
    constructor_standings: Sequence[Standing]
    driver_teams: Mapping[str, str] = field(default_factory=dict)
    team_win_circuits: Mapping[str, set[str]] = field(default_factory=dict)

    def driver(self, driver_id: str | None) -> Standing | None:
        return next((s for s in self.driver_standings if s.subject_id == driver_id), None)

    def constructor(self, team_id: str | None) -> Standing | None:
        return next((s for s in self.constructor_standings if s.subject_id == team_id), None)

    def team_drivers(self, team_id: str) -> list[Standing]:
        return [s for s in self.driver_standings if self.driver_teams.get(s.subject_id) == team_id]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def team_win_circuits(
    winners: Iterable[tuple[str, str | None]], driver_teams: Mapping[str, str]
) -> dict[str, set[str]]:
    """Map each team to the circuits where one of its drivers won.

    Args:
        winners: ``(driver_id, circuit_id)`` pairs, one per race won.
        driver_teams: ``{driver_id: team_id}``.
    """
    circuits: dict[str, set[str]] = {}
    for driver_id, circuit_id in winners:
        team_id = driver_teams.get(driver_id)
        if team_id and circuit_id:
            circuits.setdefault(team_id, set()).add(circuit_id)
    return circuits


def _plural(count: float, word: str) -> str:
    return f"{count:g} {word}{'' if count == 1 else 's'}"


def _position_result(standing: Standing | None, target: float | None) -> EvaluationResult:
    pos = standing.position if standing else None
    return EvaluationResult(
        is_met=pos is not None and target is not None and pos <= target,
        evaluated_value=pos,
        label=f"P{pos}" if pos is not None else NO_VALUE_LABEL,
    )


def evaluate_objective(objective: SponsorObjective, ctx: EvaluationContext) -> EvaluationResult:
    """Check one objective against the final season data.

    Position objectives are met at or above the target position; count and
    points objectives at or above the target value.  An unknown objective
    type is never met.
    """
    target = objective.target_value
    entity_id = objective.target_entity_id
    kind = objective.objective_type

    if kind == "constructor_position":
        return _position_result(ctx.constructor(objective.team_id), target)

    if kind == "driver_position":
        return _position_result(ctx.driver(entity_id), target)

    if kind in ("wins", "podiums"):
        total = sum(getattr(s, kind) for s in ctx.team_drivers(objective.team_id))
        return EvaluationResult(
            is_met=target is not None and total >= target,
            evaluated_value=total,
            label=_plural(total, "win" if kind == "wins" else "podium"),
        )

    if kind == "points_minimum":
        entry = ctx.constructor(objective.team_id)
        points = entry.points if entry else 0
        return EvaluationResult(
            is_met=target is not None and points >= target,
            evaluated_value=points,
            label=f"{points:g} pts",
        )

    if kind == "beat_team":
        mine, rival = ctx.constructor(objective.team_id), ctx.constructor(entity_id)
        my_pos = mine.position if mine else UNRANKED_POSITION
        rival_pos = rival.position if rival else UNRANKED_POSITION
        return EvaluationResult(
            is_met=my_pos < rival_pos,
            evaluated_value=my_pos,
            label="Ahead" if my_pos < rival_pos else "Behind",
        )

    if kind == "beat_driver":
        best = min(
            (s.position for s in ctx.team_drivers(objective.team_id)),
            default=UNRANKED_POSITION,
        )
        rival = ctx.driver(entity_id)
        rival_pos = rival.position if rival else UNRANKED_POSITION
        return EvaluationResult(
            is_met=best < rival_pos,
            evaluated_value=best,
            label="Ahead" if best < rival_pos else "Behind",
        )

    if kind == "race_win_at_circuit":
        if not entity_id:
            return EvaluationResult(False, None, NO_VALUE_LABEL)
        won = entity_id in ctx.team_win_circuits.get(objective.team_id, set())
        return EvaluationResult(is_met=won, evaluated_value=1 if won else 0, label="Won" if won else "No")

    if kind == "custom":
        return EvaluationResult(is_met=bool(objective.is_met), evaluated_value=None, label="Manual")

    return EvaluationResult(False, None, NO_VALUE_LABEL)


def evaluate_objectives(
    objectives: Iterable[SponsorObjective], ctx: EvaluationContext
) -> dict[str, EvaluationResult]:
    """Evaluate every objective, keyed by objective id."""
    return {obj.id: evaluate_objective(obj, ctx) for obj in objectives}
