"""Season-end surperformance evaluator for the universe engine.

Surperformance is the signed gap between a subject's pre-season predicted
position and its final championship position::

    delta = predicted_position - final_position

A positive delta means the subject finished *ahead* of its prediction.
Gaps of two places or more in either direction have consequences:

* drivers aged 26 or younger gain or lose one point of potential;
* teams gain or lose one point of budget surperformance bonus.

The two-place threshold is a fixed rule of the game.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

SurperformanceEffect = Literal["positive", "neutral", "negative"]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SURPERFORMANCE_THRESHOLD: int = 2
MAX_MALLEABLE_AGE: int = 26

# ---------------------------------------------------------------------------
# Inputs and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DriverSurperformanceInput:
    driver_id: str
    name: str
    team: str
    age: int | None
    predicted_position: int | None
    final_position: int | None


@dataclass(frozen=True)
class TeamSurperformanceInput:
    team_id: str
    name: str
    predicted_position: int | None
    final_position: int | None


@dataclass(frozen=True)
class DriverSurperformance:
    """Evaluated surperformance of one driver.

    Attributes:
        driver_id: Driver identifier.
        name: Display name.
        team: Team display name.
        age: Age at season end, ``None`` when unknown.
        predicted_position: Position from the pre-season prediction.
        final_position: Final championship position.
        delta: ``predicted_position - final_position``.
        effect: Three-way classification of *delta*.
        potential_change: ``+1``, ``0`` or ``-1``.
    """

    driver_id: str
    name: str
    team: str
    age: int | None
    predicted_position: int | None
    final_position: int | None
    delta: int
    effect: SurperformanceEffect
    potential_change: int


@dataclass(frozen=True)
class TeamSurperformance:
    """Evaluated surperformance of one constructor."""

    team_id: str
    name: str
    predicted_position: int | None
    final_position: int | None
    delta: int
    effect: SurperformanceEffect
    budget_change: int


# ---------------------------------------------------------------------------
# Core rules
# ---------------------------------------------------------------------------


def compute_delta(predicted_position: int | None, final_position: int | None) -> int:
    """Return ``predicted - final``; 0 when either position is unknown."""
    if predicted_position is None or final_position is None:
        return 0
    return predicted_position - final_position


def surperformance_effect(delta: int) -> SurperformanceEffect:
    if delta >= SURPERFORMANCE_THRESHOLD:
        return "positive"
    if delta <= -SURPERFORMANCE_THRESHOLD:
        return "negative"
    return "neutral"


def team_budget_change(delta: int) -> int:
    """Return the budget bonus change (``+1``, ``0`` or ``-1``) for *delta*."""
    if delta >= SURPERFORMANCE_THRESHOLD:
        return 1
    if delta <= -SURPERFORMANCE_THRESHOLD:
        return -1
    return 0


def driver_potential_change(delta: int, age: int | None) -> int:
    """Return the potential change for a driver.

    Only drivers aged :data:`MAX_MALLEABLE_AGE` or younger are affected; an
    unknown age counts as not eligible.
    """
    if age is None or age > MAX_MALLEABLE_AGE:
        return 0
    return team_budget_change(delta)


# ---------------------------------------------------------------------------
# Batch evaluation
# ---------------------------------------------------------------------------


def evaluate_drivers(
    inputs: Sequence[DriverSurperformanceInput],
) -> list[DriverSurperformance]:
    """Evaluate every driver, most notable gaps first.

    The ordering by descending absolute delta is for display only; each
    entry's adjustment depends on its own delta and age alone.
    """
    results: list[DriverSurperformance] = []
    for item in inputs:
        delta = compute_delta(item.predicted_position, item.final_position)
        results.append(
            DriverSurperformance(
                driver_id=item.driver_id,
                name=item.name,
                team=item.team,
                age=item.age,
                predicted_position=item.predicted_position,
                final_position=item.final_position,
                delta=delta,
                effect=surperformance_effect(delta),
                potential_change=driver_potential_change(delta, item.age),
            )
        )
    results.sort(key=lambda r: abs(r.delta), reverse=True)
    return results


def evaluate_teams(
    inputs: Sequence[TeamSurperformanceInput],
) -> list[TeamSurperformance]:
    """Evaluate every constructor, most notable gaps first."""
    results: list[TeamSurperformance] = []
    for item in inputs:
        delta = compute_delta(item.predicted_position, item.final_position)
        results.append(
            TeamSurperformance(
                team_id=item.team_id,
                name=item.name,
                predicted_position=item.predicted_position,
                final_position=item.final_position,
                delta=delta,
                effect=surperformance_effect(delta),
                budget_change=team_budget_change(delta),
            )
        )
    results.sort(key=lambda r: abs(r.delta), reverse=True)
    return results
