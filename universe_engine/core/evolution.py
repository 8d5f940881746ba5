"""Season-end evolution rules for the universe engine.

Before a season is archived every driver's note may move for four
independent reasons:

* ``potential_change`` -- surperformance adjustment (young drivers only);
* ``decline`` -- ``-1`` for drivers aged :data:`DECLINE_AGE` or older;
* ``progression`` -- ``+1`` for drivers aged 26 or younger still below
  their revealed potential;
* ``champion_bonus`` -- ``+1`` for the drivers' champion, unless they
  already hold :data:`MAX_CHAMPION_BONUS_TITLES` titles.

Rookies additionally get their potential revealed.  This module builds
the proposals; the player may switch any of them off before archival.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from universe_engine.core.rookie import RookieReveal, resolve_rookie_reveal
from universe_engine.core.surperformance import (
    MAX_MALLEABLE_AGE,
    DriverSurperformance,
    TeamSurperformance,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DECLINE_AGE: int = 35
MAX_CHAMPION_BONUS_TITLES: int = 3
DEFAULT_POTENTIAL_MIN: int = 1
DEFAULT_POTENTIAL_MAX: int = 10

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DriverProfile:
    """The fields of a driver row the evolution rules look at."""

    id: str
    age: int | None = None
    note: float | None = None
    potential_min: int | None = None
    potential_max: int | None = None
    potential_final: int | None = None
    world_titles: int = 0
    is_rookie: bool = False
    potential_revealed: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> DriverProfile:
        return cls(
            id=str(row["id"]),
            age=row.get("age"),
            note=row.get("note"),
            potential_min=row.get("potential_min"),
            potential_max=row.get("potential_max"),
            potential_final=row.get("potential_final"),
            world_titles=int(row.get("world_titles") or 0),
            is_rookie=bool(row.get("is_rookie") or False),
            potential_revealed=bool(row.get("potential_revealed") or False),
        )


@dataclass(frozen=True)
class DriverEvolution:
    """Confirmed season-end change for one driver.

    Attributes:
        driver_id: Driver row identifier.
        potential_change: Surperformance adjustment (``-1``, ``0``, ``+1``).
        decline: ``-1`` when an age decline applies, else ``0``.
        progression: ``+1`` when a progression applies, else ``0``.
        champion_bonus: ``+1`` for the drivers' champion, else ``0``.
        rookie_reveal: Revealed potential, or ``None``.
    """

    driver_id: str
    potential_change: int = 0
    decline: int = 0
    progression: int = 0
    champion_bonus: int = 0
    rookie_reveal: int | None = None

    @property
    def total_change(self) -> int:
        return self.potential_change + self.decline + self.progression + self.champion_bonus

    @property
    def has_effect(self) -> bool:
        return self.total_change != 0 or self.rookie_reveal is not None


@dataclass(frozen=True)
class TeamBudgetChange:
    """Confirmed budget surperformance change for one team."""

    team_id: str
    surperformance_delta: int


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def is_declining(driver: DriverProfile) -> bool:
    return driver.age is not None and driver.age >= DECLINE_AGE


def is_progressing(driver: DriverProfile) -> bool:
    return (
        driver.age is not None
        and driver.age <= MAX_MALLEABLE_AGE
        and driver.note is not None
        and driver.potential_final is not None
        and driver.note < driver.potential_final
    )


def champion_bonus_capped(world_titles: int) -> bool:
    return world_titles >= MAX_CHAMPION_BONUS_TITLES


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def propose_rookie_reveals(
    drivers: Iterable[DriverProfile],
    surperformances: Iterable[DriverSurperformance],
) -> dict[str, RookieReveal]:
    """Resolve a reveal for every rookie whose potential is still hidden.

    A rookie missing from *surperformances* is resolved with a delta of 0.
    """
    deltas = {s.driver_id: s.delta for s in surperformances}
    reveals: dict[str, RookieReveal] = {}
    for drv in drivers:
        if not drv.is_rookie or drv.potential_revealed:
            continue
        reveals[drv.id] = resolve_rookie_reveal(
            deltas.get(drv.id, 0),
            drv.potential_min if drv.potential_min is not None else DEFAULT_POTENTIAL_MIN,
            drv.potential_max if drv.potential_max is not None else DEFAULT_POTENTIAL_MAX,
        )
    return reveals


def build_driver_evolutions(
    drivers: Sequence[DriverProfile],
    surperformances: Iterable[DriverSurperformance],
    champion_driver_id: str | None = None,
    *,
    champion_bonus_enabled: bool = True,
    decline_enabled: Mapping[str, bool] | None = None,
    progression_enabled: Mapping[str, bool] | None = None,
    rookie_reveals: Mapping[str, int | None] | None = None,
) -> list[DriverEvolution]:
    """Combine every season-end rule into per-driver evolutions.

    Eligible declines and progressions are applied unless switched off in
    *decline_enabled* / *progression_enabled*.  Drivers with no change and
    no rookie reveal are omitted.
    """
    potential_changes = {s.driver_id: s.potential_change for s in surperformances}
    decline_enabled = decline_enabled or {}
    progression_enabled = progression_enabled or {}
    rookie_reveals = rookie_reveals or {}

    evolutions: list[DriverEvolution] = []
    for drv in drivers:
        is_champion = champion_driver_id is not None and drv.id == champion_driver_id
        bonus = (
            1
            if is_champion
            and champion_bonus_enabled
            and not champion_bonus_capped(drv.world_titles)
            else 0
        )
        evolution = DriverEvolution(
            driver_id=drv.id,
            potential_change=potential_changes.get(drv.id, 0),
            decline=-1 if is_declining(drv) and decline_enabled.get(drv.id, True) else 0,
            progression=(
                1 if is_progressing(drv) and progression_enabled.get(drv.id, True) else 0
            ),
            champion_bonus=bonus,
            rookie_reveal=rookie_reveals.get(drv.id),
        )
        if evolution.has_effect:
            evolutions.append(evolution)
    return evolutions


def build_team_budget_changes(
    surperformances: Iterable[TeamSurperformance],
    enabled: Mapping[str, bool] | None = None,
) -> list[TeamBudgetChange]:
    """Return the non-zero budget changes, minus any switched off."""
    enabled = enabled or {}
    return [
        TeamBudgetChange(team_id=s.team_id, surperformance_delta=s.budget_change)
        for s in surperformances
        if s.budget_change != 0 and enabled.get(s.team_id, True)
    ]


def describe_evolution(evolution: DriverEvolution) -> str:
    """Short human summary, e.g. ``"champion +1, surperformance -1"``."""
    parts: list[str] = []
    if evolution.champion_bonus > 0:
        parts.append("champion +1")
    if evolution.potential_change > 0:
        parts.append(f"surperformance +{evolution.potential_change}")
    if evolution.potential_change < 0:
        parts.append(f"surperformance {evolution.potential_change}")
    if evolution.decline < 0:
        parts.append("decline -1")
    if evolution.progression > 0:
        parts.append("progression +1")
    if evolution.rookie_reveal is not None:
        parts.append(f"potential revealed: {evolution.rookie_reveal}")
    return ", ".join(parts) if parts else "no change"
