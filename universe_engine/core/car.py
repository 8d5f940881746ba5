"""Car models for the universe engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class CarRating:
    """Aggregate car performance score read by the prediction scorer.

    Attributes:
        team_id: Team owning the car.
        total: Sum of the car's component notes (0 to about 30).
    """

    team_id: str | None
    total: float | None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CarRating:
        return cls(team_id=row.get("team_id"), total=row.get("total"))


@dataclass(frozen=True)
class CarStats:
    """Component notes of a team's car and the figures derived from them.

    Attributes:
        team_id: Team owning the car.
        motor: Power unit note.
        aero: Aerodynamics note.
        chassis: Chassis note.
        engine_change_penalty: When set, the chassis counts one point
            lower for grip (engine supplier changed over the winter).
    """

    team_id: str
    motor: int
    aero: int
    chassis: int
    engine_change_penalty: bool = False

    @property
    def effective_chassis(self) -> int:
        return self.chassis - 1 if self.engine_change_penalty else self.chassis

    @property
    def total(self) -> int:
        return self.motor + self.aero + self.chassis

    @property
    def speed(self) -> int:
        return _round_half_up((self.aero + self.motor) / 2)

    @property
    def grip(self) -> int:
        return _round_half_up((self.aero + self.effective_chassis) / 2)

    @property
    def acceleration(self) -> int:
        return self.motor

    def to_rating(self) -> CarRating:
        """Return the :class:`CarRating` consumed by the scorer."""
        return CarRating(team_id=self.team_id, total=self.total)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CarStats:
        return cls(
            team_id=str(row["team_id"]),
            motor=int(row.get("motor") or 0),
            aero=int(row.get("aero") or 0),
            chassis=int(row.get("chassis") or 0),
            engine_change_penalty=bool(row.get("engine_change_penalty") or False),
        )
