"""Rookie potential reveal for the universe engine.

At the end of a rookie's first season the hidden potential range
``[potential_min, potential_max]`` collapses to a single revealed value.
A clear surperformance reveals the ceiling, a clear underperformance the
floor; anything in between is left to the player.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from universe_engine.core.surperformance import SURPERFORMANCE_THRESHOLD

RookieRevealCase = Literal["high", "low", "draw"]


@dataclass(frozen=True)
class RookieReveal:
    """Outcome of a rookie reveal.

    Attributes:
        case: ``"high"``, ``"low"`` or ``"draw"``.
        auto_value: Revealed potential, or ``None`` for a draw which needs
            a manual choice before anything is persisted.
        label: Short label for display.
        explanation: One-sentence explanation for display.
    """

    case: RookieRevealCase
    auto_value: int | None
    label: str
    explanation: str

    @property
    def needs_manual_choice(self) -> bool:
        return self.auto_value is None


def resolve_rookie_reveal(delta: int, potential_min: int, potential_max: int) -> RookieReveal:
    """Decide how a rookie's potential is revealed from their season delta.

    *delta* is the rookie's own ``predicted - final`` position gap.  The
    returned ``auto_value`` is always one of the two bounds.
    """
    if delta >= SURPERFORMANCE_THRESHOLD:
        return RookieReveal(
            case="high",
            auto_value=potential_max,
            label="High potential",
            explanation=(
                f"Clear surperformance (+{delta}): potential revealed at its "
                f"maximum ({potential_max})."
            ),
        )

    if delta <= -SURPERFORMANCE_THRESHOLD:
        return RookieReveal(
            case="low",
            auto_value=potential_min,
            label="Low potential",
            explanation=(
                f"Clear underperformance ({delta}): potential revealed at its "
                f"minimum ({potential_min})."
            ),
        )

    sign = "+" if delta > 0 else ""
    return RookieReveal(
        case="draw",
        auto_value=None,
        label="Manual draw",
        explanation=(
            f"Neutral season ({sign}{delta}): choose the revealed potential "
            f"between {potential_min} and {potential_max}."
        ),
    )
