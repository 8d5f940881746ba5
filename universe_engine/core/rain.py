"""Race weather roller for the universe engine.

A circuit carries a historical base rain probability.  Before each race
the base rate is perturbed by a uniform integer in ``[-10, +10]`` and
clamped to ``[0, 100]``.  The perturbed value can then be bucketed to one
of the four canonical tiers of :data:`RAIN_SCALE` for display and
persistence.
"""

from __future__ import annotations

import numpy as np
from numpy.random import Generator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RAIN_SCALE: tuple[int, ...] = (0, 10, 25, 50)
RAIN_PERTURBATION: int = 10  # max absolute shift applied to the base rate
_TIER_BOUNDS: tuple[int, ...] = (6, 18, 38)  # exclusive upper bound of each lower tier


# ---------------------------------------------------------------------------
# Roll
# ---------------------------------------------------------------------------


def roll_rain(base_probability: float | None, rng: Generator | None = None) -> float:
    """Return a perturbed rain probability for a single race.

    Args:
        base_probability: Circuit base rain chance in percent.  ``None`` is
            treated as 0.
        rng: Optional numpy generator.  A fresh, unseeded generator is used
            when omitted.

    Returns:
        Percentage in ``[0, 100]``; an ``int`` whenever the base is.
    """
    if rng is None:
        rng = np.random.default_rng()

    base = base_probability or 0
    shift = int(rng.integers(-RAIN_PERTURBATION, RAIN_PERTURBATION + 1))
    return max(0, min(100, base + shift))


# ---------------------------------------------------------------------------
# Scale helpers
# ---------------------------------------------------------------------------


def snap_to_scale(value: float) -> int:
    """Bucket *value* to one of the tiers of :data:`RAIN_SCALE`.

    ``< 6 -> 0``, ``< 18 -> 10``, ``< 38 -> 25`` and anything above
    ``-> 50``.  Each tier's upper half rounds up except the top tier.
    """
    for bound, tier in zip(_TIER_BOUNDS, RAIN_SCALE):
        if value < bound:
            return tier
    return RAIN_SCALE[-1]


def rain_label(value: float | None) -> str:
    """Render a rain probability as ``"Dry"`` or ``"{tier}%"``."""
    snapped = snap_to_scale(value or 0)
    if snapped <= 0:
        return "Dry"
    return f"{snapped}%"


def roll_race_weather(
    base_probability: float | None, rng: Generator | None = None
) -> int:
    """Roll the weather for a race and return the snapped tier."""
    return snap_to_scale(roll_rain(base_probability, rng=rng))
