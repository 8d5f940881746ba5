"""Season progression and predictive scoring engine for simulated motorsport universes."""

__version__ = "0.1.0"
