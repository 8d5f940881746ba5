"""Driver rating record for the universe engine.

A rating is the slice of a persisted driver row that the scoring engine
reads.  Fields are optional because rows coming from the store may be
incomplete; the scorer skips incomplete entries instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class DriverRating:
    """Immutable view of a driver's current ability.

    Attributes:
        id: Driver row identifier.
        team_id: Team the driver races for this season.
        name: Display name.
        skill: Effective note on the 0-10 scale.
    """

    id: str | None
    team_id: str | None
    name: str | None
    skill: float | None

    @property
    def is_rankable(self) -> bool:
        """True when id, team and skill are all known."""
        return self.id is not None and self.team_id is not None and self.skill is not None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> DriverRating:
        """Build a rating from a store row.

        ``effective_note`` wins over ``note`` when both are present, and
        ``full_name`` falls back to ``first_name last_name``.
        """
        skill = row.get("effective_note")
        if skill is None:
            skill = row.get("note")

        name = row.get("full_name")
        if name is None:
            parts = [row.get("first_name"), row.get("last_name")]
            name = " ".join(p for p in parts if p) or None

        return cls(
            id=row.get("id"),
            team_id=row.get("team_id"),
            name=name,
            skill=skill,
        )
