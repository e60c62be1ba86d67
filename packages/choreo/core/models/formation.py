"""Formation (keyframe) and Placement models.

A Formation is a named, timestamped snapshot of dancer poses. It owns its
placements; each placement references exactly one dancer by id.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from choreo.core.models.entities import new_id


class Placement(BaseModel):
    """One dancer's pose within one formation.

    Attributes:
        dancer_id: The dancer this pose belongs to.
        x: Stage x position in meters.
        y: Stage y position in meters.
        rotation: Facing in degrees, any range (normalized only for display).
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id)
    dancer_id: str
    x: float
    y: float
    rotation: float = 0.0

    def display_rotation(self) -> float:
        """Rotation normalized to [0, 360)."""
        return self.rotation % 360.0


class Formation(BaseModel):
    """A keyframe on the timeline.

    Placements keep insertion order. A formation never holds two placements
    for the same dancer; the validator rejects such input and the mutation
    helpers below maintain the rule afterwards.
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(..., description="Display name")
    timestamp: float = Field(..., ge=0.0, description="Timeline position in seconds")
    duration: float | None = Field(
        default=None, ge=0.0, description="Reserved hold duration (unused by interpolation)"
    )
    placements: list[Placement] = Field(default_factory=list)
    costume_assignments: dict[str, str] = Field(
        default_factory=dict, description="Dancer id -> costume id overrides"
    )

    @model_validator(mode="after")
    def validate_unique_dancers(self) -> Formation:
        """Reject formations holding two placements for one dancer."""
        seen: set[str] = set()
        for placement in self.placements:
            if placement.dancer_id in seen:
                raise ValueError(
                    f"Formation {self.name!r} has more than one placement "
                    f"for dancer {placement.dancer_id}"
                )
            seen.add(placement.dancer_id)
        return self

    def placement_for(self, dancer_id: str) -> Placement | None:
        """Return the dancer's placement in this formation, if any."""
        for placement in self.placements:
            if placement.dancer_id == dancer_id:
                return placement
        return None

    def placement_map(self) -> dict[str, Placement]:
        """Placements keyed by dancer id."""
        return {p.dancer_id: p for p in self.placements}

    def upsert_placement(
        self,
        dancer_id: str,
        x: float,
        y: float,
        rotation: float | None = None,
    ) -> Placement:
        """Update the dancer's placement in place or append a new one.

        The placement list is rebuilt and swapped in with one assignment, so a
        concurrent reader sees either the old or the new list.

        Args:
            dancer_id: Dancer to place
            x: New x position
            y: New y position
            rotation: New rotation; None keeps an existing rotation (0 for new)

        Returns:
            The updated or created placement
        """
        existing = self.placement_for(dancer_id)
        if existing is not None:
            updated = existing.model_copy(
                update={
                    "x": x,
                    "y": y,
                    "rotation": existing.rotation if rotation is None else rotation,
                }
            )
            self.placements = [updated if p is existing else p for p in self.placements]
            return updated

        created = Placement(
            dancer_id=dancer_id, x=x, y=y, rotation=0.0 if rotation is None else rotation
        )
        self.placements = [*self.placements, created]
        return created

    def remove_placement(self, dancer_id: str) -> bool:
        """Remove the dancer's placement. Returns True if one was removed."""
        remaining = [p for p in self.placements if p.dancer_id != dancer_id]
        removed = len(remaining) != len(self.placements)
        self.placements = remaining
        return removed
