"""Project model: the arena that owns every choreography entity.

Relationships are forward-only collections plus id references. Inverse
lookups (groups containing a dancer, placements of a dancer) are computed on
demand from the forward collections.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from choreo.core.models.entities import Costume, Dancer, DancerGroup, StageConfig, new_id
from choreo.core.models.formation import Formation


def _now() -> datetime:
    return datetime.now(tz=UTC)


class Project(BaseModel):
    """A choreography project."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    dancers: list[Dancer] = Field(default_factory=list)
    groups: list[DancerGroup] = Field(default_factory=list)
    costumes: list[Costume] = Field(default_factory=list)
    formations: list[Formation] = Field(default_factory=list)
    stage: StageConfig = Field(default_factory=StageConfig)

    audio_filename: str | None = Field(
        default=None, description="Audio file name, resolved by the audio collaborator"
    )

    @model_validator(mode="after")
    def validate_unique_ids(self) -> Project:
        """Entity ids must be unique within their collection."""
        for label, items in (
            ("dancer", self.dancers),
            ("group", self.groups),
            ("costume", self.costumes),
            ("formation", self.formations),
        ):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate {label} id in project {self.name!r}")
        return self

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def dancer(self, dancer_id: str) -> Dancer | None:
        return next((d for d in self.dancers if d.id == dancer_id), None)

    def costume(self, costume_id: str) -> Costume | None:
        return next((c for c in self.costumes if c.id == costume_id), None)

    def group(self, group_id: str) -> DancerGroup | None:
        return next((g for g in self.groups if g.id == group_id), None)

    def formation(self, formation_id: str) -> Formation | None:
        return next((f for f in self.formations if f.id == formation_id), None)

    def dancer_ids(self) -> list[str]:
        """Dancer ids in project order."""
        return [d.id for d in self.dancers]

    def groups_for_dancer(self, dancer_id: str) -> list[DancerGroup]:
        """Groups that list the dancer as a member."""
        return [g for g in self.groups if g.contains(dancer_id)]

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def remove_dancer(self, dancer_id: str) -> bool:
        """Remove a dancer and everything that belongs to it.

        Cascades to the dancer's placements, group memberships and costume
        assignments.

        Returns:
            True if the dancer existed
        """
        if self.dancer(dancer_id) is None:
            return False
        self.dancers = [d for d in self.dancers if d.id != dancer_id]
        for group in self.groups:
            if group.contains(dancer_id):
                group.dancer_ids = [i for i in group.dancer_ids if i != dancer_id]
        for formation in self.formations:
            formation.remove_placement(dancer_id)
            formation.costume_assignments.pop(dancer_id, None)
        return True

    def remove_costume(self, costume_id: str) -> bool:
        """Remove a costume.

        Assignments referencing it are left in place and resolve to the
        dancer's base color from then on.
        """
        before = len(self.costumes)
        self.costumes = [c for c in self.costumes if c.id != costume_id]
        return len(self.costumes) != before

    def touch(self) -> None:
        self.updated_at = _now()
