"""Project-level entities: dancers, costumes, groups and the stage.

These are owned by the enclosing Project and referenced elsewhere by id only.
"""

from __future__ import annotations

import re
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def new_id() -> str:
    """Generate a fresh opaque entity id."""
    return str(uuid4())


def _normalize_hex(value: str) -> str:
    if not _HEX_COLOR.match(value):
        raise ValueError(f"Color must be a #RRGGBB hex string, got {value!r}")
    return value.upper()


class StageShape(str, Enum):
    """Outline of the performance floor."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    OVAL = "oval"


class StageConfig(BaseModel):
    """Physical stage dimensions in meters."""

    model_config = ConfigDict(frozen=False)

    width: float = Field(default=10.0, gt=0, description="Stage width in meters")
    depth: float = Field(default=8.0, gt=0, description="Stage depth in meters")
    shape: StageShape = Field(default=StageShape.RECTANGLE, description="Stage outline")


class Dancer(BaseModel):
    """A performer with a stable identity and a base color."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(..., min_length=1, description="Display name")
    color: str = Field(default="#0000FF", description="Base color (#RRGGBB)")
    height: float = Field(default=1.7, gt=0, description="Height in meters")
    notes: str = ""

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Normalize color to upper-case hex."""
        return _normalize_hex(v)


class Costume(BaseModel):
    """A costume whose color overrides a dancer's base color."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(..., min_length=1, description="Display name")
    color: str = Field(default="#800080", description="Costume color (#RRGGBB)")
    notes: str = ""

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Normalize color to upper-case hex."""
        return _normalize_hex(v)


class DancerGroup(BaseModel):
    """Named selection of dancers that move together when dragged.

    Membership is stored only here; "which groups contain dancer X" is
    answered by Project.groups_for_dancer.
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(..., min_length=1, description="Display name")
    dancer_ids: list[str] = Field(default_factory=list, description="Member dancer ids")

    @field_validator("dancer_ids")
    @classmethod
    def dedupe_members(cls, v: list[str]) -> list[str]:
        """Drop repeated members, keeping first occurrence order."""
        return list(dict.fromkeys(v))

    def contains(self, dancer_id: str) -> bool:
        return dancer_id in self.dancer_ids
