"""Choreography data model."""

from choreo.core.models.entities import (
    Costume,
    Dancer,
    DancerGroup,
    StageConfig,
    StageShape,
    new_id,
)
from choreo.core.models.formation import Formation, Placement
from choreo.core.models.project import Project

__all__ = [
    "Costume",
    "Dancer",
    "DancerGroup",
    "Formation",
    "Placement",
    "Project",
    "StageConfig",
    "StageShape",
    "new_id",
]
