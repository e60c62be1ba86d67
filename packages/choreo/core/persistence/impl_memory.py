"""In-memory repository that keeps deep copies of saved projects."""

from __future__ import annotations

from choreo.core.errors import PersistenceError
from choreo.core.models import Project


class InMemoryProjectRepository:
    """Repository backed by a private copy of the last saved project.

    Attributes:
        save_count: Number of successful save() calls.
    """

    def __init__(self, project: Project | None = None):
        self._stored: Project | None = project.model_copy(deep=True) if project else None
        self.save_count = 0

    def load(self) -> Project:
        if self._stored is None:
            raise PersistenceError("No project has been saved")
        return self._stored.model_copy(deep=True)

    def save(self, project: Project) -> None:
        self._stored = project.model_copy(deep=True)
        self.save_count += 1
