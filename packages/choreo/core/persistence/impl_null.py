"""Null repository: accepts writes and discards them."""

from __future__ import annotations

from choreo.core.errors import PersistenceError
from choreo.core.models import Project


class NullProjectRepository:
    """Repository with no backing storage.

    Used when a project lives only in memory (tests, previews).
    """

    def load(self) -> Project:
        raise PersistenceError("NullProjectRepository has nothing to load")

    def save(self, project: Project) -> None:
        return None
