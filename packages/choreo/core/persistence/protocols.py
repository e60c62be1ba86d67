"""Protocol for the project persistence collaborator."""

from typing import Protocol

from choreo.core.models import Project


class ProjectRepository(Protocol):
    """
    Protocol for durable project storage.

    The engine reads a project once at load and hands back the whole
    project after each mutation it applies. Implementations own the
    on-disk (or remote) layout.
    """

    def load(self) -> Project:
        """
        Load the project.

        Returns:
            Validated Project

        Raises:
            PersistenceError: If the project cannot be read or is invalid
        """
        ...

    def save(self, project: Project) -> None:
        """
        Durably store the project.

        Raises:
            PersistenceError: If the write fails
        """
        ...
