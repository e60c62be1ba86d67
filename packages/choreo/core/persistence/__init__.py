"""Persistence collaborators for choreography projects.

Example:
    >>> from choreo.core.persistence import FileProjectRepository
    >>> repo = FileProjectRepository("show.yaml")
    >>> project = repo.load()
    >>> repo.save(project)
"""

from .impl_file import FileProjectRepository
from .impl_memory import InMemoryProjectRepository
from .impl_null import NullProjectRepository
from .protocols import ProjectRepository

__all__ = [
    "ProjectRepository",
    "FileProjectRepository",
    "InMemoryProjectRepository",
    "NullProjectRepository",
]
