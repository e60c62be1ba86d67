"""Exceptions raised by the choreography engine."""


class ChoreoError(Exception):
    """Base exception for all choreo errors."""


class FormationNotFoundError(ChoreoError, KeyError):
    """Raised when a formation id does not resolve within the project."""


class DancerNotFoundError(ChoreoError, KeyError):
    """Raised when a dancer id does not resolve within the project."""


class PersistenceError(ChoreoError):
    """Raised when the persistence layer fails to load or save a project."""
