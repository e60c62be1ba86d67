"""Keyframe store: the single owner of a project's mutable timeline data.

Every read snapshot and every mutation runs under one re-entrant lock, so a
recompute never observes a formation with a half-written placement list.
The lock is never held across repository I/O.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from choreo.core.errors import DancerNotFoundError, FormationNotFoundError
from choreo.core.models import Costume, Dancer, DancerGroup, Formation, Placement, Project
from choreo.core.persistence import NullProjectRepository, ProjectRepository

logger = logging.getLogger(__name__)


def sort_formations(formations: Iterable[Formation]) -> list[Formation]:
    """Sort formations by timestamp, keeping insertion order on ties."""
    return sorted(formations, key=lambda f: f.timestamp)


class KeyframeStore:
    """Owner of a Project and the only writer of its formations.

    Args:
        project: Project to own
        repository: Persistence collaborator notified after each mutation
                    (a NullProjectRepository when omitted)
    """

    def __init__(self, project: Project, repository: ProjectRepository | None = None):
        self._project = project
        self._repository: ProjectRepository = (
            repository if repository is not None else NullProjectRepository()
        )
        self._lock = threading.RLock()

    @property
    def project(self) -> Project:
        return self._project

    @contextmanager
    def locked(self) -> Iterator[Project]:
        """Hold the store lock for a multi-step read or edit."""
        with self._lock:
            yield self._project

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def sorted_formations(self) -> list[Formation]:
        """Snapshot of the formations sorted by timestamp (stable).

        Each entry is a shallow copy that pins the placement list and costume
        map as they were when the snapshot was taken.
        """
        with self._lock:
            snapshot = [
                f.model_copy(update={"costume_assignments": dict(f.costume_assignments)})
                for f in self._project.formations
            ]
        return sort_formations(snapshot)

    def dancer_ids(self) -> list[str]:
        with self._lock:
            return self._project.dancer_ids()

    def dancer(self, dancer_id: str) -> Dancer | None:
        with self._lock:
            return self._project.dancer(dancer_id)

    def costume(self, costume_id: str) -> Costume | None:
        with self._lock:
            return self._project.costume(costume_id)

    def group(self, group_id: str) -> DancerGroup | None:
        with self._lock:
            return self._project.group(group_id)

    def groups_for_dancer(self, dancer_id: str) -> list[DancerGroup]:
        with self._lock:
            return self._project.groups_for_dancer(dancer_id)

    # ------------------------------------------------------------------
    # Formation mutations
    # ------------------------------------------------------------------

    def add_formation(
        self,
        name: str,
        timestamp: float,
        placements: Iterable[Placement] = (),
    ) -> Formation:
        """Create a formation and append it to the project.

        Raises:
            ValueError: If placements repeat a dancer or timestamp is negative
            DancerNotFoundError: If a placement references an unknown dancer
        """
        formation = Formation(name=name, timestamp=timestamp, placements=list(placements))
        with self._lock:
            for placement in formation.placements:
                self._require_dancer(placement.dancer_id)
            self._project.formations = [*self._project.formations, formation]
            self._project.touch()
        logger.debug(
            f"Added formation {formation.name!r} at {formation.timestamp:.3f}s "
            f"with {len(formation.placements)} placements"
        )
        self._persist()
        return formation

    def remove_formation(self, formation_id: str) -> None:
        """Delete a formation together with its placements."""
        with self._lock:
            self._require_formation(formation_id)
            self._project.formations = [
                f for f in self._project.formations if f.id != formation_id
            ]
            self._project.touch()
        self._persist()

    def rename_formation(self, formation_id: str, name: str) -> None:
        with self._lock:
            self._require_formation(formation_id).name = name
            self._project.touch()
        self._persist()

    def upsert_placement(
        self,
        formation_id: str,
        dancer_id: str,
        x: float,
        y: float,
        rotation: float | None = None,
    ) -> Placement:
        """Update or insert one dancer's placement in a formation.

        Args:
            formation_id: Target formation
            dancer_id: Dancer to place (must belong to the project)
            x: New x position
            y: New y position
            rotation: New rotation, or None to keep the existing one (0 if new)

        Returns:
            The resulting placement

        Raises:
            FormationNotFoundError: If the formation does not exist
            DancerNotFoundError: If the dancer does not exist
        """
        with self._lock:
            formation = self._require_formation(formation_id)
            self._require_dancer(dancer_id)
            placement = formation.upsert_placement(dancer_id, x, y, rotation)
            self._project.touch()
        self._persist()
        return placement

    def upsert_placements(
        self,
        formation_id: str,
        positions: Iterable[tuple[str, float, float]],
    ) -> list[Placement]:
        """Apply several (dancer_id, x, y) updates to one formation atomically."""
        results: list[Placement] = []
        with self._lock:
            formation = self._require_formation(formation_id)
            updates = list(positions)
            for dancer_id, _, _ in updates:
                self._require_dancer(dancer_id)
            for dancer_id, x, y in updates:
                results.append(formation.upsert_placement(dancer_id, x, y))
            self._project.touch()
        self._persist()
        return results

    def remove_placement(self, formation_id: str, dancer_id: str) -> bool:
        with self._lock:
            removed = self._require_formation(formation_id).remove_placement(dancer_id)
            if removed:
                self._project.touch()
        if removed:
            self._persist()
        return removed

    def assign_costume(self, formation_id: str, dancer_id: str, costume_id: str) -> None:
        """Override a dancer's color from this formation onward.

        Raises:
            FormationNotFoundError: If the formation does not exist
            DancerNotFoundError: If the dancer does not exist
            KeyError: If the costume does not exist
        """
        with self._lock:
            formation = self._require_formation(formation_id)
            self._require_dancer(dancer_id)
            if self._project.costume(costume_id) is None:
                raise KeyError(f"Unknown costume: {costume_id}")
            formation.costume_assignments = {
                **formation.costume_assignments,
                dancer_id: costume_id,
            }
            self._project.touch()
        self._persist()

    def clear_costume(self, formation_id: str, dancer_id: str) -> None:
        with self._lock:
            formation = self._require_formation(formation_id)
            formation.costume_assignments = {
                k: v for k, v in formation.costume_assignments.items() if k != dancer_id
            }
            self._project.touch()
        self._persist()

    # ------------------------------------------------------------------
    # Roster mutations
    # ------------------------------------------------------------------

    def add_dancer(self, dancer: Dancer) -> Dancer:
        with self._lock:
            if self._project.dancer(dancer.id) is not None:
                raise ValueError(f"Dancer already exists: {dancer.id}")
            self._project.dancers = [*self._project.dancers, dancer]
            self._project.touch()
        self._persist()
        return dancer

    def remove_dancer(self, dancer_id: str) -> None:
        with self._lock:
            if not self._project.remove_dancer(dancer_id):
                raise DancerNotFoundError(dancer_id)
            self._project.touch()
        self._persist()

    def add_costume(self, costume: Costume) -> Costume:
        with self._lock:
            if self._project.costume(costume.id) is not None:
                raise ValueError(f"Costume already exists: {costume.id}")
            self._project.costumes = [*self._project.costumes, costume]
            self._project.touch()
        self._persist()
        return costume

    def remove_costume(self, costume_id: str) -> bool:
        with self._lock:
            removed = self._project.remove_costume(costume_id)
            if removed:
                self._project.touch()
        if removed:
            self._persist()
        return removed

    def add_group(self, group: DancerGroup) -> DancerGroup:
        with self._lock:
            for dancer_id in group.dancer_ids:
                self._require_dancer(dancer_id)
            self._project.groups = [*self._project.groups, group]
            self._project.touch()
        self._persist()
        return group

    def touch(self) -> None:
        """Mark the project modified without changing any entity."""
        with self._lock:
            self._project.touch()
        self._persist()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_formation(self, formation_id: str) -> Formation:
        formation = self._project.formation(formation_id)
        if formation is None:
            raise FormationNotFoundError(formation_id)
        return formation

    def _require_dancer(self, dancer_id: str) -> Dancer:
        dancer = self._project.dancer(dancer_id)
        if dancer is None:
            raise DancerNotFoundError(dancer_id)
        return dancer

    def _persist(self) -> None:
        with self._lock:
            project = self._project.model_copy(deep=True)
        self._repository.save(project)
