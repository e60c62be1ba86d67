"""Costume resolution.

A dancer's effective color at a given time comes from the costume override in
the latest formation at or before that time. Overrides whose costume no
longer exists are ignored and the dancer's base color is used.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import NamedTuple

from choreo.core.models import Costume, Dancer, Formation
from choreo.core.store import KeyframeStore, sort_formations
from choreo.core.timeline.interpolation import find_previous_index

logger = logging.getLogger(__name__)


class CostumeLookup(NamedTuple):
    """The override in effect for one dancer at one time."""

    formation: Formation
    costume_id: str
    costume: Costume | None


def lookup_costume(
    formations: Iterable[Formation],
    costumes: Iterable[Costume],
    dancer: Dancer,
    time: float,
) -> CostumeLookup | None:
    """Find the override in effect, including overrides to deleted costumes.

    Returns:
        The lookup (costume is None when the reference is dead), or None when
        no override applies
    """
    ordered = sort_formations(formations)
    index = find_previous_index(ordered, time)
    if index is None:
        return None

    formation = ordered[index]
    costume_id = formation.costume_assignments.get(dancer.id)
    if costume_id is None:
        return None

    costume = next((c for c in costumes if c.id == costume_id), None)
    return CostumeLookup(formation, costume_id, costume)


def resolve_costume(
    formations: Iterable[Formation],
    costumes: Iterable[Costume],
    dancer: Dancer,
    time: float,
) -> Costume | None:
    """The costume overriding the dancer's color at time, if any.

    Args:
        formations: Formations in any order
        costumes: Costumes that currently exist
        dancer: Dancer to resolve
        time: Query time in seconds

    Returns:
        The live costume, or None when no override applies
    """
    lookup = lookup_costume(formations, costumes, dancer, time)
    if lookup is None:
        return None
    if lookup.costume is None:
        logger.debug(
            f"Formation {lookup.formation.name!r} assigns missing costume "
            f"{lookup.costume_id} to dancer {dancer.name!r}"
        )
    return lookup.costume


class CostumeResolver:
    """Looks up effective dancer colors against a keyframe store.

    A dead costume reference is reported with one WARNING per formation and
    costume, however often it is resolved.
    """

    def __init__(self, store: KeyframeStore):
        self._store = store
        self._reported: set[tuple[str, str]] = set()

    def resolve(self, dancer: Dancer, time: float) -> Costume | None:
        with self._store.locked() as project:
            costumes = list(project.costumes)
        lookup = lookup_costume(self._store.sorted_formations(), costumes, dancer, time)
        if lookup is None:
            return None

        if lookup.costume is None:
            key = (lookup.formation.id, lookup.costume_id)
            if key not in self._reported:
                self._reported.add(key)
                logger.warning(
                    f"Formation {lookup.formation.name!r} assigns missing costume "
                    f"{lookup.costume_id} to dancer {dancer.name!r}; using base color"
                )
        return lookup.costume

    def color_for(self, dancer: Dancer, time: float) -> str:
        """Effective #RRGGBB color for the dancer at time."""
        costume = self.resolve(dancer, time)
        return costume.color if costume is not None else dancer.color
