"""Keyframe interpolation.

Converts a set of formations and a query time into per-dancer poses and the
active formation. Everything here is a pure function of its arguments: the
same formations and time always resolve to the same frame.

Resolution rules:
- Before the first formation: the first formation's placements, verbatim.
- At or after the last formation: the last formation's placements, verbatim.
- Between two formations: per dancer, linear interpolation when both
  bracketing formations place the dancer, hold at the earlier pose when only
  the earlier one does, snap to the later pose when only the later one does.
- Rotation is interpolated as a plain scalar (no shortest-angle wrapping).

A formation is active when its timestamp lies within ACTIVE_EPSILON_S of the
query time, on either side.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from choreo.core.models import Formation, Placement
from choreo.core.store import sort_formations
from choreo.core.utils.math import clamp, lerp

ACTIVE_EPSILON_S = 0.1


@dataclass(frozen=True, slots=True)
class Pose:
    """A resolved dancer pose."""

    x: float
    y: float
    rotation: float

    @classmethod
    def from_placement(cls, placement: Placement) -> Pose:
        return cls(placement.x, placement.y, placement.rotation)

    def with_position(self, x: float, y: float) -> Pose:
        return Pose(x, y, self.rotation)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.rotation)


@dataclass(frozen=True)
class ResolvedFrame:
    """Result of resolving the timeline at one instant.

    Attributes:
        time: The query time
        poses: Dancer id -> resolved pose (dancers without a pose are absent)
        active_formation: Formation within epsilon of time, or None
        previous: Last formation with timestamp <= time, or None
        next: Formation immediately after previous, or None
        progress: Interpolation factor between previous and next (0 when not
                  between two formations)
    """

    time: float
    poses: dict[str, Pose] = field(default_factory=dict)
    active_formation: Formation | None = None
    previous: Formation | None = None
    next: Formation | None = None
    progress: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.poses


def find_previous_index(formations: Sequence[Formation], time: float) -> int | None:
    """Index of the last formation with timestamp <= time.

    Args:
        formations: Formations sorted by timestamp
        time: Query time

    Returns:
        Index into formations, or None if time precedes all of them
    """
    result: int | None = None
    for i, formation in enumerate(formations):
        if formation.timestamp <= time:
            result = i
        else:
            break
    return result


def find_active_formation(
    formations: Sequence[Formation],
    time: float,
    epsilon: float = ACTIVE_EPSILON_S,
    prev_index: int | None = None,
) -> Formation | None:
    """The formation whose timestamp lies within epsilon of time, if any.

    Candidates are the bracketing formations on either side of time. When
    both qualify the closer one wins, the later one on an exact tie. Among
    formations sharing a timestamp the last inserted is chosen.

    Args:
        formations: Formations sorted by timestamp
        time: Query time
        epsilon: Tolerance in seconds
        prev_index: Precomputed find_previous_index result, if available

    Returns:
        The active formation or None
    """
    if not formations:
        return None
    if prev_index is None:
        prev_index = find_previous_index(formations, time)

    best: Formation | None = None
    best_distance = epsilon

    if prev_index is not None:
        distance = abs(formations[prev_index].timestamp - time)
        if distance < best_distance:
            best, best_distance = formations[prev_index], distance

    next_index = 0 if prev_index is None else prev_index + 1
    if next_index < len(formations):
        # Last of any formations sharing the upcoming timestamp
        while (
            next_index + 1 < len(formations)
            and formations[next_index + 1].timestamp == formations[next_index].timestamp
        ):
            next_index += 1
        distance = abs(formations[next_index].timestamp - time)
        if distance < epsilon and distance <= best_distance:
            best = formations[next_index]

    return best


def interpolation_progress(previous: Formation, next_: Formation, time: float) -> float:
    """Fraction of the way from previous to next at time, clamped to [0, 1].

    A zero-length interval counts as complete.
    """
    span = next_.timestamp - previous.timestamp
    if span <= 0.0:
        return 1.0
    return clamp((time - previous.timestamp) / span, 0.0, 1.0)


def _verbatim(formation: Formation, known: set[str] | None) -> dict[str, Pose]:
    return {
        p.dancer_id: Pose.from_placement(p)
        for p in formation.placements
        if known is None or p.dancer_id in known
    }


def resolve_frame(
    formations: Iterable[Formation],
    time: float,
    dancer_ids: Iterable[str] | None = None,
    epsilon: float = ACTIVE_EPSILON_S,
) -> ResolvedFrame:
    """Resolve every dancer's pose at the given time.

    Args:
        formations: Formations in any order (sorted stably here)
        time: Query time in seconds
        dancer_ids: Dancers of the project. Placements for other ids are
                    ignored. None accepts every placement's dancer.
        epsilon: Active-formation tolerance in seconds

    Returns:
        The resolved frame
    """
    ordered = sort_formations(formations)
    if not ordered:
        return ResolvedFrame(time=time)

    roster = list(dict.fromkeys(dancer_ids)) if dancer_ids is not None else None
    known = set(roster) if roster is not None else None
    prev_index = find_previous_index(ordered, time)
    active = find_active_formation(ordered, time, epsilon, prev_index)

    if prev_index is None:
        return ResolvedFrame(
            time=time,
            poses=_verbatim(ordered[0], known),
            active_formation=active,
            next=ordered[0],
        )

    previous = ordered[prev_index]

    if prev_index == len(ordered) - 1:
        return ResolvedFrame(
            time=time,
            poses=_verbatim(previous, known),
            active_formation=active,
            previous=previous,
        )

    next_ = ordered[prev_index + 1]
    t = interpolation_progress(previous, next_, time)
    start = previous.placement_map()
    end = next_.placement_map()

    candidates = roster if roster is not None else list(dict.fromkeys([*start, *end]))

    poses: dict[str, Pose] = {}
    for dancer_id in candidates:
        a = start.get(dancer_id)
        b = end.get(dancer_id)
        if a is not None and b is not None:
            poses[dancer_id] = Pose(
                lerp(a.x, b.x, t),
                lerp(a.y, b.y, t),
                lerp(a.rotation, b.rotation, t),
            )
        elif a is not None:
            poses[dancer_id] = Pose.from_placement(a)
        elif b is not None:
            poses[dancer_id] = Pose.from_placement(b)

    return ResolvedFrame(
        time=time,
        poses=poses,
        active_formation=active,
        previous=previous,
        next=next_,
        progress=t,
    )


def path_points(formations: Iterable[Formation], dancer_id: str) -> list[tuple[float, float]]:
    """The dancer's (x, y) in every formation that places them, in time order."""
    points: list[tuple[float, float]] = []
    for formation in sort_formations(formations):
        placement = formation.placement_for(dancer_id)
        if placement is not None:
            points.append((placement.x, placement.y))
    return points


def sample_paths(
    formations: Iterable[Formation],
    dancer_ids: Sequence[str],
    times: Iterable[float],
) -> np.ndarray:
    """Resolve poses at many times.

    Args:
        formations: Formations in any order
        dancer_ids: Dancers to sample, defining the second axis
        times: Query times, defining the first axis

    Returns:
        Array of shape (len(times), len(dancer_ids), 3) holding x, y and
        rotation, with NaN wherever a dancer has no pose
    """
    ordered = sort_formations(formations)
    time_list = [float(t) for t in times]
    out = np.full((len(time_list), len(dancer_ids), 3), np.nan, dtype=np.float64)
    for i, time in enumerate(time_list):
        frame = resolve_frame(ordered, time, dancer_ids)
        for j, dancer_id in enumerate(dancer_ids):
            pose = frame.poses.get(dancer_id)
            if pose is not None:
                out[i, j] = pose.as_tuple()
    return out
