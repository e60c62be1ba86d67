"""Edit session: staged (preview) positions and committed keyframe edits.

Staged positions live in an in-memory overlay on top of the resolved frame
and never touch the keyframe store. Committing writes into the active
formation, or creates a formation at the current time when none is active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from choreo.core.models import Dancer, Formation, Placement
from choreo.core.timeline.engine import InterpolationEngine
from choreo.core.timeline.interpolation import Pose

logger = logging.getLogger(__name__)

DEFAULT_KEYFRAME_PREFIX = "Keyframe"


@dataclass
class GroupDrag:
    """Start poses captured when a group drag begins."""

    anchor_id: str
    anchor_start: Pose
    member_starts: dict[str, Pose] = field(default_factory=dict)

    def translated(self, x: float, y: float) -> list[tuple[str, float, float]]:
        """Member positions after moving the anchor to (x, y)."""
        dx = x - self.anchor_start.x
        dy = y - self.anchor_start.y
        return [
            (dancer_id, start.x + dx, start.y + dy)
            for dancer_id, start in self.member_starts.items()
        ]


def _dancer_id(dancer: Dancer | str) -> str:
    return dancer if isinstance(dancer, str) else dancer.id


class EditSession:
    """Stages and commits dancer position edits.

    Args:
        engine: Interpolation engine providing the current frame and store
        keyframe_prefix: Name prefix for formations created by edits
    """

    def __init__(
        self,
        engine: InterpolationEngine,
        keyframe_prefix: str = DEFAULT_KEYFRAME_PREFIX,
    ):
        self.engine = engine
        self.keyframe_prefix = keyframe_prefix
        self._staged: dict[str, tuple[float, float]] = {}
        self._drag: GroupDrag | None = None

    # ------------------------------------------------------------------
    # Overlay
    # ------------------------------------------------------------------

    @property
    def poses(self) -> dict[str, Pose]:
        """Resolved poses with staged positions applied."""
        poses = dict(self.engine.frame.poses)
        for dancer_id, (x, y) in self._staged.items():
            pose = poses.get(dancer_id)
            if pose is not None:
                poses[dancer_id] = pose.with_position(x, y)
        return poses

    @property
    def staged(self) -> dict[str, tuple[float, float]]:
        return dict(self._staged)

    def stage_position(self, dancer: Dancer | str, x: float, y: float) -> bool:
        """Preview a new x/y for a dancer without touching the store.

        Rotation is left as resolved. Repeated stages overwrite each other.

        Returns:
            False (and does nothing) if the dancer has no resolved pose
        """
        dancer_id = _dancer_id(dancer)
        if dancer_id not in self.engine.frame.poses:
            return False
        self._staged[dancer_id] = (x, y)
        return True

    def discard_staged(self, dancer: Dancer | str | None = None) -> None:
        """Drop staged positions for one dancer, or all of them."""
        if dancer is None:
            self._staged.clear()
            self._drag = None
        else:
            self._staged.pop(_dancer_id(dancer), None)

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def commit_position(self, dancer: Dancer | str, x: float, y: float) -> Formation | None:
        """Persist a dancer's position into the active formation.

        When no formation is active, a new one named after the whole current
        second is created at the current time holding just this placement.
        An existing placement keeps its rotation; a new one gets rotation 0.

        Returns:
            The formation written to, or None when no project is attached
        """
        return self._commit([(_dancer_id(dancer), x, y)])

    def add_keyframe_at_current_time(self) -> Formation | None:
        """Freeze the current animated state into a new formation.

        Every dancer with a pose gets a placement holding that pose (staged
        positions included). No-op when a formation is already active.

        Returns:
            The created formation, or None if nothing was created
        """
        store = self.engine.store
        if store is None:
            logger.warning("add_keyframe_at_current_time called with no project attached")
            return None

        frame = self.engine.recompute()
        if frame.active_formation is not None:
            logger.debug(
                f"Formation {frame.active_formation.name!r} already active at "
                f"{frame.time:.3f}s; not adding a keyframe"
            )
            return None

        poses = self.poses
        placements = [
            Placement(dancer_id=dancer_id, x=pose.x, y=pose.y, rotation=pose.rotation)
            for dancer_id in store.dancer_ids()
            if (pose := poses.get(dancer_id)) is not None
        ]
        try:
            formation = store.add_formation(
                self._keyframe_name(frame.time), frame.time, placements
            )
        finally:
            self.discard_staged()
            self.engine.recompute()
        logger.info(f"Added keyframe {formation.name!r} with {len(placements)} placements")
        return formation

    # ------------------------------------------------------------------
    # Group drag
    # ------------------------------------------------------------------

    def begin_group_drag(self, anchor: Dancer | str, group_id: str | None = None) -> bool:
        """Start dragging a dancer, together with its group if one is selected.

        Every member's current pose is captured so that later updates move
        the whole group by the anchor's offset.

        Returns:
            False if the anchor has no pose
        """
        anchor_id = _dancer_id(anchor)
        poses = self.poses
        anchor_pose = poses.get(anchor_id)
        if anchor_pose is None:
            return False

        members = [anchor_id]
        store = self.engine.store
        if group_id is not None and store is not None:
            group = store.group(group_id)
            if group is not None and group.contains(anchor_id):
                members = list(group.dancer_ids)

        self._drag = GroupDrag(
            anchor_id=anchor_id,
            anchor_start=anchor_pose,
            member_starts={m: poses[m] for m in members if m in poses},
        )
        return True

    def stage_group_drag(self, x: float, y: float) -> None:
        """Move the anchor to (x, y) and every other member by the same offset."""
        if self._drag is None:
            return
        for dancer_id, mx, my in self._drag.translated(x, y):
            self.stage_position(dancer_id, mx, my)

    def commit_group_drag(self, x: float, y: float) -> Formation | None:
        """Commit every member's translated position in one edit."""
        if self._drag is None:
            return None
        positions = self._drag.translated(x, y)
        self._drag = None
        return self._commit(positions)

    def cancel_group_drag(self) -> None:
        if self._drag is None:
            return
        for dancer_id in self._drag.member_starts:
            self._staged.pop(dancer_id, None)
        self._drag = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _keyframe_name(self, time: float) -> str:
        return f"{self.keyframe_prefix} {int(time)}"

    def _commit(self, positions: list[tuple[str, float, float]]) -> Formation | None:
        store = self.engine.store
        if store is None:
            logger.warning("Commit ignored: no project attached")
            return None
        if not positions:
            return None

        frame = self.engine.recompute()
        active = frame.active_formation
        # A failed save still leaves the store mutated
        try:
            if active is not None:
                store.upsert_placements(active.id, positions)
                target = store.project.formation(active.id) or active
            else:
                target = store.add_formation(
                    self._keyframe_name(frame.time),
                    frame.time,
                    [Placement(dancer_id=d, x=x, y=y) for d, x, y in positions],
                )
                logger.info(f"Created keyframe {target.name!r} at {frame.time:.3f}s")
        finally:
            for dancer_id, _, _ in positions:
                self._staged.pop(dancer_id, None)
            self.engine.recompute()
        return target
