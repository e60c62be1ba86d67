"""Interpolation engine bound to a keyframe store and a clock."""

from __future__ import annotations

import logging

from choreo.core.store import KeyframeStore
from choreo.core.timeline.clock import ClockEvent, TimelineClock
from choreo.core.timeline.interpolation import ACTIVE_EPSILON_S, ResolvedFrame, resolve_frame

logger = logging.getLogger(__name__)


class InterpolationEngine:
    """Resolves the store at the clock's current time.

    Keeps only the most recent frame; nothing about formation identity is
    carried from one recompute to the next, so formations or placements may
    disappear between ticks.

    Args:
        clock: Timeline clock supplying the query time
        store: Keyframe store, or None when no project is attached
        epsilon: Active-formation tolerance in seconds
    """

    def __init__(
        self,
        clock: TimelineClock,
        store: KeyframeStore | None = None,
        epsilon: float = ACTIVE_EPSILON_S,
    ):
        self.clock = clock
        self.store = store
        self.epsilon = epsilon
        self._frame = ResolvedFrame(time=clock.current_time)

    @property
    def frame(self) -> ResolvedFrame:
        """The most recently resolved frame."""
        return self._frame

    def attach(self, store: KeyframeStore | None) -> None:
        """Swap the project being resolved and recompute."""
        self.store = store
        self.recompute()

    def recompute(self) -> ResolvedFrame:
        """Resolve poses and the active formation at the current time."""
        time = self.clock.current_time
        if self.store is None:
            self._frame = ResolvedFrame(time=time)
            return self._frame

        with self.store.locked():
            formations = self.store.sorted_formations()
            dancer_ids = self.store.dancer_ids()

        self._frame = resolve_frame(formations, time, dancer_ids, self.epsilon)
        return self._frame

    def on_clock_event(self, event: ClockEvent, time: float) -> None:
        """Clock listener: recompute after every tick, seek or state change."""
        frame = self.recompute()
        if event is not ClockEvent.TICK:
            active = frame.active_formation.name if frame.active_formation else None
            logger.debug(
                f"{event.value} at {time:.3f}s: {len(frame.poses)} poses, active={active}"
            )
