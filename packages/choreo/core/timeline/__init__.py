"""Timeline domain: clock, interpolation, editing and costume resolution."""

from choreo.core.timeline.audio import AudioSource, FakeAudioSource
from choreo.core.timeline.clock import ClockEvent, ClockListener, TimelineClock
from choreo.core.timeline.costumes import (
    CostumeLookup,
    CostumeResolver,
    lookup_costume,
    resolve_costume,
)
from choreo.core.timeline.editing import EditSession, GroupDrag
from choreo.core.timeline.engine import InterpolationEngine
from choreo.core.timeline.interpolation import (
    ACTIVE_EPSILON_S,
    Pose,
    ResolvedFrame,
    find_active_formation,
    find_previous_index,
    interpolation_progress,
    path_points,
    resolve_frame,
    sample_paths,
)
from choreo.core.timeline.runner import run_playback

__all__ = [
    # Clock
    "TimelineClock",
    "ClockEvent",
    "ClockListener",
    "run_playback",
    # Audio
    "AudioSource",
    "FakeAudioSource",
    # Interpolation
    "ACTIVE_EPSILON_S",
    "Pose",
    "ResolvedFrame",
    "InterpolationEngine",
    "find_active_formation",
    "find_previous_index",
    "interpolation_progress",
    "path_points",
    "resolve_frame",
    "sample_paths",
    # Editing
    "EditSession",
    "GroupDrag",
    # Costumes
    "CostumeLookup",
    "CostumeResolver",
    "lookup_costume",
    "resolve_costume",
]
