"""Choreo session coordinator.

The session wires together the pieces a stage view needs for one open
project:
- Keyframe store (project ownership and persistence)
- Timeline clock (audio-driven or self-ticking)
- Interpolation engine (resolved poses and the active formation)
- Edit session (staged and committed position edits)
- Costume resolver (effective dancer colors)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import numpy as np

from choreo.core.config.loader import load_app_config
from choreo.core.config.models import AppConfig
from choreo.core.models import Formation, Project
from choreo.core.persistence import FileProjectRepository, ProjectRepository
from choreo.core.store import KeyframeStore
from choreo.core.timeline import (
    AudioSource,
    ClockEvent,
    CostumeResolver,
    EditSession,
    InterpolationEngine,
    Pose,
    TimelineClock,
    path_points,
    run_playback,
    sample_paths,
)
from choreo.core.utils.logging import get_logger

logger = logging.getLogger(__name__)


class ChoreoSession:
    """Playback and editing coordinator for one project.

    Poses are recomputed on every clock tick, every seek and after every
    committed edit. Staged positions are dropped on seek.
    """

    def __init__(
        self,
        project: Project | None = None,
        *,
        app_config: AppConfig | Path | str | None = None,
        repository: ProjectRepository | None = None,
    ):
        """Initialize the session.

        Args:
            project: Project to open, or None to start without one
            app_config: AppConfig instance, path, or None (defaults)
            repository: Persistence collaborator for the project

        Raises:
            TypeError: If app_config is of the wrong type
        """
        self.app_config = self._resolve_config(app_config)
        playback = self.app_config.playback

        self.clock = TimelineClock(duration=playback.default_duration_s)
        self.store: KeyframeStore | None = None
        self.engine = InterpolationEngine(self.clock, epsilon=playback.active_epsilon_s)
        self.editor = EditSession(self.engine, keyframe_prefix=playback.keyframe_name_prefix)
        self.costumes: CostumeResolver | None = None

        self.clock.add_listener(self._on_clock_event)

        if project is not None:
            self.open_project(project, repository)

    @staticmethod
    def _resolve_config(value: Any) -> AppConfig:
        if value is None:
            return AppConfig()
        elif isinstance(value, (Path, str)):
            return load_app_config(value)
        elif isinstance(value, AppConfig):
            return value
        else:
            raise TypeError(f"Expected AppConfig, Path, str, or None; got {type(value).__name__}")

    @classmethod
    def from_file(
        cls,
        project_path: Path | str,
        *,
        app_config: AppConfig | Path | str | None = None,
    ) -> ChoreoSession:
        """Open a project file and persist edits back to it.

        Raises:
            PersistenceError: If the project cannot be loaded
        """
        repository = FileProjectRepository(project_path)
        return cls(repository.load(), app_config=app_config, repository=repository)

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    @property
    def project(self) -> Project | None:
        return self.store.project if self.store is not None else None

    def open_project(self, project: Project, repository: ProjectRepository | None = None) -> None:
        """Attach a project and resolve the frame at the current time."""
        self.store = KeyframeStore(project, repository)
        self.costumes = CostumeResolver(self.store)
        self.editor.discard_staged()
        self.engine.attach(self.store)
        get_logger(__name__, project_id=project.id).info(
            f"Opened project {project.name!r}: {len(project.dancers)} dancers, "
            f"{len(project.formations)} formations"
        )

    def close_project(self) -> None:
        self.clock.pause()
        self.store = None
        self.costumes = None
        self.editor.discard_staged()
        self.engine.attach(None)

    def load_audio(self, audio: AudioSource) -> None:
        """Attach an audio player; the timeline length follows its duration."""
        self.clock.load_audio(audio)

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> float:
        return self.clock.current_time

    @property
    def poses(self) -> dict[str, Pose]:
        """Resolved poses with staged positions applied."""
        return self.editor.poses

    @property
    def active_formation(self) -> Formation | None:
        return self.engine.frame.active_formation

    def sorted_formations(self) -> list[Formation]:
        """Formations in timeline order, for read-only consumers such as export."""
        return self.store.sorted_formations() if self.store is not None else []

    def costume_color(self, dancer_id: str) -> str | None:
        """Effective color of a dancer at the current time (None if unknown)."""
        if self.store is None or self.costumes is None:
            return None
        dancer = self.store.dancer(dancer_id)
        if dancer is None:
            return None
        return self.costumes.color_for(dancer, self.clock.current_time)

    def path_points(self, dancer_id: str) -> list[tuple[float, float]]:
        return path_points(self.sorted_formations(), dancer_id)

    def sample_paths(self, times: Iterable[float]) -> np.ndarray:
        """Poses of every dancer at each time; see timeline.sample_paths."""
        if self.store is None:
            return np.empty((0, 0, 3))
        return sample_paths(self.sorted_formations(), self.store.dancer_ids(), times)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def play(self) -> None:
        self.clock.play()

    def pause(self) -> None:
        self.clock.pause()

    def toggle_play_pause(self) -> None:
        self.clock.toggle_play_pause()

    def seek(self, time: float) -> None:
        self.clock.seek(time)

    async def run(self) -> int:
        """Play from the current position until the end or a pause."""
        self.clock.play()
        return await run_playback(self.clock, self.app_config.playback.tick_rate_hz)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def stage_position(self, dancer_id: str, x: float, y: float) -> bool:
        return self.editor.stage_position(dancer_id, x, y)

    def commit_position(self, dancer_id: str, x: float, y: float) -> Formation | None:
        return self.editor.commit_position(dancer_id, x, y)

    def add_keyframe_at_current_time(self) -> Formation | None:
        return self.editor.add_keyframe_at_current_time()

    def begin_group_drag(self, anchor_id: str, group_id: str | None = None) -> bool:
        return self.editor.begin_group_drag(anchor_id, group_id)

    def stage_group_drag(self, x: float, y: float) -> None:
        self.editor.stage_group_drag(x, y)

    def commit_group_drag(self, x: float, y: float) -> Formation | None:
        return self.editor.commit_group_drag(x, y)

    def _on_clock_event(self, event: ClockEvent, time: float) -> None:
        if event is ClockEvent.SEEK:
            self.editor.discard_staged()
        self.engine.on_clock_event(event, time)
