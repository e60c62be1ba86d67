"""Timeline clock: playback time, duration and play/pause state.

The clock advances either by mirroring an attached audio player's position or
by self-ticking with elapsed wall time. While playing, current_time never
decreases except through an explicit seek, and always stays in [0, duration].
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from choreo.core.timeline.audio import AudioSource
from choreo.core.utils.math import clamp

logger = logging.getLogger(__name__)

DEFAULT_DURATION_S = 60.0


class ClockEvent(str, Enum):
    """Reason a clock listener is being notified."""

    TICK = "tick"
    SEEK = "seek"
    PLAY = "play"
    PAUSE = "pause"
    DURATION = "duration"


ClockListener = Callable[[ClockEvent, float], None]


class TimelineClock:
    """Playback clock for a single project timeline.

    Args:
        duration: Initial timeline length in seconds (used until audio with a
                  positive duration is loaded)
    """

    def __init__(self, duration: float = DEFAULT_DURATION_S):
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        self._duration = float(duration)
        self._current_time = 0.0
        self._playing = False
        self._audio: AudioSource | None = None
        self._audio_driven = False
        self._listeners: list[ClockListener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def audio(self) -> AudioSource | None:
        return self._audio

    @property
    def is_audio_driven(self) -> bool:
        """True while playback follows the attached audio player."""
        return self._playing and self._audio_driven

    def add_listener(self, listener: ClockListener) -> None:
        """Register a callback run synchronously after every time or state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ClockListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Audio
    # ------------------------------------------------------------------

    def load_audio(self, audio: AudioSource) -> None:
        """Attach an audio player as the playback authority.

        The timeline duration follows the audio's duration when it is greater
        than zero; otherwise the previous duration is kept.
        """
        if self._playing:
            self.pause()

        self._audio = audio
        if audio.duration > 0:
            self._duration = float(audio.duration)
            self._current_time = clamp(self._current_time, 0.0, self._duration)
        audio.seek(self._current_time)

        logger.info(f"Audio attached, timeline duration {self._duration:.2f}s")
        self._notify(ClockEvent.DURATION)

    def detach_audio(self) -> None:
        """Drop the audio player and fall back to self-ticking."""
        if self._audio is None:
            return
        if self._playing:
            self.pause()
        self._audio = None
        logger.info("Audio detached")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Start playback. No-op if already playing."""
        if self._playing:
            return

        self._playing = True
        if self._audio is not None and self._audio.is_ready:
            self._audio.seek(self._current_time)
            self._audio.play()
            self._audio_driven = True
        else:
            self._audio_driven = False

        mode = "audio" if self._audio_driven else "self-ticking"
        logger.info(f"Playback started at {self._current_time:.2f}s ({mode})")
        self._notify(ClockEvent.PLAY)

    def pause(self) -> None:
        """Stop playback and the attached audio. Idempotent."""
        if self._audio is not None:
            self._audio.pause()
        if not self._playing:
            return

        self._playing = False
        self._audio_driven = False
        logger.info(f"Playback paused at {self._current_time:.2f}s")
        self._notify(ClockEvent.PAUSE)

    def toggle_play_pause(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def seek(self, time: float) -> None:
        """Move the playhead, clamped to [0, duration].

        Playback keeps running from the new position if it was running.
        """
        self._current_time = clamp(float(time), 0.0, self._duration)
        if self._audio is not None:
            self._audio.seek(self._current_time)
        logger.debug(f"Seek to {self._current_time:.3f}s")
        self._notify(ClockEvent.SEEK)

    def tick(self, elapsed: float) -> None:
        """Advance playback by one tick.

        Args:
            elapsed: Wall time since the previous tick in seconds. Ignored in
                     audio-driven mode, where the audio position is mirrored.
        """
        if not self._playing:
            return

        if self._audio_driven and self._audio is not None:
            position = clamp(self._audio.current_position(), 0.0, self._duration)
            self._current_time = max(self._current_time, position)
            if not self._audio.is_playing and self._current_time < self._duration:
                # Audio ended short of the timeline; continue on wall time
                logger.debug(f"Audio stopped at {self._current_time:.3f}s, self-ticking")
                self._audio_driven = False
                self._advance(elapsed)
        else:
            self._advance(elapsed)
        finished = self._current_time >= self._duration

        self._notify(ClockEvent.TICK)
        if finished:
            logger.debug("Reached end of timeline")
            self.pause()

    def _advance(self, elapsed: float) -> None:
        self._current_time = min(self._current_time + max(elapsed, 0.0), self._duration)

    def _notify(self, event: ClockEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self._current_time)
