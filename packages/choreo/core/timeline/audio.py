"""Audio collaborator protocol and an in-process fake.

The engine never decodes audio. It only reads a playback position and a
duration, issues transport commands, and passes the waveform through as
opaque display data.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class AudioSource(Protocol):
    """Protocol for an external audio player."""

    @property
    def is_ready(self) -> bool:
        """True once the audio is loaded and can be played."""
        ...

    @property
    def is_playing(self) -> bool:
        ...

    @property
    def duration(self) -> float:
        """Length of the audio in seconds (0 if unknown)."""
        ...

    @property
    def waveform(self) -> Sequence[float]:
        """Normalized 0-1 amplitude samples, possibly empty until ready."""
        ...

    def current_position(self) -> float:
        """Current playback position in seconds."""
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def seek(self, time: float) -> None:
        ...


class FakeAudioSource:
    """Deterministic audio player for tests and offline previews.

    Position only moves when advance() is called, and stops at the end of the
    track the way a real player does.
    """

    def __init__(
        self,
        duration: float,
        waveform: Sequence[float] = (),
        ready: bool = True,
    ):
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        self._duration = duration
        self._waveform = list(waveform)
        self._ready = ready
        self._playing = False
        self._position = 0.0

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def waveform(self) -> Sequence[float]:
        return self._waveform

    def current_position(self) -> float:
        return self._position

    def play(self) -> None:
        if self._ready:
            self._playing = True

    def pause(self) -> None:
        self._playing = False

    def seek(self, time: float) -> None:
        self._position = min(max(time, 0.0), self._duration)

    def advance(self, seconds: float) -> None:
        """Move the playhead forward while playing."""
        if not self._playing:
            return
        self._position = min(self._position + seconds, self._duration)
        if self._position >= self._duration:
            self._playing = False
