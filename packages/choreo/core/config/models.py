"""Configuration models for Choreo."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log records")
    filename: str | None = Field(default=None, description="Log file path (stdout if None)")


class PlaybackConfig(BaseModel):
    """Timeline clock and keyframe engine settings."""

    model_config = ConfigDict(frozen=True)

    tick_rate_hz: float = Field(
        default=60.0, gt=0.0, le=1000.0, description="Self-ticking cadence in Hz"
    )
    default_duration_s: float = Field(
        default=60.0, ge=0.0, description="Timeline length when no audio is attached"
    )
    active_epsilon_s: float = Field(
        default=0.1,
        gt=0.0,
        description="A formation is active when its timestamp is this close to the playhead",
    )
    keyframe_name_prefix: str = Field(
        default="Keyframe",
        min_length=1,
        description="Prefix for auto-created keyframes, followed by the whole second",
    )


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
