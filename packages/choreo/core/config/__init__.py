"""Configuration management for Choreo."""

from choreo.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from choreo.core.config.models import AppConfig, LoggingConfig, PlaybackConfig

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_app_config",
    "configure_logging",
    # Models
    "AppConfig",
    "LoggingConfig",
    "PlaybackConfig",
]
