"""Shared utilities for Choreo."""

from choreo.core.utils.json import read_json, write_json
from choreo.core.utils.math import clamp, lerp

__all__ = [
    "clamp",
    "lerp",
    "read_json",
    "write_json",
]
