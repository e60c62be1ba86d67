"""Tests for math utility functions."""

from __future__ import annotations

import pytest

from choreo.core.utils.math import clamp, lerp


def test_clamp_within_range():
    """Test clamping values within range."""
    assert clamp(5, 0, 10) == 5
    assert clamp(0.0, 0.0, 10.0) == 0.0


def test_clamp_outside_range():
    assert clamp(-5.0, 0.0, 60.0) == 0.0
    assert clamp(160.0, 0.0, 60.0) == 60.0


def test_lerp_midpoint():
    assert lerp(0.0, 10.0, 0.5) == 5.0
    assert lerp(10.0, 0.0, 0.25) == 7.5


@pytest.mark.parametrize(("t", "expected"), [(0.0, 0.1), (-2.0, 0.1), (1.0, 0.7), (3.0, 0.7)])
def test_lerp_exact_at_ends(t: float, expected: float):
    """Endpoints return the inputs themselves, with no rounding error."""
    assert lerp(0.1, 0.7, t) == expected
