"""Tests for keyframe interpolation."""

from __future__ import annotations

import math

import numpy as np
import pytest

from choreo.core.models import Formation, Placement, Project
from choreo.core.timeline.interpolation import (
    Pose,
    find_active_formation,
    find_previous_index,
    interpolation_progress,
    path_points,
    resolve_frame,
    sample_paths,
)


def _formation(
    name: str, timestamp: float, *placements: tuple[str, float, float, float]
) -> Formation:
    return Formation(
        name=name,
        timestamp=timestamp,
        placements=[Placement(dancer_id=d, x=x, y=y, rotation=r) for d, x, y, r in placements],
    )


class TestBoundaries:
    """Before the first and after the last formation."""

    def test_empty_formations_resolve_nothing(self) -> None:
        """No formations produce no poses and no active formation."""
        frame = resolve_frame([], 3.0, ["alice"])
        assert frame.poses == {}
        assert frame.active_formation is None

    def test_before_first_returns_first_verbatim(self) -> None:
        """Query before the first timestamp copies the first formation."""
        first = _formation("A", 5.0, ("alice", 1.0, 2.0, 30.0))
        second = _formation("B", 8.0, ("alice", 9.0, 9.0, 0.0), ("bob", 4.0, 4.0, 0.0))

        frame = resolve_frame([second, first], 1.0, ["alice", "bob"])

        assert frame.poses == {"alice": Pose(1.0, 2.0, 30.0)}
        assert frame.previous is None
        assert frame.active_formation is None

    def test_after_last_returns_last_verbatim(self) -> None:
        """Query after the last timestamp holds the last formation."""
        first = _formation("A", 0.0, ("alice", 1.0, 2.0, 30.0))
        last = _formation("B", 4.0, ("bob", 4.0, 5.0, 180.0))

        frame = resolve_frame([first, last], 50.0, ["alice", "bob"])

        assert frame.poses == {"bob": Pose(4.0, 5.0, 180.0)}
        assert frame.previous is last
        assert frame.next is None

    def test_unknown_dancer_placements_are_omitted(self) -> None:
        """Placements for dancers outside the roster are ignored."""
        only = _formation("A", 0.0, ("alice", 1.0, 1.0, 0.0), ("ghost", 3.0, 3.0, 0.0))

        frame = resolve_frame([only], 2.0, ["alice"])

        assert set(frame.poses) == {"alice"}

    def test_no_roster_accepts_every_placement(self) -> None:
        """Without a roster every placement's dancer is resolved."""
        only = _formation("A", 0.0, ("alice", 1.0, 1.0, 0.0), ("ghost", 3.0, 3.0, 0.0))
        assert set(resolve_frame([only], 0.0).poses) == {"alice", "ghost"}


class TestInterpolation:
    """Between two bracketing formations."""

    @pytest.fixture
    def pair(self) -> list[Formation]:
        return [
            _formation("Start", 0.0, ("d", 0.0, 0.0, 0.0)),
            _formation("End", 10.0, ("d", 10.0, 20.0, 90.0)),
        ]

    def test_midpoint(self, pair: list[Formation]) -> None:
        """Halfway between the keyframes is the halfway pose."""
        frame = resolve_frame(pair, 5.0, ["d"])
        assert frame.poses["d"] == Pose(5.0, 10.0, 45.0)
        assert frame.progress == pytest.approx(0.5)

    def test_exact_at_start(self, pair: list[Formation]) -> None:
        assert resolve_frame(pair, 0.0, ["d"]).poses["d"] == Pose(0.0, 0.0, 0.0)

    def test_exact_at_end(self, pair: list[Formation]) -> None:
        assert resolve_frame(pair, 10.0, ["d"]).poses["d"] == Pose(10.0, 20.0, 90.0)

    def test_rotation_is_not_wrapped(self) -> None:
        """A 0 -> 350 degree change spins the long way round."""
        pair = [
            _formation("A", 0.0, ("d", 0.0, 0.0, 0.0)),
            _formation("B", 2.0, ("d", 0.0, 0.0, 350.0)),
        ]
        assert resolve_frame(pair, 1.0, ["d"]).poses["d"].rotation == pytest.approx(175.0)

    def test_unsorted_input_is_sorted(self, pair: list[Formation]) -> None:
        """Input order does not affect the result."""
        forward = resolve_frame(pair, 2.5, ["d"])
        backward = resolve_frame(list(reversed(pair)), 2.5, ["d"])
        assert forward.poses == backward.poses

    def test_result_is_deterministic(self, pair: list[Formation]) -> None:
        """Repeated queries give identical frames."""
        first = resolve_frame(pair, 3.3, ["d"])
        second = resolve_frame(pair, 3.3, ["d"])
        assert first.poses == second.poses


class TestMissingEntries:
    """Dancers missing from one side of the bracket."""

    @pytest.fixture
    def pair(self) -> list[Formation]:
        return [
            _formation("A", 0.0, ("early", 1.0, 1.0, 10.0), ("both", 0.0, 0.0, 0.0)),
            _formation("B", 10.0, ("late", 7.0, 8.0, 20.0), ("both", 10.0, 10.0, 0.0)),
        ]

    @pytest.mark.parametrize("time", [0.0, 3.0, 9.99, 10.0 - 0.1])
    def test_only_previous_holds(self, pair: list[Formation], time: float) -> None:
        """A dancer only in the earlier formation stays put."""
        frame = resolve_frame(pair, time, ["early", "late", "both"])
        assert frame.poses["early"] == Pose(1.0, 1.0, 10.0)

    @pytest.mark.parametrize("time", [0.5, 5.0, 9.9])
    def test_only_next_snaps(self, pair: list[Formation], time: float) -> None:
        """A dancer only in the later formation sits at the destination."""
        frame = resolve_frame(pair, time, ["early", "late", "both"])
        assert frame.poses["late"] == Pose(7.0, 8.0, 20.0)

    def test_neither_has_no_pose(self, pair: list[Formation]) -> None:
        frame = resolve_frame(pair, 5.0, ["early", "late", "both", "absent"])
        assert "absent" not in frame.poses


class TestProgress:
    """Tests for interpolation_progress."""

    def test_zero_length_interval_is_complete(self) -> None:
        """Duplicate timestamps never divide by zero."""
        a = _formation("A", 4.0)
        b = _formation("B", 4.0)
        assert interpolation_progress(a, b, 4.0) == 1.0

    def test_clamped(self) -> None:
        a = _formation("A", 0.0)
        b = _formation("B", 2.0)
        assert interpolation_progress(a, b, -1.0) == 0.0
        assert interpolation_progress(a, b, 5.0) == 1.0

    def test_duplicate_timestamps_resolve_without_error(self) -> None:
        """Two formations at one instant resolve to finite poses."""
        formations = [
            _formation("A", 0.0, ("d", 0.0, 0.0, 0.0)),
            _formation("B", 2.0, ("d", 1.0, 1.0, 0.0)),
            _formation("C", 2.0, ("d", 5.0, 5.0, 0.0)),
        ]
        frame = resolve_frame(formations, 1.0, ["d"])
        assert all(math.isfinite(v) for v in frame.poses["d"].as_tuple())
        assert frame.poses["d"] == Pose(0.5, 0.5, 0.0)


class TestActiveFormation:
    """Active keyframe detection."""

    @pytest.fixture
    def formations(self) -> list[Formation]:
        return [_formation("Zero", 0.0), _formation("Five", 5.0)]

    @pytest.mark.parametrize("time", [5.0, 5.04, 4.96])
    def test_within_epsilon_is_active(self, formations: list[Formation], time: float) -> None:
        """Queries within 0.1s on either side report the formation."""
        frame = resolve_frame(formations, time)
        assert frame.active_formation is not None
        assert frame.active_formation.name == "Five"

    @pytest.mark.parametrize("time", [5.2, 4.8, 2.5])
    def test_outside_epsilon_is_inactive(self, formations: list[Formation], time: float) -> None:
        assert resolve_frame(formations, time).active_formation is None

    def test_later_inserted_wins_on_duplicate_timestamp(self) -> None:
        """The last-inserted of two formations sharing a timestamp is active."""
        first = _formation("First", 3.0)
        second = _formation("Second", 3.0)
        ordered = [first, second]

        assert find_active_formation(ordered, 3.0).name == "Second"
        assert find_active_formation(ordered, 2.95).name == "Second"

    def test_closer_candidate_wins(self) -> None:
        """With keyframes on both sides inside epsilon, the nearer one is active."""
        ordered = [_formation("A", 1.0), _formation("B", 1.08)]
        assert find_active_formation(ordered, 1.06).name == "B"
        assert find_active_formation(ordered, 1.01).name == "A"

    def test_custom_epsilon(self, formations: list[Formation]) -> None:
        assert resolve_frame(formations, 5.2, epsilon=0.5).active_formation is not None


class TestFindPreviousIndex:
    def test_before_all(self) -> None:
        assert find_previous_index([_formation("A", 1.0)], 0.5) is None

    def test_last_of_ties(self) -> None:
        ordered = [_formation("A", 1.0), _formation("B", 1.0), _formation("C", 2.0)]
        assert find_previous_index(ordered, 1.0) == 1


class TestPaths:
    """Path trails and sampling."""

    def test_path_points_in_time_order(self, two_keyframe_project: Project) -> None:
        points = path_points(two_keyframe_project.formations, "alice")
        assert points == [(0.0, 0.0), (10.0, 20.0)]

    def test_path_points_skip_missing(self, two_keyframe_project: Project) -> None:
        assert path_points(two_keyframe_project.formations, "bob") == [(2.0, 3.0)]

    def test_sample_paths_shape_and_values(self, two_keyframe_project: Project) -> None:
        samples = sample_paths(
            two_keyframe_project.formations, ["alice", "bob"], [0.0, 5.0, 12.0]
        )

        assert samples.shape == (3, 2, 3)
        np.testing.assert_allclose(samples[1, 0], [5.0, 10.0, 45.0])
        np.testing.assert_allclose(samples[1, 1], [2.0, 3.0, 45.0])
        # Bob is not in the last formation
        assert np.isnan(samples[2, 1]).all()
