"""Shared pytest fixtures for choreo tests."""

from __future__ import annotations

import pytest

from choreo.core.models import Costume, Dancer, DancerGroup, Formation, Placement, Project
from choreo.core.store import KeyframeStore
from choreo.core.timeline import EditSession, InterpolationEngine, TimelineClock

# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def alice() -> Dancer:
    return Dancer(id="alice", name="Alice", color="#FF0000")


@pytest.fixture
def bob() -> Dancer:
    return Dancer(id="bob", name="Bob", color="#00FF00")


@pytest.fixture
def red_dress() -> Costume:
    return Costume(id="red-dress", name="Red Dress", color="#AA0000")


@pytest.fixture
def two_keyframe_project(alice: Dancer, bob: Dancer, red_dress: Costume) -> Project:
    """Alice moves (0,0,0) -> (10,20,90) over 0-10s; Bob is only in the first."""
    opening = Formation(
        id="opening",
        name="Opening",
        timestamp=0.0,
        placements=[
            Placement(dancer_id="alice", x=0.0, y=0.0, rotation=0.0),
            Placement(dancer_id="bob", x=2.0, y=3.0, rotation=45.0),
        ],
    )
    finale = Formation(
        id="finale",
        name="Finale",
        timestamp=10.0,
        placements=[Placement(dancer_id="alice", x=10.0, y=20.0, rotation=90.0)],
    )
    return Project(
        name="Test Show",
        dancers=[alice, bob],
        costumes=[red_dress],
        groups=[DancerGroup(id="duo", name="Duo", dancer_ids=["alice", "bob"])],
        formations=[finale, opening],  # deliberately out of order
    )


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def store(two_keyframe_project: Project) -> KeyframeStore:
    return KeyframeStore(two_keyframe_project)


@pytest.fixture
def clock() -> TimelineClock:
    return TimelineClock(duration=60.0)


@pytest.fixture
def engine(clock: TimelineClock, store: KeyframeStore) -> InterpolationEngine:
    engine = InterpolationEngine(clock, store)
    clock.add_listener(engine.on_clock_event)
    engine.recompute()
    return engine


@pytest.fixture
def editor(engine: InterpolationEngine) -> EditSession:
    return EditSession(engine)
