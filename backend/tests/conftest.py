"""
Shared fixtures for the StepQuest test suite.
Run with: python3 -m pytest
"""
from datetime import datetime

import pytest

from stepquest.core.config import Settings
from stepquest.infrastructure.pedometer.calendar_keys import date_key, week_key
from stepquest.infrastructure.pedometer.constants import StorageKey
from stepquest.infrastructure.pedometer.mission_config import (
    BonusKind,
    BonusMission,
    Mission,
    MissionCatalog,
)
from stepquest.infrastructure.pedometer.motion_filter import MotionFilter, MotionSample
from stepquest.infrastructure.pedometer.service import PedometerEngine
from stepquest.infrastructure.pedometer.store import InMemoryKeyValueStore

# Wednesday
NOW = datetime(2024, 5, 15, 9, 0)

MISSIONS = (
    Mission(id=1, goal=100, text="Beginner: 100 steps", icon="👟"),
    Mission(id=2, goal=500, text="Warm-up: 500 steps", icon="🏃"),
    Mission(id=3, goal=1000, text="Basic training: 1,000 steps", icon="⛰️"),
)

BONUS_MISSIONS = (
    BonusMission(id=101, kind=BonusKind.CONSECUTIVE, goal=5, text="5 days in a row", target_steps=100),
    BonusMission(id=102, kind=BonusKind.WEEKLY, goal=35000, text="35,000 steps this week"),
    BonusMission(id=103, kind=BonusKind.WEEKLY, goal=50000, text="Secret tier", unlock_threshold=35000),
)


def spike(motion_filter: MotionFilter, magnitude: float = 10.0, vertical_weight: float = 1.2) -> MotionSample:
    """A sample whose filtered, weighted magnitude equals `magnitude` (all on the z axis)."""
    g = motion_filter.gravity
    linear_z = magnitude / vertical_weight
    return MotionSample(g.x, g.y, g.z + linear_z / motion_filter.alpha)


def quiet(motion_filter: MotionFilter) -> MotionSample:
    """A sample equal to the current gravity estimate: zero linear acceleration."""
    g = motion_filter.gravity
    return MotionSample(g.x, g.y, g.z)


def walk(engine: PedometerEngine, count: int, start_ms: float = 0.0, spacing_ms: float = 600.0):
    """Feed `count` step-sized samples; returns the StepResults."""
    return [
        engine.handle_sample(spike(engine.motion_filter), now_ms=start_ms + i * spacing_ms)
        for i in range(count)
    ]


def persisted(day: datetime, daily=0, weekly=0, streak=0, mission_index=0) -> dict[str, str]:
    return {
        StorageKey.STEPS: str(daily),
        StorageKey.DATE: date_key(day),
        StorageKey.MISSION_INDEX: str(mission_index),
        StorageKey.CONSECUTIVE: str(streak),
        StorageKey.WEEKLY_STEPS: str(weekly),
        StorageKey.WEEK_NUMBER: week_key(day),
    }


class AvailableSensor:
    def is_available(self):
        return True

    def request_permission(self):
        return True


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def catalog():
    return MissionCatalog(missions=MISSIONS, bonus_missions=BONUS_MISSIONS)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def sensor():
    return AvailableSensor()


@pytest.fixture
def make_engine(catalog, settings):
    def _make(store, now=NOW):
        return PedometerEngine(store, catalog=catalog, settings=settings, clock=lambda: now)

    return _make


@pytest.fixture
def engine(make_engine, store, sensor):
    """Fresh engine, session already started."""
    e = make_engine(store)
    e.start(sensor)
    return e
