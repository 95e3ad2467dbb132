"""
Shared fixtures for the simulation engine tests.
"""

from datetime import datetime, timezone

import pytest

from cleanspace_sim.aqi import pm25_for_aqi
from cleanspace_sim.config import GameConfig
from cleanspace_sim.engine import SimulationEngine
from cleanspace_sim.models import ActionLocation, ActionType, AirQualitySample, GameAction


FIXED_NOW = datetime(2024, 10, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_action(action_type, area: float) -> GameAction:
    return GameAction(type=action_type, location=ActionLocation(area=area), timestamp=FIXED_NOW)


def sample_at_aqi(aqi: float, **pollutants) -> AirQualitySample:
    return AirQualitySample(pm25=pm25_for_aqi(aqi), timestamp=FIXED_NOW, **pollutants)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def no_cooldown_config():
    return GameConfig(action_cooldowns={a: 0 for a in ActionType})


@pytest.fixture
def engine(config):
    return SimulationEngine(config)


@pytest.fixture
def sample():
    """Baseline reading at PM2.5 = 40 ug/m3 (AQI 112)."""
    return AirQualitySample(
        pm25=40.0,
        pm10=60.0,
        no2=30.0,
        o3=40.0,
        co=1.5,
        so2=8.0,
        timestamp=FIXED_NOW,
        source="merra2",
    )


@pytest.fixture
def clock():
    return FakeClock()
