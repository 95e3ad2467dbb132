"""
Shared records for the simulation engine.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from cleanspace_sim.aqi import compute_aqi


class ActionType(str, Enum):
    """Closed set of interventions a player can request."""

    PLANT_TREE = "plant_tree"
    PLANT_ROOFTOP_GARDEN = "plant_rooftop_garden"
    REMOVE_VEHICLE = "remove_vehicle"
    SHUTDOWN_FACTORY = "shutdown_factory"
    RETROFIT_FACTORY = "retrofit_factory"
    REMOVE_CONSTRUCTION = "remove_construction"
    RELOCATE = "relocate"

    @classmethod
    def parse(cls, value: Any) -> Optional["ActionType"]:
        """Return the matching member, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


class ActionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GameLocation:
    id: str
    name: str
    latitude: float
    longitude: float
    city: str
    country: str
    region_size: float = 5.0  # km


@dataclass(frozen=True)
class AirQualitySample:
    """
    Point-in-time pollutant reading.

    `aqi` is derived from `pm25` on access, so the two can never disagree.
    """

    pm25: float  # ug/m3
    pm10: float = 0.0  # ug/m3
    no2: float = 0.0  # ppb
    o3: float = 0.0  # ppb
    co: float = 0.0  # ppm
    so2: float = 0.0  # ppb
    timestamp: datetime = field(default_factory=_utcnow)
    source: str = "simulated"

    @property
    def aqi(self) -> int:
        return compute_aqi(self.pm25)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["aqi"] = self.aqi
        return d


@dataclass(frozen=True)
class ActionLocation:
    area: float  # m2
    latitude: float = 0.0
    longitude: float = 0.0


@dataclass(frozen=True)
class GameAction:
    """
    A requested intervention. Once completed it is never modified again;
    the engine stores the completed copy in its append-only log.
    """

    type: ActionType | str
    location: ActionLocation
    cost: float = 0.0
    cooldown: float = 0.0  # seconds
    status: ActionStatus = ActionStatus.PENDING
    timestamp: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def completed(self, at: datetime) -> "GameAction":
        return replace(self, status=ActionStatus.COMPLETED, timestamp=at)


@dataclass(frozen=True)
class ActionEffect:
    pm25_change: float  # ug/m3, negative = improvement
    no2_change: float  # ppb
    o3_change: float  # ppb
    area_of_effect: float  # radius, m
    duration: float  # hours
    description: str

    @classmethod
    def none(cls) -> "ActionEffect":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, "No effect")


@dataclass
class HealthImpact:
    current_exposure: float
    safe_threshold: float
    recovery_rate: float


@dataclass
class SimulationState:
    current_aqi: int
    baseline_aqi: int
    target_aqi: float
    time_remaining: float  # seconds
    health_impact: HealthImpact
    actions_applied: List[GameAction] = field(default_factory=list)
    predicted_trajectory: List[AirQualitySample] = field(default_factory=list)

    def snapshot(self) -> "SimulationState":
        """Copy that callers may hold on to without seeing later mutations."""
        return replace(
            self,
            health_impact=replace(self.health_impact),
            actions_applied=list(self.actions_applied),
            predicted_trajectory=list(self.predicted_trajectory),
        )


@dataclass(frozen=True)
class PlayerState:
    health: float = 100.0  # 0..100
    energy: float = 100.0  # 0..100
    credits: float = 100.0
    safe_time_remaining: float = 300.0  # seconds
    is_in_safe_zone: bool = False
    id: str = "player"
    location: Optional[GameLocation] = None
