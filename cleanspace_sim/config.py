"""
Static game configuration.

Per-action effect profiles, costs and cooldowns are plain data so they can
be tuned (and overridden in tests) without touching the calculator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping

from cleanspace_sim.models import ActionType


@dataclass(frozen=True)
class EffectProfile:
    """Per-unit pollutant deltas for one action kind."""

    pm25_per_unit: float
    no2_per_unit: float
    o3_per_unit: float
    duration_hours: float
    unit_footprint_m2: float
    radius_parameter: str  # attribute name on SimulationParameters
    verb: str
    noun: str
    radius_scale: float = 1.0


EFFECT_PROFILES: Dict[ActionType, EffectProfile] = {
    ActionType.PLANT_TREE: EffectProfile(
        -0.5, -0.2, 0.1, 24, 25, "tree_effect_radius", "Planted", "trees"
    ),
    ActionType.PLANT_ROOFTOP_GARDEN: EffectProfile(
        -0.3, -0.1, 0.05, 24, 50, "tree_effect_radius", "Installed", "rooftop gardens",
        radius_scale=0.7,
    ),
    ActionType.REMOVE_VEHICLE: EffectProfile(
        -2.0, -1.0, 0.5, 12, 20, "vehicle_effect_radius", "Removed", "vehicles"
    ),
    ActionType.SHUTDOWN_FACTORY: EffectProfile(
        -5.0, -2.0, -0.5, 48, 1000, "factory_effect_radius", "Shut down", "factories"
    ),
    ActionType.RETROFIT_FACTORY: EffectProfile(
        -2.5, -1.0, -0.25, 72, 1000, "factory_effect_radius", "Retrofitted", "factories"
    ),
    ActionType.REMOVE_CONSTRUCTION: EffectProfile(
        -3.0, -1.5, 0.2, 36, 500, "tree_effect_radius", "Removed", "construction sites"
    ),
}

# Action kinds that deliberately change nothing about air quality.
NO_EFFECT_ACTIONS: FrozenSet[ActionType] = frozenset({ActionType.RELOCATE})

DEFAULT_ACTION_COOLDOWNS: Dict[ActionType, float] = {
    ActionType.PLANT_TREE: 300,
    ActionType.PLANT_ROOFTOP_GARDEN: 600,
    ActionType.REMOVE_VEHICLE: 180,
    ActionType.SHUTDOWN_FACTORY: 1800,
    ActionType.RETROFIT_FACTORY: 3600,
    ActionType.REMOVE_CONSTRUCTION: 900,
    ActionType.RELOCATE: 60,
}

DEFAULT_ACTION_COSTS: Dict[ActionType, float] = {
    ActionType.PLANT_TREE: 10,
    ActionType.PLANT_ROOFTOP_GARDEN: 15,
    ActionType.REMOVE_VEHICLE: 5,
    ActionType.SHUTDOWN_FACTORY: 50,
    ActionType.RETROFIT_FACTORY: 100,
    ActionType.REMOVE_CONSTRUCTION: 30,
    ActionType.RELOCATE: 0,
}


@dataclass(frozen=True)
class SimulationParameters:
    tree_effect_radius: float = 200.0  # m
    vehicle_effect_radius: float = 100.0  # m
    factory_effect_radius: float = 500.0  # m
    mixing_volume: float = 1000.0  # m3
    exposure_factor: float = 1.0


@dataclass(frozen=True)
class GameConfig:
    safe_aqi_threshold: float = 50
    health_drain_rate: float = 2  # per minute in polluted air
    recovery_rate: float = 3  # per minute in safe air
    mission_time_limit: float = 24 * 60 * 60  # seconds
    action_cooldowns: Mapping[ActionType, float] = field(
        default_factory=lambda: dict(DEFAULT_ACTION_COOLDOWNS)
    )
    action_costs: Mapping[ActionType, float] = field(
        default_factory=lambda: dict(DEFAULT_ACTION_COSTS)
    )
    simulation_parameters: SimulationParameters = field(default_factory=SimulationParameters)
    effect_profiles: Mapping[ActionType, EffectProfile] = field(
        default_factory=lambda: dict(EFFECT_PROFILES)
    )
    trajectory_hours: int = 24
    trajectory_half_life_hours: float = 12.0

    def __post_init__(self) -> None:
        # Read-only: DEFAULT_GAME_CONFIG is shared across engines.
        for name in ("action_cooldowns", "action_costs", "effect_profiles"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        # Every action kind needs either a profile or an explicit no-op entry.
        uncovered = set(ActionType) - set(self.effect_profiles) - NO_EFFECT_ACTIONS
        if uncovered:
            names = sorted(a.value for a in uncovered)
            raise ValueError(f"Missing effect profiles for: {names}")
        for action_type, profile in self.effect_profiles.items():
            if profile.unit_footprint_m2 <= 0:
                raise ValueError(f"Unit footprint must be positive for {action_type.value}")
            if not hasattr(self.simulation_parameters, profile.radius_parameter):
                raise ValueError(f"Unknown radius parameter: {profile.radius_parameter}")

    def cost_of(self, action_type: ActionType) -> float:
        return float(self.action_costs.get(action_type, 0.0))

    def cooldown_of(self, action_type: ActionType) -> float:
        return float(self.action_cooldowns.get(action_type, 0.0))

    def with_overrides(self, **changes) -> "GameConfig":
        return replace(self, **changes)


DEFAULT_GAME_CONFIG = GameConfig()
