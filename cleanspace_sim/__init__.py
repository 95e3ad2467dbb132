"""
CleanSpace air quality simulation engine.
"""

from cleanspace_sim.aqi import aqi_category, compute_aqi, health_precaution
from cleanspace_sim.config import DEFAULT_GAME_CONFIG, EffectProfile, GameConfig, SimulationParameters
from cleanspace_sim.effects import compute_effect
from cleanspace_sim.engine import EnginePhase, SimulationEngine
from cleanspace_sim.health import update_health
from cleanspace_sim.models import (
    ActionEffect,
    ActionLocation,
    ActionStatus,
    ActionType,
    AirQualitySample,
    GameAction,
    GameLocation,
    PlayerState,
    SimulationState,
)
from cleanspace_sim.objectives import MissionObjective, ObjectiveTracker, ObjectiveType
from cleanspace_sim.session import GameSession, SessionStatus

__version__ = "0.1.0"

__all__ = [
    "ActionEffect",
    "ActionLocation",
    "ActionStatus",
    "ActionType",
    "AirQualitySample",
    "DEFAULT_GAME_CONFIG",
    "EffectProfile",
    "EnginePhase",
    "GameAction",
    "GameConfig",
    "GameLocation",
    "GameSession",
    "MissionObjective",
    "ObjectiveTracker",
    "ObjectiveType",
    "PlayerState",
    "SessionStatus",
    "SimulationEngine",
    "SimulationParameters",
    "SimulationState",
    "aqi_category",
    "compute_aqi",
    "compute_effect",
    "health_precaution",
    "update_health",
]
