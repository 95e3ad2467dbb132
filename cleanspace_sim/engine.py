"""
Air quality simulation engine.

Owns the live SimulationState for one mission. Pollutant state changes only
through `apply_action`; the mission clock only through `update_time`.

Lifecycle: UNINITIALIZED -> RUNNING -> COMPLETED | FAILED. The engine never
halts itself; callers stop ticking once `phase` is terminal.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence

from cleanspace_sim.aqi import round_half_up
from cleanspace_sim.config import DEFAULT_GAME_CONFIG, GameConfig
from cleanspace_sim.effects import compute_effect
from cleanspace_sim.forecast import predict_trajectory
from cleanspace_sim.health import update_health
from cleanspace_sim.models import (
    AirQualitySample,
    GameAction,
    GameLocation,
    HealthImpact,
    PlayerState,
    SimulationState,
)


logger = logging.getLogger(__name__)


class EnginePhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SimulationEngine:
    """
    Single-session engine. Not thread-safe: concurrent callers must serialize
    `apply_action` calls themselves.
    """

    def __init__(self, config: Optional[GameConfig] = None) -> None:
        self.config = config or DEFAULT_GAME_CONFIG
        self._initialized = False
        self.location: Optional[GameLocation] = None
        self._state = self._fresh_state()

    def _fresh_state(self) -> SimulationState:
        return SimulationState(
            current_aqi=0,
            baseline_aqi=0,
            target_aqi=self.config.safe_aqi_threshold,
            time_remaining=self.config.mission_time_limit,
            health_impact=HealthImpact(
                current_exposure=0.0,
                safe_threshold=self.config.safe_aqi_threshold,
                recovery_rate=self.config.recovery_rate,
            ),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        baseline_samples: Sequence[AirQualitySample],
        location: Optional[GameLocation] = None,
        *,
        target_aqi: Optional[float] = None,
        time_limit: Optional[float] = None,
    ) -> None:
        """
        Start a mission from the most recent baseline sample. An empty list is
        ignored and leaves the engine uninitialized.
        """
        if not baseline_samples:
            logger.debug("initialize() called without baseline samples; ignoring")
            return

        self.reset()
        latest = baseline_samples[-1]
        state = self._state
        state.baseline_aqi = latest.aqi
        state.current_aqi = latest.aqi
        state.predicted_trajectory = list(baseline_samples)
        if target_aqi is not None:
            state.target_aqi = target_aqi
        if time_limit is not None:
            state.time_remaining = max(0.0, float(time_limit))
        self.location = location
        self._initialized = True

        logger.info(
            "Simulation initialized: baseline AQI=%d target AQI=%s time=%.0fs",
            state.baseline_aqi,
            state.target_aqi,
            state.time_remaining,
        )

    def reset(self) -> None:
        self._state = self._fresh_state()
        self.location = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def state(self) -> SimulationState:
        return self._state.snapshot()

    @property
    def actions_applied(self) -> List[GameAction]:
        return list(self._state.actions_applied)

    @property
    def baseline_aqi(self) -> int:
        return self._state.baseline_aqi

    @property
    def current_aqi(self) -> int:
        return self._state.current_aqi

    @property
    def time_remaining(self) -> float:
        return self._state.time_remaining

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def apply_action(
        self,
        action: GameAction,
        current_sample: AirQualitySample,
        *,
        now_utc: Optional[datetime] = None,
    ) -> AirQualitySample:
        """
        Apply one action's effect to `current_sample` and return the new sample.

        Pollutants are floored at zero. The completed action is appended to the
        log and the forecast refreshed; all fields are computed before any of
        them is written.
        """
        if now_utc is None:
            now_utc = datetime.now(timezone.utc)

        effect = compute_effect(action, self.config)
        new_sample = replace(
            current_sample,
            pm25=max(0.0, current_sample.pm25 + effect.pm25_change),
            no2=max(0.0, current_sample.no2 + effect.no2_change),
            o3=max(0.0, current_sample.o3 + effect.o3_change),
            timestamp=now_utc,
            source="simulated",
        )
        completed = action.completed(now_utc)
        actions = self._state.actions_applied + [completed]
        trajectory = self._forecast(new_sample, actions, self.config.trajectory_hours)

        self._state.actions_applied = actions
        self._state.current_aqi = new_sample.aqi
        self._state.predicted_trajectory = trajectory

        logger.info(
            "Applied %s: %s (AQI %d -> %d)",
            getattr(completed.type, "value", completed.type),
            effect.description,
            current_sample.aqi,
            new_sample.aqi,
        )
        return new_sample

    def update_time(self, elapsed_seconds: float) -> None:
        """Advance the mission clock by the real elapsed delta."""
        elapsed = max(0.0, float(elapsed_seconds))
        self._state.time_remaining = max(0.0, self._state.time_remaining - elapsed)

    def update_player_health(self, player: PlayerState, elapsed_seconds: float) -> PlayerState:
        current_aqi = self._state.current_aqi
        self._state.health_impact.current_exposure = (
            current_aqi * self.config.simulation_parameters.exposure_factor
        )
        return update_health(player, current_aqi, elapsed_seconds, self.config)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_mission_completed(self) -> bool:
        return self._state.current_aqi <= self._state.target_aqi

    def is_mission_failed(self) -> bool:
        return self._state.time_remaining <= 0

    @property
    def phase(self) -> EnginePhase:
        # Reaching the target on the final tick counts as a win.
        if not self._initialized:
            return EnginePhase.UNINITIALIZED
        if self.is_mission_completed():
            return EnginePhase.COMPLETED
        if self.is_mission_failed():
            return EnginePhase.FAILED
        return EnginePhase.RUNNING

    def predict_trajectory(
        self, current_sample: AirQualitySample, hours: Optional[int] = None
    ) -> List[AirQualitySample]:
        if hours is None:
            hours = self.config.trajectory_hours
        return self._forecast(current_sample, self._state.actions_applied, hours)

    def _forecast(
        self, sample: AirQualitySample, actions: Sequence[GameAction], hours: int
    ) -> List[AirQualitySample]:
        effects = [compute_effect(a, self.config) for a in actions]
        return predict_trajectory(
            sample,
            effects,
            hours=hours,
            half_life_hours=self.config.trajectory_half_life_hours,
        )

    def calculate_score(self) -> int:
        state = self._state
        aqi_improvement = state.baseline_aqi - state.current_aqi
        time_bonus = state.time_remaining / 60
        action_count = len(state.actions_applied)
        efficiency = aqi_improvement / action_count if action_count > 0 else 0
        return max(0, round_half_up(aqi_improvement * 10 + time_bonus + efficiency * 5))
