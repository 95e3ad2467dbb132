"""
Session controller for one mission run.

The session is the caller the engine expects: it validates credits and
cooldowns before handing an action to the engine, drives the per-tick
update order, and feeds the objective tracker.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from cleanspace_sim.database import ProgressStore
from cleanspace_sim.effects import compute_effect
from cleanspace_sim.engine import SimulationEngine
from cleanspace_sim.missions import (
    MissionLevel,
    MissionResult,
    UserProgress,
    build_result,
    is_unlocked,
)
from cleanspace_sim.models import (
    ActionEffect,
    ActionLocation,
    ActionType,
    AirQualitySample,
    GameAction,
    PlayerState,
    SimulationState,
)
from cleanspace_sim.objectives import MissionObjective, ObjectiveTracker, ObjectiveType


logger = logging.getLogger(__name__)


class InsufficientCreditsError(ValueError):
    pass


class ActionOnCooldownError(ValueError):
    pass


class MissionLockedError(ValueError):
    pass


class SessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class CooldownTracker:
    def __init__(self) -> None:
        self._remaining: Dict[ActionType, float] = {}

    def start(self, action_type: ActionType, seconds: float) -> None:
        if seconds > 0:
            self._remaining[action_type] = float(seconds)

    def remaining(self, action_type: ActionType) -> float:
        return self._remaining.get(action_type, 0.0)

    def is_ready(self, action_type: ActionType) -> bool:
        return self.remaining(action_type) <= 0

    def tick(self, elapsed_seconds: float) -> None:
        elapsed = max(0.0, float(elapsed_seconds))
        for key, left in list(self._remaining.items()):
            self._remaining[key] = max(0.0, left - elapsed)

    def clear(self) -> None:
        self._remaining.clear()


@dataclass(frozen=True)
class ActionOutcome:
    action: GameAction
    effect: ActionEffect
    sample: AirQualitySample
    completed_objectives: List[MissionObjective]


class GameSession:
    """
    Owns one engine, one player and one objective tracker for a mission.
    Not thread-safe; serialize calls from event handlers.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        mission: MissionLevel,
        *,
        store: Optional[ProgressStore] = None,
        progress: Optional[UserProgress] = None,
        clock: Callable[[], float] = time.monotonic,
        player_id: str = "player",
    ) -> None:
        self.engine = engine
        self.config = engine.config
        self.mission = mission
        self.store = store
        self.progress = progress
        self.player_id = player_id
        self._clock = clock

        self.status = SessionStatus.IDLE
        self.player = PlayerState(id=player_id, location=mission.location)
        self.tracker = ObjectiveTracker(mission.objectives)
        self.cooldowns = CooldownTracker()
        self.current_sample: Optional[AirQualitySample] = None
        self.result: Optional[MissionResult] = None
        self.elapsed_seconds = 0.0
        self.credits_spent = 0.0
        self._last_tick = 0.0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, baseline_samples: Sequence[AirQualitySample]) -> None:
        if self.progress is None:
            self.progress = self.store.load_progress(self.player_id) if self.store else UserProgress()
        if not is_unlocked(self.mission, self.progress):
            raise MissionLockedError(f"Mission {self.mission.id} is locked")
        if not baseline_samples:
            raise ValueError("Baseline samples are required to start a mission")

        target = self.mission.target_aqi
        if target is None:
            target = self.config.safe_aqi_threshold
        time_limit = self.mission.time_limit_seconds

        self.engine.initialize(
            baseline_samples, self.mission.location, target_aqi=target, time_limit=time_limit
        )
        self.current_sample = baseline_samples[-1]
        self.player = PlayerState(
            id=self.player_id,
            credits=float(self.mission.initial_credits),
            safe_time_remaining=time_limit,
            location=self.mission.location,
        )
        self.tracker = ObjectiveTracker(self.mission.objectives)
        self.tracker.record_aqi(self.current_sample.aqi)
        self.cooldowns.clear()
        self.result = None
        self.elapsed_seconds = 0.0
        self.credits_spent = 0.0
        self._last_tick = self._clock()
        self.status = SessionStatus.RUNNING

        logger.info(
            "Starting mission %s: %s (%s, %s)",
            self.mission.id,
            self.mission.title,
            self.mission.location.city,
            self.mission.location.country,
        )

    def _require_running(self) -> None:
        if self.status != SessionStatus.RUNNING:
            raise RuntimeError(f"Session is {self.status.value}, not running")

    # ------------------------------------------------------------------
    # Player input
    # ------------------------------------------------------------------

    def perform_action(
        self,
        action_type: ActionType | str,
        area: float,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> ActionOutcome:
        self._require_running()
        parsed = ActionType.parse(action_type)
        if parsed is None:
            raise ValueError(f"Unknown action type: {action_type}")

        cost = self.config.cost_of(parsed)
        if self.player.credits < cost:
            raise InsufficientCreditsError(
                f"{parsed.value} costs {cost:g} credits, only {self.player.credits:g} left"
            )
        if not self.cooldowns.is_ready(parsed):
            raise ActionOnCooldownError(
                f"{parsed.value} is cooling down ({self.cooldowns.remaining(parsed):.0f}s left)"
            )

        location = self.mission.location
        action = GameAction(
            type=parsed,
            location=ActionLocation(
                area=float(area),
                latitude=location.latitude if latitude is None else latitude,
                longitude=location.longitude if longitude is None else longitude,
            ),
            cost=cost,
            cooldown=self.config.cooldown_of(parsed),
        )
        effect = compute_effect(action, self.config)
        new_sample = self.engine.apply_action(action, self.current_sample)

        self.current_sample = new_sample
        self.player = replace(self.player, credits=self.player.credits - cost)
        self.credits_spent += cost
        self.cooldowns.start(parsed, action.cooldown)

        done = self.tracker.record_action(parsed)
        done += self.tracker.record_aqi(new_sample.aqi)
        self._update_status()
        return ActionOutcome(self.engine.actions_applied[-1], effect, new_sample, done)

    def record_progress(self, objective_type: ObjectiveType, amount: float = 1) -> List[MissionObjective]:
        """Feed non-action counters (satellite data reviewed, residents reached)."""
        self._require_running()
        done = self.tracker.record(objective_type, amount)
        self._update_status()
        return done

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self, elapsed_seconds: Optional[float] = None) -> SessionStatus:
        """
        One timer step: clock, health, cooldowns, then outcome. Without an
        explicit delta the wall-clock time since the previous tick is used.
        """
        if self.status != SessionStatus.RUNNING:
            return self.status

        now = self._clock()
        if elapsed_seconds is None:
            elapsed_seconds = now - self._last_tick
        self._last_tick = now
        elapsed = max(0.0, float(elapsed_seconds))

        self.engine.update_time(elapsed)
        self.elapsed_seconds += elapsed
        self.player = self.engine.update_player_health(self.player, elapsed)
        self.cooldowns.tick(elapsed)

        logger.debug(
            "tick +%.2fs AQI=%d health=%.1f time_left=%.0fs",
            elapsed,
            self.engine.current_aqi,
            self.player.health,
            self.engine.time_remaining,
        )
        return self._update_status()

    def _update_status(self) -> SessionStatus:
        self.tracker.evaluate_constraints(self.elapsed_seconds, self.credits_spent)

        # Completion wins over a simultaneous time-out.
        if self.tracker.is_complete():
            self._complete()
        elif self.engine.is_mission_failed() or self.player.health <= 0:
            self.status = SessionStatus.FAILED
            logger.info(
                "Mission %s failed (time left %.0fs, health %.1f)",
                self.mission.id,
                self.engine.time_remaining,
                self.player.health,
            )
        return self.status

    def _complete(self) -> None:
        self.status = SessionStatus.COMPLETED
        self.result = build_result(
            self.mission,
            objective_points=self.tracker.points_earned(),
            objectives_completed=self.tracker.completed_count(),
            completion_seconds=self.elapsed_seconds,
            final_health=self.player.health,
            aqi_improvement=self.engine.baseline_aqi - self.engine.current_aqi,
        )
        self.progress = self.progress.with_result(self.mission, self.result)
        if self.store is not None:
            self.store.record_result(self.result)
            self.store.save_progress(self.progress, self.player_id)
        logger.info(
            "Mission %s completed! Score: %d (bonus %d) in %ds",
            self.mission.id,
            self.result.score,
            self.result.bonus_points,
            self.result.completion_time,
        )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> SimulationState:
        return self.engine.state

    def score(self) -> int:
        return self.engine.calculate_score()

    def affordable_actions(self) -> List[ActionType]:
        return [
            a
            for a in ActionType
            if self.config.cost_of(a) <= self.player.credits and self.cooldowns.is_ready(a)
        ]
