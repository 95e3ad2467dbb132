"""
Mission catalog, unlock rules and player progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from cleanspace_sim.aqi import round_half_up
from cleanspace_sim.models import GameLocation
from cleanspace_sim.objectives import MissionObjective, ObjectiveType


TIME_BONUS = 500
HEALTH_BONUS = 200
HEALTH_BONUS_THRESHOLD = 80
XP_PER_LEVEL = 1000
IMPROVEMENT_POINTS_PER_AQI = 10


@dataclass(frozen=True)
class UnlockRequirements:
    previous_level: Optional[str] = None
    total_score: int = 0
    achievements_required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MissionRewards:
    credits: int
    xp: int
    achievements: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MissionLevel:
    id: str
    level: int
    title: str
    location: GameLocation
    difficulty: str
    estimated_time: int  # minutes
    initial_credits: float
    baseline_aqi: int
    objectives: Tuple[MissionObjective, ...]
    rewards: MissionRewards
    unlock_requirements: UnlockRequirements = field(default_factory=UnlockRequirements)

    @property
    def time_limit_seconds(self) -> float:
        return self.estimated_time * 60.0

    @property
    def target_aqi(self) -> Optional[float]:
        for o in self.objectives:
            if o.type == ObjectiveType.REDUCE_AQI:
                return o.target
        return None

    @property
    def total_points(self) -> int:
        return sum(o.points for o in self.objectives)


def _obj(objective_id: str, kind: ObjectiveType, target: float, description: str, points: int) -> MissionObjective:
    return MissionObjective(id=objective_id, type=kind, target=target, description=description, points=points)


MISSIONS: Tuple[MissionLevel, ...] = (
    MissionLevel(
        id="mission_001",
        level=1,
        title="First Steps to Clean Air",
        location=GameLocation("nyc_training", "New York City", 40.7128, -74.006, "New York", "USA", 3),
        difficulty="beginner",
        estimated_time=15,
        initial_credits=500,
        baseline_aqi=120,
        objectives=(
            _obj("obj_001_1", ObjectiveType.REDUCE_AQI, 80, "Reduce AQI from 120 to 80 or below", 100),
            _obj("obj_001_2", ObjectiveType.PLANT_TREES, 5, "Plant 5 trees in the city", 50),
        ),
        rewards=MissionRewards(200, 100, ("first_mission", "tree_planter")),
    ),
    MissionLevel(
        id="mission_002",
        level=2,
        title="Smog City Challenge",
        location=GameLocation("la_smog", "Los Angeles", 34.0522, -118.2437, "Los Angeles", "USA", 4),
        difficulty="beginner",
        estimated_time=20,
        initial_credits=600,
        baseline_aqi=140,
        objectives=(
            _obj("obj_002_1", ObjectiveType.REDUCE_AQI, 75, "Reduce AQI from 140 to 75", 150),
            _obj("obj_002_2", ObjectiveType.REMOVE_POLLUTION, 3, "Remove 3 major pollution sources", 100),
            _obj("obj_002_3", ObjectiveType.TIME_LIMIT, 1200, "Complete the mission within 20 minutes", 75),
        ),
        rewards=MissionRewards(300, 150, ("smog_fighter", "tempo_user")),
        unlock_requirements=UnlockRequirements(previous_level="mission_001"),
    ),
    MissionLevel(
        id="mission_003",
        level=3,
        title="Wildfire Smoke Response",
        location=GameLocation(
            "california_fires", "Northern California", 38.5816, -121.4944, "Sacramento", "USA", 6
        ),
        difficulty="intermediate",
        estimated_time=25,
        initial_credits=800,
        baseline_aqi=160,
        objectives=(
            _obj("obj_003_1", ObjectiveType.SATELLITE_DATA, 5, "Analyze 5 MODIS fire detection points", 100),
            _obj(
                "obj_003_2",
                ObjectiveType.COMMUNITY_ENGAGEMENT,
                1000,
                "Protect 1000+ residents from smoke exposure",
                200,
            ),
            _obj("obj_003_3", ObjectiveType.REDUCE_AQI, 100, "Maintain AQI below 100 in safe zones", 150),
        ),
        rewards=MissionRewards(400, 200, ("fire_responder", "community_protector")),
        unlock_requirements=UnlockRequirements(previous_level="mission_002"),
    ),
    MissionLevel(
        id="mission_004",
        level=4,
        title="Global Pollution Detective",
        location=GameLocation("delhi_crisis", "Delhi", 28.6139, 77.209, "Delhi", "India", 5),
        difficulty="intermediate",
        estimated_time=30,
        initial_credits=1000,
        baseline_aqi=300,
        objectives=(
            _obj("obj_004_1", ObjectiveType.REDUCE_AQI, 150, "Reduce AQI from 300+ to 150", 250),
            _obj(
                "obj_004_2",
                ObjectiveType.SATELLITE_DATA,
                10,
                "Analyze crop burning hotspots using MODIS data",
                150,
            ),
            _obj(
                "obj_004_3",
                ObjectiveType.BUDGET_LIMIT,
                1200,
                "Complete mission within budget of 1200 credits",
                100,
            ),
        ),
        rewards=MissionRewards(500, 300, ("global_guardian", "budget_master")),
        unlock_requirements=UnlockRequirements(previous_level="mission_003", total_score=500),
    ),
    MissionLevel(
        id="mission_005",
        level=5,
        title="Industrial Transformation",
        location=GameLocation(
            "beijing_industrial", "Beijing Industrial Zone", 39.9042, 116.4074, "Beijing", "China", 4
        ),
        difficulty="intermediate",
        estimated_time=35,
        initial_credits=1200,
        baseline_aqi=180,
        objectives=(
            _obj("obj_005_1", ObjectiveType.REDUCE_AQI, 100, "Achieve 'Moderate' AQI (<=100) in industrial zone", 300),
            _obj("obj_005_2", ObjectiveType.REMOVE_POLLUTION, 8, "Retrofit or shutdown 8 polluting facilities", 200),
            _obj(
                "obj_005_3",
                ObjectiveType.SATELLITE_DATA,
                15,
                "Use 15 different satellite measurements for analysis",
                150,
            ),
        ),
        rewards=MissionRewards(600, 400, ("industrial_reformer", "satellite_expert")),
        unlock_requirements=UnlockRequirements(
            previous_level="mission_004", achievements_required=("global_guardian",)
        ),
    ),
)

_BY_ID: Dict[str, MissionLevel] = {m.id: m for m in MISSIONS}


def get_mission(mission_id: str) -> MissionLevel:
    try:
        return _BY_ID[mission_id]
    except KeyError:
        raise KeyError(f"Unknown mission: {mission_id}") from None


@dataclass(frozen=True)
class UserProgress:
    completed_missions: Tuple[str, ...] = ()
    total_score: int = 0
    unlocked_achievements: Tuple[str, ...] = ()
    total_xp: int = 0

    @property
    def level(self) -> int:
        return self.total_xp // XP_PER_LEVEL + 1

    def with_result(self, mission: MissionLevel, result: "MissionResult") -> "UserProgress":
        completed = self.completed_missions
        if mission.id not in completed:
            completed = completed + (mission.id,)
        achievements = self.unlocked_achievements + tuple(
            a for a in mission.rewards.achievements if a not in self.unlocked_achievements
        )
        return replace(
            self,
            completed_missions=completed,
            total_score=self.total_score + result.score,
            unlocked_achievements=achievements,
            total_xp=self.total_xp + mission.rewards.xp,
        )


def is_unlocked(mission: MissionLevel, progress: UserProgress) -> bool:
    req = mission.unlock_requirements
    unlocked = mission.level == 1
    if req.previous_level:
        unlocked = req.previous_level in progress.completed_missions
    if req.total_score:
        unlocked = unlocked and progress.total_score >= req.total_score
    if req.achievements_required:
        unlocked = unlocked and all(a in progress.unlocked_achievements for a in req.achievements_required)
    return unlocked


@dataclass(frozen=True)
class MissionResult:
    mission_id: str
    score: int
    completion_time: int  # seconds
    objectives_completed: int
    total_objectives: int
    bonus_points: int


def build_result(
    mission: MissionLevel,
    *,
    objective_points: int,
    objectives_completed: int,
    completion_seconds: float,
    final_health: float,
    aqi_improvement: float = 0,
) -> MissionResult:
    """
    Score = objective points + AQI points gained by actions + time and health bonuses.
    A run that ends dirtier than it started earns no improvement points.
    """
    time_bonus = TIME_BONUS if completion_seconds < mission.time_limit_seconds else 0
    health_bonus = HEALTH_BONUS if final_health > HEALTH_BONUS_THRESHOLD else 0
    bonus = time_bonus + health_bonus
    improvement = max(0, round_half_up(aqi_improvement)) * IMPROVEMENT_POINTS_PER_AQI
    return MissionResult(
        mission_id=mission.id,
        score=int(objective_points + improvement + bonus),
        completion_time=int(round(completion_seconds)),
        objectives_completed=objectives_completed,
        total_objectives=len(mission.objectives),
        bonus_points=bonus,
    )
