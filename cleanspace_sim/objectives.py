"""
Mission objective tracking.

Counter objectives advance as actions land, AQI objectives follow the latest
index, and constraint objectives (time, budget) are judged once every other
objective is done. Completion is one-way: nothing here clears `is_completed`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from cleanspace_sim.models import ActionType


logger = logging.getLogger(__name__)


class ObjectiveType(str, Enum):
    REDUCE_AQI = "reduce_aqi"
    PLANT_TREES = "plant_trees"
    REMOVE_POLLUTION = "remove_pollution"
    TIME_LIMIT = "time_limit"
    BUDGET_LIMIT = "budget_limit"
    SATELLITE_DATA = "satellite_data"
    COMMUNITY_ENGAGEMENT = "community_engagement"


COUNTER_OBJECTIVES: FrozenSet[ObjectiveType] = frozenset(
    {
        ObjectiveType.PLANT_TREES,
        ObjectiveType.REMOVE_POLLUTION,
        ObjectiveType.SATELLITE_DATA,
        ObjectiveType.COMMUNITY_ENGAGEMENT,
    }
)
CONSTRAINT_OBJECTIVES: FrozenSet[ObjectiveType] = frozenset(
    {ObjectiveType.TIME_LIMIT, ObjectiveType.BUDGET_LIMIT}
)

ACTION_OBJECTIVES: Dict[ActionType, ObjectiveType] = {
    ActionType.PLANT_TREE: ObjectiveType.PLANT_TREES,
    ActionType.PLANT_ROOFTOP_GARDEN: ObjectiveType.PLANT_TREES,
    ActionType.REMOVE_VEHICLE: ObjectiveType.REMOVE_POLLUTION,
    ActionType.SHUTDOWN_FACTORY: ObjectiveType.REMOVE_POLLUTION,
    ActionType.RETROFIT_FACTORY: ObjectiveType.REMOVE_POLLUTION,
    ActionType.REMOVE_CONSTRUCTION: ObjectiveType.REMOVE_POLLUTION,
}


@dataclass
class MissionObjective:
    id: str
    type: ObjectiveType
    target: float
    description: str
    points: int
    current: float = 0
    is_completed: bool = False

    def _complete(self) -> bool:
        """Mark done; True only on the first call."""
        if self.is_completed:
            return False
        self.is_completed = True
        logger.info("Objective completed: %s (+%d pts)", self.description, self.points)
        return True


class ObjectiveTracker:
    """
    Holds a mission's objectives for one run. Objective definitions are copied
    so the catalog entries are never mutated.
    """

    def __init__(self, objectives: Iterable[MissionObjective]) -> None:
        self.objectives: List[MissionObjective] = [
            MissionObjective(
                id=o.id,
                type=ObjectiveType(o.type),
                target=o.target,
                description=o.description,
                points=o.points,
            )
            for o in objectives
        ]

    def _of_type(self, objective_type: ObjectiveType) -> List[MissionObjective]:
        return [o for o in self.objectives if o.type == objective_type]

    def record(self, objective_type: ObjectiveType, amount: float = 1) -> List[MissionObjective]:
        """
        Advance counter objectives of `objective_type`. Returns the objectives
        completed by this update.
        """
        objective_type = ObjectiveType(objective_type)
        if objective_type not in COUNTER_OBJECTIVES:
            raise ValueError(f"{objective_type.value} is not a counter objective")
        newly_done = []
        for o in self._of_type(objective_type):
            if o.is_completed:
                continue
            o.current = min(o.current + amount, o.target)
            if o.current >= o.target and o._complete():
                newly_done.append(o)
        return newly_done

    def record_action(self, action_type: ActionType | str) -> List[MissionObjective]:
        parsed = ActionType.parse(action_type)
        objective_type = ACTION_OBJECTIVES.get(parsed) if parsed is not None else None
        if objective_type is None:
            return []
        return self.record(objective_type, 1)

    def record_aqi(self, aqi: float) -> List[MissionObjective]:
        newly_done = []
        for o in self._of_type(ObjectiveType.REDUCE_AQI):
            if o.is_completed:
                continue
            o.current = aqi
            if aqi <= o.target and o._complete():
                newly_done.append(o)
        return newly_done

    def goals_complete(self) -> bool:
        return all(o.is_completed for o in self.objectives if o.type not in CONSTRAINT_OBJECTIVES)

    def evaluate_constraints(
        self, elapsed_seconds: float, credits_spent: float
    ) -> List[MissionObjective]:
        if not self.goals_complete():
            return []
        newly_done = []
        for o in self.objectives:
            if o.is_completed or o.type not in CONSTRAINT_OBJECTIVES:
                continue
            value = elapsed_seconds if o.type == ObjectiveType.TIME_LIMIT else credits_spent
            o.current = value
            if value <= o.target and o._complete():
                newly_done.append(o)
        return newly_done

    def is_complete(self) -> bool:
        return bool(self.objectives) and all(o.is_completed for o in self.objectives)

    def completed_count(self) -> int:
        return sum(1 for o in self.objectives if o.is_completed)

    def points_earned(self) -> int:
        return sum(o.points for o in self.objectives if o.is_completed)

    def get(self, objective_id: str) -> Optional[MissionObjective]:
        for o in self.objectives:
            if o.id == objective_id:
                return o
        return None
