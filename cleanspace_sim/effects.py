"""
Action effect calculator.

Maps a (GameAction, GameConfig) pair to the pollutant deltas it causes.
Each action kind covers an area in whole "units" (one tree per 25 m2, one
factory per 1000 m2, ...) and every unit contributes the fixed per-unit
deltas from its EffectProfile.
"""

from __future__ import annotations

import math

from cleanspace_sim.config import GameConfig
from cleanspace_sim.models import ActionEffect, ActionType, GameAction


def unit_count(area_m2: float, footprint_m2: float) -> int:
    if not math.isfinite(area_m2) or area_m2 <= 0:
        return 0
    return int(math.floor(area_m2 / footprint_m2))


def compute_effect(action: GameAction, config: GameConfig) -> ActionEffect:
    """
    Pure: the same (action, config) always yields an equal ActionEffect.

    Unknown action types and kinds without a profile (relocate) produce the
    zero effect instead of an error.
    """
    action_type = ActionType.parse(action.type)
    if action_type is None:
        return ActionEffect.none()
    profile = config.effect_profiles.get(action_type)
    if profile is None:
        return ActionEffect.none()

    units = unit_count(action.location.area, profile.unit_footprint_m2)
    pm25_change = profile.pm25_per_unit * units
    radius = getattr(config.simulation_parameters, profile.radius_parameter) * profile.radius_scale

    return ActionEffect(
        pm25_change=pm25_change,
        no2_change=profile.no2_per_unit * units,
        o3_change=profile.o3_per_unit * units,
        area_of_effect=radius,
        duration=profile.duration_hours,
        description=(
            f"{profile.verb} {units} {profile.noun}, "
            f"reducing PM2.5 by {abs(pm25_change):.1f} µg/m³"
        ),
    )
