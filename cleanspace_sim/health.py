"""
Player health model.

Health and energy move together: both recover at `recovery_rate` per minute
in the safe zone and both drain at a severity-scaled rate outside it.
"""

from __future__ import annotations

from dataclasses import replace

from cleanspace_sim.config import GameConfig
from cleanspace_sim.models import PlayerState


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def is_safe(current_aqi: float, config: GameConfig) -> bool:
    return current_aqi <= config.safe_aqi_threshold


def update_health(
    player: PlayerState,
    current_aqi: float,
    elapsed_seconds: float,
    config: GameConfig,
) -> PlayerState:
    elapsed = max(0.0, float(elapsed_seconds))
    minutes = elapsed / 60.0
    in_safe_zone = is_safe(current_aqi, config)

    if in_safe_zone:
        gain = config.recovery_rate * minutes
        return replace(
            player,
            health=_clamp(player.health + gain, 0.0, 100.0),
            energy=_clamp(player.energy + gain, 0.0, 100.0),
            is_in_safe_zone=True,
        )

    drain = (current_aqi / 100.0) * config.health_drain_rate * minutes
    return replace(
        player,
        health=_clamp(player.health - drain, 0.0, 100.0),
        energy=_clamp(player.energy - drain, 0.0, 100.0),
        is_in_safe_zone=False,
        safe_time_remaining=max(0.0, player.safe_time_remaining - elapsed),
    )
