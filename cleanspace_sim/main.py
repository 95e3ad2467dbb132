"""
Headless mission runner.

Builds a baseline for the chosen mission, then ticks the session every
--interval seconds while a greedy autopilot spends credits on whichever
available action buys the most PM2.5 reduction per credit.
"""

from __future__ import annotations

import argparse
import logging
import time
from typing import Dict, Optional

from cleanspace_sim.aqi import aqi_category
from cleanspace_sim.database import ProgressStore
from cleanspace_sim.effects import compute_effect
from cleanspace_sim.engine import SimulationEngine
from cleanspace_sim.missions import get_mission
from cleanspace_sim.models import ActionLocation, ActionType, GameAction
from cleanspace_sim.objectives import ObjectiveType
from cleanspace_sim.session import GameSession, SessionStatus
from cleanspace_sim.simulator import BaselineSimulator


# Area the autopilot targets per action (m2).
DEFAULT_AREAS: Dict[ActionType, float] = {
    ActionType.PLANT_TREE: 125.0,
    ActionType.PLANT_ROOFTOP_GARDEN: 100.0,
    ActionType.REMOVE_VEHICLE: 100.0,
    ActionType.SHUTDOWN_FACTORY: 1000.0,
    ActionType.RETROFIT_FACTORY: 1000.0,
    ActionType.REMOVE_CONSTRUCTION: 500.0,
}


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CleanSpace air quality mission simulator")
    p.add_argument("--mission", default="mission_001", help="Mission id, e.g. mission_001")
    p.add_argument("--db", default=None, help="SQLite DB path for progress (optional)")
    p.add_argument("--interval", type=float, default=1.0, help="Tick interval (seconds)")
    p.add_argument("--time-scale", type=float, default=60.0, help="Game seconds per real second")
    p.add_argument("--max-ticks", type=int, default=0, help="Stop after N ticks (0 = no limit)")
    p.add_argument("--seed", type=int, default=42, help="Random seed for the baseline")
    p.add_argument("--log-level", default="INFO", help="Logging level")
    return p.parse_args(argv)


def choose_action(session: GameSession) -> Optional[ActionType]:
    """
    Pick the available action with the best PM2.5 reduction per credit.
    """
    best = None
    best_value = 0.0
    for action_type in session.affordable_actions():
        area = DEFAULT_AREAS.get(action_type)
        if area is None:
            continue
        probe = GameAction(type=action_type, location=ActionLocation(area=area))
        reduction = -compute_effect(probe, session.config).pm25_change
        cost = max(1.0, session.config.cost_of(action_type))
        value = reduction / cost
        if value > best_value:
            best, best_value = action_type, value
    return best


def _feed_counters(session: GameSession) -> None:
    kinds = {o.type for o in session.tracker.objectives if not o.is_completed}
    if ObjectiveType.SATELLITE_DATA in kinds:
        session.record_progress(ObjectiveType.SATELLITE_DATA, 1)
    if ObjectiveType.COMMUNITY_ENGAGEMENT in kinds and session.status == SessionStatus.RUNNING:
        session.record_progress(ObjectiveType.COMMUNITY_ENGAGEMENT, 100)


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    mission = get_mission(args.mission)
    store = None
    if args.db:
        store = ProgressStore(args.db)
        store.initialize()

    scale = max(0.0, float(args.time_scale))
    session = GameSession(
        SimulationEngine(),
        mission,
        store=store,
        clock=lambda: time.monotonic() * scale,
    )

    sim = BaselineSimulator(seed=args.seed)
    baseline = sim.baseline(mission.location, hours=24)
    baseline.append(sim.sample_for_aqi(mission.baseline_aqi))
    session.start(baseline)

    logging.info("Running %s every %.1fs (x%.0f game time)", mission.id, args.interval, scale)
    ticks = 0
    try:
        while session.status == SessionStatus.RUNNING:
            action_type = choose_action(session)
            if action_type is not None:
                session.perform_action(action_type, DEFAULT_AREAS[action_type])
            if session.status == SessionStatus.RUNNING:
                _feed_counters(session)
            status = session.tick()

            aqi = session.current_sample.aqi
            logging.info(
                "AQI=%d (%s) PM2.5=%.1f ug/m3 | health=%.1f credits=%.0f | objectives %d/%d | %s",
                aqi,
                aqi_category(aqi),
                session.current_sample.pm25,
                session.player.health,
                session.player.credits,
                session.tracker.completed_count(),
                len(session.tracker.objectives),
                status.value,
            )

            ticks += 1
            if args.max_ticks and ticks >= args.max_ticks:
                break
            if status == SessionStatus.RUNNING:
                time.sleep(max(0.05, float(args.interval)))
    except KeyboardInterrupt:
        logging.info("Stopped.")

    if session.result is not None:
        logging.info("Final score: %d", session.result.score)
    else:
        logging.info("Mission ended: %s (engine score %d)", session.status.value, session.score())


if __name__ == "__main__":
    main()
