"""
Headless runner tests.
"""

from cleanspace_sim.database import ProgressStore
from cleanspace_sim.engine import SimulationEngine
from cleanspace_sim.main import choose_action, main, parse_args
from cleanspace_sim.missions import get_mission
from cleanspace_sim.models import ActionType
from cleanspace_sim.session import GameSession

from conftest import sample_at_aqi


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.mission == "mission_001"
        assert args.db is None
        assert args.time_scale == 60.0
        assert args.max_ticks == 0

    def test_overrides(self):
        args = parse_args(["--mission", "mission_002", "--max-ticks", "3", "--seed", "9"])
        assert args.mission == "mission_002"
        assert args.max_ticks == 3
        assert args.seed == 9


class TestChooseAction:
    def test_prefers_cheapest_reduction(self, config, clock):
        session = GameSession(SimulationEngine(config), get_mission("mission_001"), clock=clock)
        session.start([sample_at_aqi(120)])
        assert choose_action(session) == ActionType.REMOVE_VEHICLE

    def test_skips_actions_on_cooldown(self, config, clock):
        session = GameSession(SimulationEngine(config), get_mission("mission_001"), clock=clock)
        session.start([sample_at_aqi(120)])
        session.perform_action(ActionType.REMOVE_VEHICLE, 100)
        assert choose_action(session) == ActionType.PLANT_TREE


class TestMain:
    def test_single_tick_run(self, tmp_path):
        db = tmp_path / "run.db"
        main(["--max-ticks", "1", "--log-level", "WARNING", "--db", str(db)])

        assert db.exists()
        assert ProgressStore(str(db)).fetch_results() == []
