"""
Game session tests: gating, tick order, objectives and mission outcome.
"""

import pytest

from cleanspace_sim.config import GameConfig
from cleanspace_sim.database import ProgressStore
from cleanspace_sim.engine import SimulationEngine
from cleanspace_sim.missions import UserProgress, get_mission
from cleanspace_sim.models import ActionType
from cleanspace_sim.objectives import ObjectiveType
from cleanspace_sim.session import (
    ActionOnCooldownError,
    CooldownTracker,
    GameSession,
    InsufficientCreditsError,
    MissionLockedError,
    SessionStatus,
)

from conftest import sample_at_aqi


def _session(config, mission_id="mission_001", **kwargs):
    mission = get_mission(mission_id)
    session = GameSession(SimulationEngine(config), mission, **kwargs)
    return session, mission


@pytest.fixture
def store(tmp_path):
    s = ProgressStore(str(tmp_path / "session.db"))
    s.initialize()
    return s


# =============================================================================
# Cooldowns
# =============================================================================


class TestCooldownTracker:
    def test_start_tick_ready(self):
        cd = CooldownTracker()
        cd.start(ActionType.PLANT_TREE, 300)
        assert not cd.is_ready(ActionType.PLANT_TREE)
        cd.tick(200)
        assert cd.remaining(ActionType.PLANT_TREE) == 100
        cd.tick(500)
        assert cd.is_ready(ActionType.PLANT_TREE)

    def test_zero_cooldown_is_ready(self):
        cd = CooldownTracker()
        cd.start(ActionType.RELOCATE, 0)
        assert cd.is_ready(ActionType.RELOCATE)


# =============================================================================
# Start
# =============================================================================


class TestStart:
    def test_player_reset_to_mission(self, config, clock):
        session, mission = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])

        assert session.status == SessionStatus.RUNNING
        assert session.player.credits == 500
        assert session.player.safe_time_remaining == 900
        assert session.state.target_aqi == 80
        assert session.state.time_remaining == 900
        assert session.tracker.get("obj_001_1").current == 120

    def test_locked_mission(self, config):
        session, _ = _session(config, "mission_002")
        with pytest.raises(MissionLockedError):
            session.start([sample_at_aqi(140)])
        assert session.status == SessionStatus.IDLE

    def test_empty_baseline(self, config):
        session, _ = _session(config)
        with pytest.raises(ValueError):
            session.start([])

    def test_progress_loaded_from_store(self, config, store):
        store.save_progress(UserProgress(completed_missions=("mission_001",)))
        session, _ = _session(config, "mission_002", store=store)
        session.start([sample_at_aqi(140)])
        assert session.status == SessionStatus.RUNNING


# =============================================================================
# Actions
# =============================================================================


class TestPerformAction:
    def test_deducts_credits_and_updates_sample(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])
        before = session.current_sample.pm25

        outcome = session.perform_action(ActionType.PLANT_TREE, 100)

        assert session.player.credits == 490
        assert session.credits_spent == 10
        assert outcome.sample.pm25 == pytest.approx(before - 2.0)
        assert outcome.effect.pm25_change == pytest.approx(-2.0)
        assert outcome.action.cost == 10
        assert session.tracker.get("obj_001_2").current == 1
        assert len(session.state.actions_applied) == 1

    def test_unknown_action(self, config):
        session, _ = _session(config)
        session.start([sample_at_aqi(120)])
        with pytest.raises(ValueError, match="teleport"):
            session.perform_action("teleport", 10)
        assert session.state.actions_applied == []

    def test_insufficient_credits(self, no_cooldown_config):
        session, _ = _session(no_cooldown_config)
        session.start([sample_at_aqi(120)])
        for _ in range(5):
            session.perform_action(ActionType.RETROFIT_FACTORY, 0)
        assert session.player.credits == 0

        with pytest.raises(InsufficientCreditsError):
            session.perform_action(ActionType.RETROFIT_FACTORY, 0)
        assert len(session.state.actions_applied) == 5

    def test_cooldown_blocks_until_ticked(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])
        session.perform_action(ActionType.PLANT_TREE, 25)

        with pytest.raises(ActionOnCooldownError):
            session.perform_action(ActionType.PLANT_TREE, 25)
        assert ActionType.PLANT_TREE not in session.affordable_actions()

        session.tick(300)
        session.perform_action(ActionType.PLANT_TREE, 25)
        assert len(session.state.actions_applied) == 2

    def test_non_finite_area_is_a_no_op(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])
        before = session.current_sample.pm25

        outcome = session.perform_action(ActionType.PLANT_TREE, float("inf"))

        assert outcome.sample.pm25 == before
        assert session.player.credits == 490
        assert session.status == SessionStatus.RUNNING

    def test_rejected_when_not_running(self, config):
        session, _ = _session(config)
        with pytest.raises(RuntimeError):
            session.perform_action(ActionType.PLANT_TREE, 25)


# =============================================================================
# Tick
# =============================================================================


class TestTick:
    def test_uses_clock_delta(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])
        clock.advance(5)
        session.tick()

        assert session.state.time_remaining == pytest.approx(895)
        assert session.elapsed_seconds == pytest.approx(5)

    def test_health_drains_in_polluted_air(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])
        session.tick(60)

        # AQI 120 / 100 * 2 per minute
        assert session.player.health == pytest.approx(97.6)
        assert session.state.health_impact.current_exposure == pytest.approx(120)

    def test_time_out_fails(self, config, clock):
        session, _ = _session(config, clock=clock)
        session.start([sample_at_aqi(120)])

        assert session.tick(900) == SessionStatus.FAILED
        assert session.result is None
        with pytest.raises(RuntimeError):
            session.perform_action(ActionType.PLANT_TREE, 25)
        assert session.tick(10) == SessionStatus.FAILED

    def test_health_depletion_fails(self, clock):
        session, _ = _session(GameConfig(health_drain_rate=1000), clock=clock)
        session.start([sample_at_aqi(120)])

        assert session.tick(60) == SessionStatus.FAILED
        assert session.player.health == 0


# =============================================================================
# Mission outcome
# =============================================================================


class TestMissionFlow:
    def test_first_mission_completes_and_persists(self, no_cooldown_config, clock, store):
        session, _ = _session(no_cooldown_config, clock=clock, store=store)
        session.start([sample_at_aqi(120)])

        outcome = session.perform_action(ActionType.SHUTDOWN_FACTORY, 4000)
        assert outcome.sample.aqi <= 80
        assert [o.id for o in outcome.completed_objectives] == ["obj_001_1"]

        session.tick(60)
        for _ in range(5):
            session.perform_action(ActionType.PLANT_TREE, 125)

        assert session.status == SessionStatus.COMPLETED
        # AQI 120 -> 45: 750 improvement points on top of objectives and bonuses
        assert session.current_sample.aqi == 45
        assert session.result.score == 150 + 750 + 500 + 200
        assert session.result.completion_time == 60

        rows = store.fetch_results("mission_001")
        assert len(rows) == 1
        assert rows[0]["score"] == 1600
        progress = store.load_progress()
        assert progress.completed_missions == ("mission_001",)
        assert progress.total_xp == 100

    def test_time_limit_objective(self, no_cooldown_config, clock):
        progress = UserProgress(completed_missions=("mission_001",))
        session, _ = _session(no_cooldown_config, "mission_002", clock=clock, progress=progress)
        session.start([sample_at_aqi(140)])

        session.perform_action(ActionType.SHUTDOWN_FACTORY, 6000)
        session.perform_action(ActionType.REMOVE_VEHICLE, 20)
        assert session.status == SessionStatus.RUNNING
        session.perform_action(ActionType.REMOVE_VEHICLE, 20)

        assert session.status == SessionStatus.COMPLETED
        assert session.tracker.get("obj_002_3").is_completed
        # AQI 140 -> 62
        assert session.current_sample.aqi == 62
        assert session.result.score == 325 + 780 + 500 + 200
        assert session.progress.total_score == 1805

    def test_counter_objectives_via_record_progress(self, no_cooldown_config, clock):
        done = ("mission_001", "mission_002")
        session, _ = _session(
            no_cooldown_config,
            "mission_003",
            clock=clock,
            progress=UserProgress(completed_missions=done),
        )
        session.start([sample_at_aqi(160)])

        session.record_progress(ObjectiveType.SATELLITE_DATA, 5)
        session.record_progress(ObjectiveType.COMMUNITY_ENGAGEMENT, 1500)
        assert session.tracker.get("obj_003_2").current == 1000
        assert session.status == SessionStatus.RUNNING

        session.perform_action(ActionType.SHUTDOWN_FACTORY, 8000)
        assert session.status == SessionStatus.COMPLETED
        assert session.result.objectives_completed == 3
