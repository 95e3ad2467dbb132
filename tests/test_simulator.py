"""
Baseline telemetry simulator tests.
"""

from datetime import timedelta

from cleanspace_sim.missions import get_mission
from cleanspace_sim.models import GameLocation
from cleanspace_sim.simulator import BaselineSimulator, is_urban


RURAL = GameLocation("farm", "Farmland", 41.0, -93.0, "Ames", "USA")


class TestUrbanDetection:
    def test_known_cities(self):
        assert is_urban(get_mission("mission_001").location)
        assert is_urban(get_mission("mission_002").location)
        assert is_urban(GameLocation("x", "X", 0, 0, "Mexico City", "Mexico"))

    def test_other_places(self):
        assert not is_urban(RURAL)


class TestBaseline:
    def test_hourly_samples_ending_at_end_time(self, fixed_now):
        samples = BaselineSimulator(seed=1).baseline(RURAL, hours=24, end_utc=fixed_now)

        assert len(samples) == 24
        assert samples[-1].timestamp == fixed_now
        assert samples[0].timestamp == fixed_now - timedelta(hours=23)
        assert all(s.source == "merra2" for s in samples)

    def test_seed_makes_it_reproducible(self, fixed_now):
        location = get_mission("mission_001").location
        a = BaselineSimulator(seed=7).baseline(location, end_utc=fixed_now)
        b = BaselineSimulator(seed=7).baseline(location, end_utc=fixed_now)
        assert a == b

    def test_urban_is_dirtier_range(self, fixed_now):
        urban = BaselineSimulator(seed=3).baseline(
            get_mission("mission_001").location, end_utc=fixed_now
        )
        rural = BaselineSimulator(seed=3).baseline(RURAL, end_utc=fixed_now)

        assert all(20.0 <= s.pm25 <= 48.0 for s in urban)
        assert all(10.0 <= s.pm25 <= 33.0 for s in rural)

    def test_secondary_pollutants_in_range(self, fixed_now):
        for s in BaselineSimulator(seed=5).baseline(RURAL, end_utc=fixed_now):
            assert 20.0 <= s.no2 <= 50.0
            assert 30.0 <= s.o3 <= 70.0
            assert 1.0 <= s.co <= 3.0
            assert 5.0 <= s.so2 <= 15.0

    def test_zero_hours(self, fixed_now):
        assert BaselineSimulator(seed=1).baseline(RURAL, hours=0, end_utc=fixed_now) == []


class TestSampleForAqi:
    def test_hits_requested_index(self, fixed_now):
        sim = BaselineSimulator(seed=1)
        for target in (42, 120, 160, 300):
            s = sim.sample_for_aqi(target, now_utc=fixed_now)
            assert s.aqi == target
            assert s.timestamp == fixed_now
