"""
Simulated satellite air-quality telemetry.

Stands in for the NASA data feeds when building a mission baseline:
- Location-dependent base PM2.5 (urban areas dirtier)
- Diurnal sinusoid
- Uniform noise on every pollutant
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from cleanspace_sim.aqi import pm25_for_aqi
from cleanspace_sim.models import AirQualitySample, GameLocation


_URBAN_MARKERS = ("city", "new york", "los angeles")


def is_urban(location: GameLocation) -> bool:
    city = location.city.lower()
    return any(marker in city for marker in _URBAN_MARKERS)


class BaselineSimulator:
    """
    Seeded generator of hourly baseline samples for a location.
    """

    def __init__(self, *, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def _secondary_pollutants(self, pm25: float) -> dict:
        return {
            "pm10": pm25 * 1.5,
            "no2": 20.0 + self._rng.random() * 30.0,
            "o3": 30.0 + self._rng.random() * 40.0,
            "co": 1.0 + self._rng.random() * 2.0,
            "so2": 5.0 + self._rng.random() * 10.0,
        }

    def baseline(
        self,
        location: GameLocation,
        *,
        hours: int = 24,
        end_utc: Optional[datetime] = None,
    ) -> List[AirQualitySample]:
        """
        Hourly samples covering the `hours` before `end_utc` (inclusive).
        """
        if end_utc is None:
            end_utc = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        start = end_utc - timedelta(hours=max(0, hours - 1))

        if is_urban(location):
            base_pm25 = 25.0 + self._rng.random() * 15.0
        else:
            base_pm25 = 15.0 + self._rng.random() * 10.0

        samples = []
        for i in range(max(0, hours)):
            ts = start + timedelta(hours=i)
            diurnal = math.sin(ts.hour / 24.0 * 2.0 * math.pi) * 5.0
            pm25 = max(0.0, base_pm25 + diurnal + self._rng.random() * 3.0)
            samples.append(
                AirQualitySample(
                    pm25=round(pm25, 2),
                    timestamp=ts,
                    source="merra2",
                    **self._secondary_pollutants(pm25),
                )
            )
        return samples

    def sample_for_aqi(
        self, target_aqi: float, *, now_utc: Optional[datetime] = None
    ) -> AirQualitySample:
        """
        A single reading whose PM2.5 maps back to `target_aqi`.
        """
        if now_utc is None:
            now_utc = datetime.now(timezone.utc)
        pm25 = pm25_for_aqi(target_aqi)
        return AirQualitySample(
            pm25=pm25,
            timestamp=now_utc,
            source="merra2",
            **self._secondary_pollutants(pm25),
        )
