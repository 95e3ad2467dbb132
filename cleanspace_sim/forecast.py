"""
Forecast layer:
- Exponential decay of applied action effects over the coming hours
- Moving average smoothing for charting
- pandas frame export
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import List, Sequence

import numpy as np
import pandas as pd

from cleanspace_sim.models import ActionEffect, AirQualitySample


def moving_average(values: np.ndarray, window: int = 3) -> np.ndarray:
    """
    Simple moving average (SMA) with unchanged length.
    """
    window = int(max(1, window))
    if values.size == 0:
        return values
    if window == 1:
        return values.astype(float)
    kernel = np.ones(window, dtype=float) / window
    # "same" keeps length unchanged; edges are pulled toward zero.
    return np.convolve(values.astype(float), kernel, mode="same")


def decay_weights(hours: int, half_life_hours: float = 12.0) -> np.ndarray:
    """
    Weight exp(-i / half_life) for each forecast hour i = 1..hours.
    """
    if hours <= 0:
        return np.zeros(0, dtype=float)
    steps = np.arange(1, int(hours) + 1, dtype=float)
    return np.exp(-steps / float(half_life_hours))


def predict_trajectory(
    sample: AirQualitySample,
    effects: Sequence[ActionEffect],
    *,
    hours: int = 24,
    half_life_hours: float = 12.0,
) -> List[AirQualitySample]:
    """
    Project `sample` forward hour by hour.

    The summed PM2.5 change of all effects is scaled by the decay weight of
    each hour and added onto the current concentration, floored at zero.
    Output depends only on the arguments.
    """
    total_change = float(sum(e.pm25_change for e in effects))
    weights = decay_weights(hours, half_life_hours)
    pm25 = np.maximum(0.0, sample.pm25 + total_change * weights)

    return [
        replace(
            sample,
            pm25=float(value),
            timestamp=sample.timestamp + timedelta(hours=i),
            source="simulated",
        )
        for i, value in enumerate(pm25, start=1)
    ]


def trajectory_frame(samples: Sequence[AirQualitySample], window: int = 3) -> pd.DataFrame:
    """
    Tabulate a trajectory as ts / pm25 / aqi plus a smoothed AQI column.
    """
    out = pd.DataFrame(
        {
            "ts": pd.to_datetime([s.timestamp for s in samples], utc=True),
            "pm25": [float(s.pm25) for s in samples],
            "aqi": [int(s.aqi) for s in samples],
        }
    )
    out["aqi_smooth"] = moving_average(out["aqi"].to_numpy(), window=window)
    return out
