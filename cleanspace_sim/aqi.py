"""
AQI (Air Quality Index) calculation utilities.

PM2.5 is the only pollutant that drives the index in the game, using the
US EPA six-segment breakpoint table. Every live sample and every forecast
point is labelled through `compute_aqi`, so it must stay pure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple


AQI_MAX = 500

# US EPA PM2.5 (24-hour) AQI breakpoints (ug/m3).
_PM25_BREAKPOINTS = [
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 500.4, 301, 500),
]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def compute_aqi(pm25_ug_m3: float) -> int:
    """
    Convert PM2.5 concentration to AQI via piecewise linear interpolation.

    Negative concentrations are treated as 0. Concentrations that fall in the
    0.1 gap between two segments use the upper segment's line. Anything above
    the last breakpoint saturates at 500.
    """
    c = max(0.0, float(pm25_ug_m3))
    for c_lo, c_hi, i_lo, i_hi in _PM25_BREAKPOINTS:
        if c <= c_hi:
            aqi = (i_hi - i_lo) / (c_hi - c_lo) * (c - c_lo) + i_lo
            return max(0, round_half_up(aqi))
    return AQI_MAX


def pm25_for_aqi(aqi: float) -> float:
    """
    Inverse of `compute_aqi`: the lowest-segment PM2.5 concentration whose
    interpolated index equals `aqi`. Used to build baselines for missions
    narrated in AQI terms.
    """
    a = min(float(AQI_MAX), max(0.0, float(aqi)))
    for c_lo, c_hi, i_lo, i_hi in _PM25_BREAKPOINTS:
        if a <= i_hi:
            a = max(a, float(i_lo))
            return min(c_hi, (a - i_lo) * (c_hi - c_lo) / (i_hi - i_lo) + c_lo)
    return _PM25_BREAKPOINTS[-1][1]


def aqi_category(aqi: int) -> str:
    a = int(aqi)
    if a <= 50:
        return "Good"
    if a <= 100:
        return "Moderate"
    if a <= 150:
        return "Unhealthy for Sensitive Groups"
    if a <= 200:
        return "Unhealthy"
    if a <= 300:
        return "Very Unhealthy"
    return "Hazardous"


def calculate_aqi(pm25_ug_m3: float) -> Tuple[int, str]:
    aqi = compute_aqi(pm25_ug_m3)
    return aqi, aqi_category(aqi)


@dataclass(frozen=True)
class HealthPrecaution:
    level: str
    message: str
    recommendations: List[str]
    mask_required: bool
    avoid_outdoor_activity: bool


def health_precaution(aqi: int) -> HealthPrecaution:
    """
    Player-facing advice for a given AQI.
    """
    a = int(aqi)
    if a <= 50:
        return HealthPrecaution(
            "good", "Air quality is satisfactory", ["Enjoy outdoor activities"], False, False
        )
    if a <= 100:
        return HealthPrecaution(
            "moderate",
            "Air quality is acceptable for most people",
            ["Sensitive individuals may experience minor breathing discomfort"],
            False,
            False,
        )
    if a <= 150:
        return HealthPrecaution(
            "unhealthy_sensitive",
            "Unhealthy for sensitive groups",
            ["Sensitive individuals should limit outdoor activities", "Consider wearing a mask"],
            True,
            True,
        )
    if a <= 200:
        return HealthPrecaution(
            "unhealthy",
            "Unhealthy for everyone",
            ["Avoid outdoor activities", "Wear a mask if going outside"],
            True,
            True,
        )
    if a <= 300:
        return HealthPrecaution(
            "very_unhealthy",
            "Very unhealthy air quality",
            ["Stay indoors", "Use air purifiers", "Wear N95 mask if going outside"],
            True,
            True,
        )
    return HealthPrecaution(
        "hazardous",
        "Hazardous air quality",
        ["Stay indoors with windows closed", "Use air purifiers", "Avoid all outdoor activities"],
        True,
        True,
    )
