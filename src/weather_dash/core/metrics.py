"""Derived weather metrics that the provider does not supply.

All functions are pure and work on Celsius, meters per second, epoch
seconds and micrograms per cubic meter.
"""

import math
from datetime import datetime
from typing import Final, NamedTuple, Tuple

from weather_dash.core.units import round_half_up

# Magnus formula constants
MAGNUS_A: Final[float] = 17.27
MAGNUS_B: Final[float] = 237.7


class Breakpoint(NamedTuple):
    """One linear segment of the PM2.5 to AQI mapping."""
    c_low: float
    c_high: float
    i_low: int
    i_high: int


# US EPA PM2.5 breakpoints
PM25_BREAKPOINTS: Final[Tuple[Breakpoint, ...]] = (
    Breakpoint(0.0, 12.0, 0, 50),
    Breakpoint(12.1, 35.4, 51, 100),
    Breakpoint(35.5, 55.4, 101, 150),
    Breakpoint(55.5, 150.4, 151, 200),
    Breakpoint(150.5, 250.4, 201, 300),
    Breakpoint(250.5, 500.4, 301, 500),
)

AQI_MAX: Final[int] = 500

# (upper bound inclusive, label); anything above the last bound is Hazardous
AQI_CATEGORIES: Final[Tuple[Tuple[int, str], ...]] = (
    (50, "Good"),
    (100, "Moderate"),
    (150, "Unhealthy for Sensitive"),
    (200, "Unhealthy"),
    (300, "Very Unhealthy"),
)
AQI_TOP_CATEGORY: Final[str] = "Hazardous"

UV_LABELS: Final[Tuple[str, ...]] = (
    "Low", "Low", "Low",
    "Moderate", "Moderate", "Moderate",
    "High", "High",
    "Very High", "Very High", "Very High",
    "Extreme",
)

# Daytime UV window for the estimate used when no UV reading is available
UV_ESTIMATE_DAY_HOURS: Final[Tuple[int, int]] = (10, 16)
UV_ESTIMATE_DAY: Final[int] = 6
UV_ESTIMATE_NIGHT: Final[int] = 1

COMPASS_LABELS: Final[Tuple[str, ...]] = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def dew_point(temp_c: float, humidity_pct: float) -> float:
    """Dew point in Celsius by the Magnus approximation.

    Returns NaN when humidity is not positive; callers must guard.
    """
    if humidity_pct <= 0:
        return math.nan
    alpha = MAGNUS_A * temp_c / (MAGNUS_B + temp_c) + math.log(humidity_pct / 100)
    return MAGNUS_B * alpha / (MAGNUS_A - alpha)


def pm25_to_aqi(pm25: float) -> int:
    """Convert a PM2.5 concentration to a 0-500 AQI value.

    Bands are closed at their lower breakpoint and open at the next band's
    lower breakpoint, so concentrations between published breakpoints
    (e.g. 12.05) stay on the lower band's line. The top band is closed.
    Negative concentrations map to 0 and anything above the top breakpoint
    clamps to 500.
    """
    if pm25 < 0:
        return 0
    top = PM25_BREAKPOINTS[-1]
    if pm25 > top.c_high:
        return AQI_MAX

    band = PM25_BREAKPOINTS[0]
    for candidate in PM25_BREAKPOINTS:
        if pm25 >= candidate.c_low:
            band = candidate
        else:
            break

    slope = (band.i_high - band.i_low) / (band.c_high - band.c_low)
    aqi = slope * (pm25 - band.c_low) + band.i_low
    return min(round_half_up(aqi), AQI_MAX)


def aqi_category(aqi: float) -> str:
    """Label of the AQI band containing `aqi`."""
    for upper, label in AQI_CATEGORIES:
        if aqi <= upper:
            return label
    return AQI_TOP_CATEGORY


def uv_category(uv_index: float) -> str:
    position = max(0, min(round_half_up(uv_index), len(UV_LABELS) - 1))
    return UV_LABELS[position]


def estimate_uv_index(local_time: datetime) -> int:
    """Rough UV guess from the time of day, used when no reading exists."""
    first, last = UV_ESTIMATE_DAY_HOURS
    if first <= local_time.hour <= last:
        return UV_ESTIMATE_DAY
    return UV_ESTIMATE_NIGHT


def sun_position_fraction(now: float, sunrise: float, sunset: float) -> float:
    """Fraction of daylight elapsed, clamped to [0, 1].

    Night time is not modelled: before sunrise is 0, after sunset is 1.
    """
    span = sunset - sunrise
    if span <= 0:
        return 0.0 if now < sunrise else 1.0
    fraction = (now - sunrise) / span
    return max(0.0, min(1.0, fraction))


def sun_arc_height(fraction: float) -> float:
    """Height of the sun on a unit arc for a daylight fraction."""
    return math.sin(fraction * math.pi)


def day_length(sunrise: float, sunset: float) -> Tuple[int, int]:
    """Daylight duration as (hours, minutes)."""
    seconds = max(0, int(sunset - sunrise))
    return seconds // 3600, (seconds % 3600) // 60


def compass_label(degrees: float) -> str:
    """16-point compass label for a wind direction."""
    return COMPASS_LABELS[round_half_up(degrees / 22.5) % 16]


def condition_theme(condition: str) -> str:
    """Background theme for a condition category."""
    condition = condition.lower()
    if "cloud" in condition:
        return "clouds"
    if "rain" in condition or "drizzle" in condition:
        return "rain"
    if "snow" in condition:
        return "snow"
    if "thunder" in condition:
        return "thunderstorm"
    return "clear"
