"""Unit conversion for display values."""

import math

from weather_dash.weather.models import UnitSystem


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def to_display_temperature(celsius: float, unit_system: UnitSystem) -> int:
    """Convert a Celsius value to a whole display degree.

    Args:
        celsius: Temperature in Celsius
        unit_system: Active measurement system

    Returns:
        Rounded temperature in the unit of `unit_system`
    """
    if unit_system == UnitSystem.IMPERIAL:
        return round_half_up(celsius_to_fahrenheit(celsius))
    return round_half_up(celsius)


def temperature_symbol(unit_system: UnitSystem) -> str:
    return "F" if unit_system == UnitSystem.IMPERIAL else "C"
