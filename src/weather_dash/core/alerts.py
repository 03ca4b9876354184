"""Advisory alerts derived from current conditions."""

import logging
from typing import List

from weather_dash.core.units import temperature_symbol, to_display_temperature
from weather_dash.weather.models import Alert, AlertSeverity, UnitSystem, WeatherSnapshot

logger = logging.getLogger(__name__)

HEAT_THRESHOLD_C = 35
COLD_THRESHOLD_C = 0
HIGH_WIND_THRESHOLD_MS = 10
LOW_VISIBILITY_THRESHOLD_M = 1000


def evaluate_alerts(
    snapshot: WeatherSnapshot,
    unit_system: UnitSystem = UnitSystem.METRIC
) -> List[Alert]:
    """Evaluate every alert rule against one snapshot.

    Rules are independent; the result keeps evaluation order (temperature,
    wind, visibility, precipitation). An empty list means clear conditions.

    Args:
        snapshot: Current conditions
        unit_system: System used for temperatures quoted in descriptions

    Returns:
        List of alerts in evaluation order
    """
    alerts: List[Alert] = []
    temp = to_display_temperature(snapshot.temperature, unit_system)
    symbol = temperature_symbol(unit_system)

    if snapshot.temperature > HEAT_THRESHOLD_C:
        alerts.append(Alert(
            severity=AlertSeverity.WARNING,
            icon="fa-temperature-high",
            title="Heat Advisory",
            description=f"High temperature of {temp}°{symbol}. Stay hydrated and avoid prolonged sun exposure."
        ))
    elif snapshot.temperature < COLD_THRESHOLD_C:
        alerts.append(Alert(
            severity=AlertSeverity.WARNING,
            icon="fa-temperature-low",
            title="Cold Weather Alert",
            description=f"Temperature is {temp}°{symbol}. Dress warmly and protect exposed skin."
        ))

    if snapshot.wind_speed > HIGH_WIND_THRESHOLD_MS:
        alerts.append(Alert(
            severity=AlertSeverity.INFO,
            icon="fa-wind",
            title="High Wind Advisory",
            description=f"Wind speeds of {snapshot.wind_speed} m/s. Secure loose objects outdoors."
        ))

    if snapshot.visibility < LOW_VISIBILITY_THRESHOLD_M:
        alerts.append(Alert(
            severity=AlertSeverity.SEVERE,
            icon="fa-eye-slash",
            title="Low Visibility Warning",
            description=f"Visibility reduced to {snapshot.visibility / 1000:.1f} km. Drive carefully."
        ))

    condition = snapshot.condition_category.lower()
    if "thunder" in condition:
        alerts.append(Alert(
            severity=AlertSeverity.EXTREME,
            icon="fa-cloud-bolt",
            title="Thunderstorm Warning",
            description="Thunderstorms in the area. Seek shelter indoors and avoid open areas."
        ))
    elif "rain" in condition:
        alerts.append(Alert(
            severity=AlertSeverity.INFO,
            icon="fa-cloud-rain",
            title="Rain Alert",
            description="Rain expected. Carry an umbrella and drive carefully."
        ))

    if alerts:
        worst = max(alerts, key=lambda alert: alert.severity.rank)
        logger.info(f"{len(alerts)} alert(s) for {snapshot.location.name}, most severe: {worst.severity.value}")
    return alerts
