"""
Unit tests for alert evaluation.
"""

from payloads import weather_payload

from weather_dash.core.alerts import evaluate_alerts
from weather_dash.weather.models import AlertSeverity, UnitSystem, WeatherSnapshot


def snapshot(**overrides) -> WeatherSnapshot:
    return WeatherSnapshot.from_provider(weather_payload(**overrides))


class TestEvaluateAlerts:
    """Test the independent alert rules and their ordering."""

    def test_clear_conditions_produce_no_alerts(self):
        assert evaluate_alerts(snapshot(temp=20, wind_speed=2, visibility=10000, condition="Clear")) == []

    def test_heat_only(self):
        alerts = evaluate_alerts(snapshot(temp=40, wind_speed=2, visibility=5000, condition="clear"))

        assert len(alerts) == 1
        assert alerts[0].title == "Heat Advisory"
        assert alerts[0].severity == AlertSeverity.WARNING
        assert "40°C" in alerts[0].description

    def test_wind_visibility_thunderstorm_in_evaluation_order(self):
        alerts = evaluate_alerts(snapshot(temp=10, wind_speed=15, visibility=500, condition="thunderstorm"))

        assert [alert.title for alert in alerts] == [
            "High Wind Advisory",
            "Low Visibility Warning",
            "Thunderstorm Warning",
        ]
        assert [alert.severity for alert in alerts] == [
            AlertSeverity.INFO,
            AlertSeverity.SEVERE,
            AlertSeverity.EXTREME,
        ]

    def test_cold_advisory(self):
        alerts = evaluate_alerts(snapshot(temp=-5))

        assert [alert.title for alert in alerts] == ["Cold Weather Alert"]

    def test_thresholds_are_strict(self):
        alerts = evaluate_alerts(snapshot(temp=35, wind_speed=10, visibility=1000))
        assert alerts == []
        assert evaluate_alerts(snapshot(temp=0)) == []

    def test_rain_advisory_only_without_thunder(self):
        rain = evaluate_alerts(snapshot(condition="Rain"))
        storm = evaluate_alerts(snapshot(condition="Thunderstorm with rain"))

        assert [alert.title for alert in rain] == ["Rain Alert"]
        assert [alert.title for alert in storm] == ["Thunderstorm Warning"]

    def test_description_uses_display_units(self):
        alerts = evaluate_alerts(snapshot(temp=40), UnitSystem.IMPERIAL)

        assert "104°F" in alerts[0].description

    def test_severity_ranks_are_ordered(self):
        ranks = [severity.rank for severity in AlertSeverity]
        assert ranks == sorted(ranks)
        assert AlertSeverity.EXTREME.rank > AlertSeverity.INFO.rank
