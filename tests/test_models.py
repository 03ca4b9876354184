"""
Unit tests for provider payload parsing into the data model.
"""

import pytest
from pydantic import ValidationError

from payloads import weather_payload

from weather_dash.weather.models import SavedLocation, WeatherSnapshot, parse_forecast


class TestWeatherSnapshot:
    """Test WeatherSnapshot.from_provider."""

    def test_fields(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload(name="Lisbon", country="PT", temp=18.2))

        assert snapshot.location.name == "Lisbon"
        assert snapshot.location.country_code == "PT"
        assert snapshot.temperature == 18.2
        assert snapshot.humidity == 70
        assert snapshot.condition_category == "Clear"
        assert snapshot.sunset > snapshot.sunrise

    def test_missing_visibility_defaults_to_ten_km(self):
        payload = weather_payload()
        del payload["visibility"]

        assert WeatherSnapshot.from_provider(payload).visibility == 10000

    def test_missing_required_field(self):
        payload = weather_payload()
        del payload["main"]

        with pytest.raises(ValueError):
            WeatherSnapshot.from_provider(payload)

    def test_snapshot_is_immutable(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload())

        with pytest.raises(ValidationError):
            snapshot.temperature = 99

    def test_saved_location_from_snapshot(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload(name="Quito", lat=-0.22, lon=-78.5, temp=14))
        saved = SavedLocation.from_snapshot(snapshot)

        assert saved.name == "Quito"
        assert (saved.lat, saved.lon) == (-0.22, -78.5)
        assert saved.last_known_temp == 14


class TestParseForecast:
    """Test parse_forecast on bodies of the wrong shape."""

    @pytest.mark.parametrize("body", [[], {}, {"list": "soon"}, {"list": [5]}, {"list": [{"dt": 1}]}])
    def test_wrong_shape_is_value_error(self, body):
        with pytest.raises(ValueError):
            parse_forecast(body)

    def test_current_weather_that_is_not_an_object(self):
        with pytest.raises(ValueError):
            WeatherSnapshot.from_provider(["London"])
