"""
Unit tests for the view builders and the proxy client.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from payloads import JAN_1_2024, weather_payload

from weather_dash.dashboard import views
from weather_dash.dashboard.client import ProxyClient
from weather_dash.errors import NetworkFailure
from weather_dash.weather.models import SavedLocation, UnitSystem, WeatherSnapshot

UTC = ZoneInfo("UTC")


class TestViews:
    """Test display conversions in the view builders."""

    def test_current_view_without_humidity_has_no_dew_point(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload(humidity=0))

        view = views.current_view(snapshot, UnitSystem.METRIC, datetime(2024, 1, 1, tzinfo=UTC), can_save=True)

        assert view.dew_point is None
        assert view.visibility_km == 10.0

    def test_sun_view(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload())

        view = views.sun_view(snapshot, JAN_1_2024 + 6 * 3600, UTC)

        assert (view.sunrise, view.sunset) == ("08:00 AM", "04:00 PM")
        assert (view.day_length_hours, view.day_length_minutes) == (8, 0)
        assert view.position == 0.0
        assert view.arc_height == 0.0

    @pytest.mark.parametrize("when, expected", [
        (datetime(2024, 1, 1, 18, tzinfo=UTC), "Today"),
        (datetime(2024, 1, 2, 3, tzinfo=UTC), "Tomorrow"),
        (datetime(2024, 1, 4, 3, tzinfo=UTC), "Thu"),
    ])
    def test_day_label(self, when, expected):
        now = datetime(2024, 1, 1, 12, tzinfo=UTC)

        assert views.day_label(0, when, now) == "Now"
        assert views.day_label(1, when, now) == expected

    def test_saved_location_without_temperature(self):
        location = SavedLocation(name="Oslo", country_code="NO", lat=59.9, lon=10.7)

        [view] = views.saved_location_views([location], UnitSystem.IMPERIAL)

        assert view.temperature is None

    def test_share_text_in_fahrenheit(self):
        snapshot = WeatherSnapshot.from_provider(weather_payload(name="Cairo", country="EG", temp=30.0))

        text = views.share_text(snapshot, UnitSystem.IMPERIAL)

        assert text.splitlines()[:2] == ["Weather in Cairo, EG", "Temperature: 86°F"]
        assert "Humidity: 70%" in text


class TestProxyClient:
    """Test error mapping in the proxy client."""

    @pytest.mark.asyncio
    async def test_success_decodes_json(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json={"ok": True})

        async with ProxyClient("http://dashboard.test", transport=httpx.MockTransport(handler)) as client:
            assert await client.forecast(1.5, 2.5) == {"ok": True}

        assert seen[0].path == "/api/forecast"
        assert seen[0].params["lat"] == "1.5"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"message": "city not found"}))

        async with ProxyClient("http://dashboard.test", transport=transport) as client:
            with pytest.raises(NetworkFailure) as excinfo:
                await client.weather_by_city("Nowhere")

        assert excinfo.value.status_code == 404

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        async with ProxyClient("http://dashboard.test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(NetworkFailure):
                await client.onecall(1.0, 2.0)
