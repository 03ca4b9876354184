"""HTTP client for the OpenWeatherMap API, used by the proxy service."""

import logging
from typing import Any, Dict, Optional

import httpx

from weather_dash.config import (
    OPENWEATHER_API_KEY, OPENWEATHER_BASE_URL, UPSTREAM_TIMEOUT_SECONDS
)
from weather_dash.errors import UpstreamError

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """Async client that forwards requests upstream and injects the API key."""

    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        base_url: str = OPENWEATHER_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the upstream client.

        Args:
            api_key: OpenWeatherMap credential appended to every request
            base_url: Base URL of the data/2.5 API
            transport: Optional transport override (tests)
        """
        if not api_key:
            logger.warning("OPENWEATHER_API_KEY is not set; upstream requests will be rejected")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=UPSTREAM_TIMEOUT_SECONDS,
            transport=transport
        )

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Fetch one upstream resource.

        Raises:
            UpstreamError: If the provider answers with a non-2xx status
            httpx.RequestError: If the provider cannot be reached
        """
        query = {**params, "appid": self.api_key}
        logger.info(f"Forwarding {path} with {params}")

        response = await self.client.get(path, params=query)
        try:
            data = response.json()
        except ValueError:
            data = {"error": response.text}

        if response.is_error:
            logger.error(f"Upstream error for {path}: {response.status_code} - {response.text}")
            raise UpstreamError(response.status_code, data)

        return data

    async def current_weather(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None
    ) -> Dict[str, Any]:
        """Current conditions by city name, or by coordinates when no city is given."""
        if city:
            params: Dict[str, Any] = {"q": city}
        else:
            params = {"lat": lat, "lon": lon}
        return await self._get("/weather", {**params, "units": "metric"})

    async def forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        """5-day forecast at 3-hour resolution."""
        return await self._get("/forecast", {"lat": lat, "lon": lon, "units": "metric"})

    async def air_pollution(self, lat: float, lon: float) -> Dict[str, Any]:
        """Current pollutant concentrations."""
        return await self._get("/air_pollution", {"lat": lat, "lon": lon})

    async def onecall(self, lat: float, lon: float) -> Dict[str, Any]:
        """Current block of the One Call API (carries the UV index)."""
        return await self._get(
            "/onecall",
            {"lat": lat, "lon": lon, "exclude": "minutely,hourly,daily,alerts"}
        )

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
