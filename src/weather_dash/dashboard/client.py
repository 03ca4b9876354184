"""Async client the dashboard uses to reach the proxy endpoints."""

import logging
from typing import Any, Dict, Optional

import httpx

from weather_dash.config import PROXY_BASE_URL
from weather_dash.errors import NetworkFailure

logger = logging.getLogger(__name__)


class ProxyClient:
    """Thin wrapper over the same-origin proxy routes.

    No timeout is applied: a hung upstream call hangs only the section
    waiting on it.
    """

    def __init__(
        self,
        base_url: str = PROXY_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the proxy client.

        Args:
            base_url: Origin serving the /api routes
            transport: Optional transport override (tests)
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(base_url=base_url, timeout=None, transport=transport)

    async def fetch(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET a proxy route and decode its JSON body.

        Raises:
            NetworkFailure: If the request is rejected or answered non-2xx
        """
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise NetworkFailure(f"Request to {path} failed: {e}")

        if response.is_error:
            logger.error(f"{path} answered {response.status_code}: {response.text}")
            raise NetworkFailure(f"Error fetching {path}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure(f"Invalid JSON from {path}: {e}")

    async def weather_by_city(self, city: str) -> Dict[str, Any]:
        return await self.fetch("/api/weather", {"city": city})

    async def weather_by_coordinates(self, lat: float, lon: float) -> Dict[str, Any]:
        return await self.fetch("/api/weather", {"lat": lat, "lon": lon})

    async def forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        return await self.fetch("/api/forecast", {"lat": lat, "lon": lon})

    async def air_pollution(self, lat: float, lon: float) -> Dict[str, Any]:
        return await self.fetch("/api/air-pollution", {"lat": lat, "lon": lon})

    async def onecall(self, lat: float, lon: float) -> Dict[str, Any]:
        return await self.fetch("/api/onecall", {"lat": lat, "lon": lon})

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
