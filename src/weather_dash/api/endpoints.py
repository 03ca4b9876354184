"""Proxy endpoints forwarding dashboard requests to the weather provider."""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx
from fastapi import APIRouter, Query
from fastapi_cache.decorator import cache

from weather_dash.config import CACHE_EXPIRE_SECONDS
from weather_dash.errors import MissingParameter, ProxyFailure, UpstreamError
from weather_dash.weather.client import OpenWeatherClient

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["weather"])

LAT_QUERY = Query(None, ge=-90, le=90, description="Latitude in decimal degrees")
LON_QUERY = Query(None, ge=-180, le=180, description="Longitude in decimal degrees")


def get_upstream_client() -> OpenWeatherClient:
    """Dependency to get an upstream client instance."""
    return OpenWeatherClient()


def require_coordinates(lat: Optional[float], lon: Optional[float]) -> Tuple[float, float]:
    """Ensure both coordinates were supplied.

    Raises:
        MissingParameter: If either coordinate is missing
    """
    if lat is None or lon is None:
        raise MissingParameter("Please provide latitude and longitude")
    return lat, lon


async def forward(section: str, call) -> Dict[str, Any]:
    """Run one upstream call, mapping local failures to a 500.

    Args:
        section: Human readable name used in the error message
        call: Coroutine function taking an OpenWeatherClient

    Raises:
        UpstreamError: Provider status and body, forwarded as-is
        ProxyFailure: Any other failure
    """
    try:
        async with get_upstream_client() as client:
            return await call(client)
    except UpstreamError:
        raise
    except httpx.HTTPError as e:
        logger.error(f"Error fetching {section}: {e}")
        raise ProxyFailure(f"Failed to fetch {section} data")
    except Exception as e:
        logger.error(f"Unexpected error fetching {section}: {e}")
        raise ProxyFailure(f"Failed to fetch {section} data")


@router.get("/weather")
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_current_weather(
    city: Optional[str] = Query(None, description="City name; takes precedence over coordinates"),
    lat: Optional[float] = LAT_QUERY,
    lon: Optional[float] = LON_QUERY
) -> Dict[str, Any]:
    """Current conditions by city name or coordinates."""
    if not city and (lat is None or lon is None):
        raise MissingParameter("Please provide city name or coordinates")

    return await forward(
        "weather",
        lambda client: client.current_weather(city=city, lat=lat, lon=lon)
    )


@router.get("/forecast")
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_forecast(
    lat: Optional[float] = LAT_QUERY,
    lon: Optional[float] = LON_QUERY
) -> Dict[str, Any]:
    """5-day / 3-hour forecast."""
    lat, lon = require_coordinates(lat, lon)
    return await forward("forecast", lambda client: client.forecast(lat, lon))


@router.get("/air-pollution")
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_air_pollution(
    lat: Optional[float] = LAT_QUERY,
    lon: Optional[float] = LON_QUERY
) -> Dict[str, Any]:
    """Pollutant concentrations."""
    lat, lon = require_coordinates(lat, lon)
    return await forward("air quality", lambda client: client.air_pollution(lat, lon))


@router.get("/onecall")
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_onecall(
    lat: Optional[float] = LAT_QUERY,
    lon: Optional[float] = LON_QUERY
) -> Dict[str, Any]:
    """Current One Call block, used for the UV index."""
    lat, lon = require_coordinates(lat, lon)
    return await forward("onecall", lambda client: client.onecall(lat, lon))


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "OK", "message": "Weather API server is running"}
