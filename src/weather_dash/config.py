"""Configuration settings for the weather dashboard and its proxy."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# Upstream provider configuration
OPENWEATHER_API_KEY: str = os.getenv("OPENWEATHER_API_KEY", "")
OPENWEATHER_BASE_URL: str = os.getenv("OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5")
UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "3000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
STATIC_DIR: str = os.getenv(
    "STATIC_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")
)

# Redis cache configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "60"))
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "weather-dash")

# Rate limiting configuration
RATE_LIMIT_REQUESTS_PER_SECOND: int = int(os.getenv("RATE_LIMIT_REQUESTS_PER_SECOND", "20"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Dashboard (client side) configuration
PROXY_BASE_URL: str = os.getenv("PROXY_BASE_URL", f"http://localhost:{PORT}")
DEFAULT_CITY: str = os.getenv("DEFAULT_CITY", "London")
PREFERENCES_DB_PATH: str = os.getenv("PREFERENCES_DB_PATH", "data/preferences.db")
DISPLAY_TIMEZONE: str = os.getenv("DISPLAY_TIMEZONE", "")  # empty means system local time

# Fixed limits
MAX_SEARCH_HISTORY: Final[int] = 5
MAX_SAVED_LOCATIONS: Final[int] = 5
DAILY_FORECAST_DAYS: Final[int] = 5
CHART_HOURS: Final[int] = 8
CARD_HOURS: Final[int] = 12
