"""Data models for the weather dashboard."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnitSystem(str, Enum):
    """Measurement system used for display values."""
    METRIC = "metric"
    IMPERIAL = "imperial"


class Theme(str, Enum):
    """Dashboard color theme."""
    LIGHT = "light"
    DARK = "dark"


class ChartType(str, Enum):
    """Quantity plotted by the hourly chart."""
    TEMPERATURE = "temperature"
    PRECIPITATION = "precipitation"
    WIND = "wind"


class AlertSeverity(str, Enum):
    """Alert severity, declared from least to most severe."""
    INFO = "info"
    WARNING = "warning"
    SEVERE = "severe"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        return list(AlertSeverity).index(self)


class DataSource(str, Enum):
    """Where a displayed value came from."""
    MEASURED = "measured"
    ESTIMATED = "estimated"
    FALLBACK = "fallback"


class LocationInfo(BaseModel):
    """Location information model."""
    name: str = Field(..., description="City name as reported by the provider")
    country_code: str = Field("", description="ISO country code")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class WeatherSnapshot(BaseModel):
    """Current conditions for one location; immutable once built."""
    model_config = ConfigDict(frozen=True)

    location: LocationInfo
    timestamp: int = Field(..., description="Observation time, epoch seconds")
    temperature: float = Field(..., description="Temperature in Celsius")
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float = Field(..., description="Relative humidity in percent")
    pressure: float = Field(..., description="Pressure in hPa")
    visibility: float = Field(..., description="Visibility in meters")
    wind_speed: float = Field(..., description="Wind speed in m/s")
    wind_direction: float = Field(0, description="Wind direction in degrees")
    cloudiness: float = Field(0, description="Cloud cover in percent")
    condition_category: str
    condition_description: str = ""
    condition_icon: str = ""
    sunrise: int = Field(..., description="Sunrise, epoch seconds")
    sunset: int = Field(..., description="Sunset, epoch seconds")

    @classmethod
    def from_provider(cls, data: Dict[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot from a current-conditions payload.

        Args:
            data: Raw JSON from the /api/weather proxy route

        Returns:
            WeatherSnapshot

        Raises:
            ValueError: If the payload is missing required fields
        """
        try:
            main = data["main"]
            weather = data["weather"][0]
            wind = data.get("wind", {})
            return cls(
                location=LocationInfo(
                    name=data["name"],
                    country_code=data.get("sys", {}).get("country", ""),
                    lat=data["coord"]["lat"],
                    lon=data["coord"]["lon"],
                ),
                timestamp=data.get("dt", 0),
                temperature=main["temp"],
                feels_like=main.get("feels_like", main["temp"]),
                temp_min=main.get("temp_min", main["temp"]),
                temp_max=main.get("temp_max", main["temp"]),
                humidity=main["humidity"],
                pressure=main.get("pressure", 0),
                # Provider omits visibility when it is unlimited (10 km cap)
                visibility=data.get("visibility", 10000),
                wind_speed=wind.get("speed", 0),
                wind_direction=wind.get("deg", 0),
                cloudiness=data.get("clouds", {}).get("all", 0),
                condition_category=weather["main"],
                condition_description=weather.get("description", ""),
                condition_icon=weather.get("icon", ""),
                sunrise=data["sys"]["sunrise"],
                sunset=data["sys"]["sunset"],
            )
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid current weather payload: missing {e}")


class ForecastEntry(BaseModel):
    """One 3-hourly forecast sample."""
    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., description="Sample time, epoch seconds")
    temperature: float
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: float = 0
    wind_direction: float = 0
    cloudiness: Optional[float] = None
    visibility: Optional[float] = None
    precipitation_probability: float = Field(0, ge=0, le=1)
    condition_category: str
    condition_description: str = ""
    condition_icon: str = ""

    @classmethod
    def from_provider(cls, item: Dict[str, Any]) -> "ForecastEntry":
        """Build an entry from one element of a forecast `list`."""
        try:
            main = item["main"]
            weather = item["weather"][0]
            wind = item.get("wind", {})
            return cls(
                timestamp=item["dt"],
                temperature=main["temp"],
                feels_like=main.get("feels_like"),
                temp_min=main.get("temp_min"),
                temp_max=main.get("temp_max"),
                humidity=main.get("humidity"),
                pressure=main.get("pressure"),
                wind_speed=wind.get("speed", 0),
                wind_direction=wind.get("deg", 0),
                cloudiness=item.get("clouds", {}).get("all"),
                visibility=item.get("visibility"),
                precipitation_probability=item.get("pop", 0) or 0,
                condition_category=weather["main"],
                condition_description=weather.get("description", ""),
                condition_icon=weather.get("icon", ""),
            )
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid forecast entry: missing {e}")


def parse_forecast(data: Dict[str, Any]) -> List[ForecastEntry]:
    """Parse the `list` of a forecast payload, preserving order.

    Raises:
        ValueError: If the payload has no list or an entry is malformed
    """
    items = data.get("list") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise ValueError("No forecast list in response")
    return [ForecastEntry.from_provider(item) for item in items]


class DayBucket(BaseModel):
    """Aggregated temperatures for one local calendar day."""
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    min_temp: float
    max_temp: float
    avg_temp: float
    condition_category: str
    condition_description: str = ""
    condition_icon: str = ""


class AirQualitySample(BaseModel):
    """Air quality derived from PM2.5 concentration."""
    pm2_5: Optional[float] = None
    aqi: int = Field(..., ge=0, le=500)
    category: str
    components: Dict[str, float] = Field(default_factory=dict)
    source: DataSource = DataSource.MEASURED


class UvReading(BaseModel):
    """UV index for the current location."""
    index: float = Field(..., ge=0)
    category: str
    source: DataSource = DataSource.MEASURED


class Alert(BaseModel):
    """Advisory derived from current conditions."""
    severity: AlertSeverity
    title: str
    description: str
    icon: str = ""


class SavedLocation(BaseModel):
    """Bookmarked location; `name` is the unique key."""
    name: str
    country_code: str = ""
    lat: float
    lon: float
    last_known_temp: Optional[float] = Field(None, description="Last fetched temperature in Celsius")

    @classmethod
    def from_snapshot(cls, snapshot: WeatherSnapshot) -> "SavedLocation":
        return cls(
            name=snapshot.location.name,
            country_code=snapshot.location.country_code,
            lat=snapshot.location.lat,
            lon=snapshot.location.lon,
            last_known_temp=snapshot.temperature,
        )


class Preferences(BaseModel):
    """Scalar user preferences."""
    unit_system: UnitSystem = UnitSystem.METRIC
    theme: Theme = Theme.LIGHT
    last_city: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
