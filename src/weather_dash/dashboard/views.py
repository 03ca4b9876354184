"""Render-ready view models built from the core data model.

Builders here are pure: they take snapshots or forecast entries plus the
display settings and return values already converted for display.
"""

import math
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Sequence

from pydantic import BaseModel

from weather_dash.core import metrics
from weather_dash.core.forecast import local_time
from weather_dash.core.units import temperature_symbol, to_display_temperature
from weather_dash.weather.models import (
    ChartType, DayBucket, ForecastEntry, SavedLocation, Theme, UnitSystem, WeatherSnapshot
)

CHART_STYLES = {
    ChartType.TEMPERATURE: ("#4a6cf7", "rgba(74, 108, 247, 0.1)"),
    ChartType.PRECIPITATION: ("#00bcd4", "rgba(0, 188, 212, 0.1)"),
    ChartType.WIND: ("#4caf50", "rgba(76, 175, 80, 0.1)"),
}


class CurrentView(BaseModel):
    name: str
    country_code: str
    date_label: str
    temperature: int
    feels_like: int
    high: int
    low: int
    unit_symbol: str
    description: str
    icon: str
    humidity: float
    pressure: float
    visibility_km: float
    wind_speed: float
    wind_direction: float
    wind_compass: str
    cloudiness: float
    dew_point: Optional[int]
    background: str
    can_save: bool


class ForecastDayView(BaseModel):
    date: str
    weekday: str
    weekday_short: str
    temperature: int
    high: int
    low: int
    condition: str
    description: str
    icon: str


class ChartView(BaseModel):
    chart_type: ChartType
    label: str
    labels: List[str]
    values: List[float]
    color: str
    background_color: str
    dark: bool


class HourlyCardView(BaseModel):
    day_label: str
    time: str
    temperature: int
    feels_like: Optional[int]
    description: str
    icon: str
    condition: str
    precipitation_pct: int
    wind_speed: float
    humidity: Optional[float]


class HourlyDetailView(HourlyCardView):
    high: Optional[int]
    low: Optional[int]
    wind_compass: str
    pressure: Optional[float]
    cloudiness: Optional[float]
    visibility_km: Optional[float]


class SunView(BaseModel):
    sunrise: str
    sunset: str
    day_length_hours: int
    day_length_minutes: int
    position: float
    arc_height: float


class SavedLocationView(BaseModel):
    name: str
    country_code: str
    temperature: Optional[int]


class ComparisonCard(BaseModel):
    name: str
    country_code: str
    temperature: int
    feels_like: int
    description: str
    icon: str
    humidity: float
    wind_speed: float
    pressure: float


def _optional_temperature(value: Optional[float], unit_system: UnitSystem) -> Optional[int]:
    return None if value is None else to_display_temperature(value, unit_system)


def current_view(
    snapshot: WeatherSnapshot,
    unit_system: UnitSystem,
    now: datetime,
    can_save: bool
) -> CurrentView:
    """Current-conditions panel."""
    dew = None
    if snapshot.humidity > 0:
        dew_c = metrics.dew_point(snapshot.temperature, snapshot.humidity)
        if not math.isnan(dew_c):
            dew = to_display_temperature(dew_c, unit_system)

    return CurrentView(
        name=snapshot.location.name,
        country_code=snapshot.location.country_code,
        date_label=now.strftime("%A, %B %d, %Y"),
        temperature=to_display_temperature(snapshot.temperature, unit_system),
        feels_like=to_display_temperature(snapshot.feels_like, unit_system),
        high=to_display_temperature(snapshot.temp_max, unit_system),
        low=to_display_temperature(snapshot.temp_min, unit_system),
        unit_symbol=temperature_symbol(unit_system),
        description=snapshot.condition_description,
        icon=snapshot.condition_icon,
        humidity=snapshot.humidity,
        pressure=snapshot.pressure,
        visibility_km=round(snapshot.visibility / 1000, 1),
        wind_speed=snapshot.wind_speed,
        wind_direction=snapshot.wind_direction,
        wind_compass=metrics.compass_label(snapshot.wind_direction),
        cloudiness=snapshot.cloudiness,
        dew_point=dew,
        background=metrics.condition_theme(snapshot.condition_category),
        can_save=can_save,
    )


def forecast_views(buckets: Sequence[DayBucket], unit_system: UnitSystem) -> List[ForecastDayView]:
    views = []
    for bucket in buckets:
        day = datetime.strptime(bucket.date, "%Y-%m-%d")
        views.append(ForecastDayView(
            date=bucket.date,
            weekday=day.strftime("%A"),
            weekday_short=day.strftime("%a"),
            temperature=to_display_temperature(bucket.avg_temp, unit_system),
            high=to_display_temperature(bucket.max_temp, unit_system),
            low=to_display_temperature(bucket.min_temp, unit_system),
            condition=bucket.condition_category,
            description=bucket.condition_description,
            icon=bucket.condition_icon,
        ))
    return views


def chart_view(
    entries: Sequence[ForecastEntry],
    chart_type: ChartType,
    unit_system: UnitSystem,
    theme: Theme,
    tz: Optional[tzinfo] = None
) -> ChartView:
    """Series for the hourly chart over the given samples."""
    labels = [f"{local_time(entry.timestamp, tz).hour}:00" for entry in entries]
    if chart_type == ChartType.PRECIPITATION:
        values = [entry.precipitation_probability * 100 for entry in entries]
        label = "Precipitation (%)"
    elif chart_type == ChartType.WIND:
        values = [entry.wind_speed for entry in entries]
        label = "Wind Speed (m/s)"
    else:
        values = [to_display_temperature(entry.temperature, unit_system) for entry in entries]
        label = f"Temperature (°{temperature_symbol(unit_system)})"

    color, background = CHART_STYLES[chart_type]
    return ChartView(
        chart_type=chart_type,
        label=label,
        labels=labels,
        values=values,
        color=color,
        background_color=background,
        dark=theme == Theme.DARK,
    )


def day_label(index: int, when: datetime, now: datetime) -> str:
    """'Now' for the first card, then Today / Tomorrow / short weekday."""
    if index == 0:
        return "Now"
    if when.date() == now.date():
        return "Today"
    if when.date() == (now + timedelta(days=1)).date():
        return "Tomorrow"
    return when.strftime("%a")


def hourly_card(
    index: int,
    entry: ForecastEntry,
    unit_system: UnitSystem,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> HourlyCardView:
    when = local_time(entry.timestamp, tz)
    return HourlyCardView(
        day_label=day_label(index, when, now),
        time=when.strftime("%I:%M %p"),
        temperature=to_display_temperature(entry.temperature, unit_system),
        feels_like=_optional_temperature(entry.feels_like, unit_system),
        description=entry.condition_description,
        icon=entry.condition_icon,
        condition=entry.condition_category.lower(),
        precipitation_pct=round(entry.precipitation_probability * 100),
        wind_speed=round(entry.wind_speed, 1),
        humidity=entry.humidity,
    )


def hourly_cards(
    entries: Sequence[ForecastEntry],
    unit_system: UnitSystem,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> List[HourlyCardView]:
    return [hourly_card(index, entry, unit_system, now, tz) for index, entry in enumerate(entries)]


def hourly_detail(
    index: int,
    entry: ForecastEntry,
    unit_system: UnitSystem,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> HourlyDetailView:
    card = hourly_card(index, entry, unit_system, now, tz)
    return HourlyDetailView(
        **card.model_dump(),
        high=_optional_temperature(entry.temp_max, unit_system),
        low=_optional_temperature(entry.temp_min, unit_system),
        wind_compass=metrics.compass_label(entry.wind_direction),
        pressure=entry.pressure,
        cloudiness=entry.cloudiness,
        visibility_km=None if entry.visibility is None else round(entry.visibility / 1000, 1),
    )


def sun_view(snapshot: WeatherSnapshot, now: float, tz: Optional[tzinfo] = None) -> SunView:
    position = metrics.sun_position_fraction(now, snapshot.sunrise, snapshot.sunset)
    hours, minutes = metrics.day_length(snapshot.sunrise, snapshot.sunset)
    return SunView(
        sunrise=local_time(snapshot.sunrise, tz).strftime("%I:%M %p"),
        sunset=local_time(snapshot.sunset, tz).strftime("%I:%M %p"),
        day_length_hours=hours,
        day_length_minutes=minutes,
        position=position,
        arc_height=metrics.sun_arc_height(position),
    )


def saved_location_views(
    locations: Sequence[SavedLocation],
    unit_system: UnitSystem
) -> List[SavedLocationView]:
    return [
        SavedLocationView(
            name=location.name,
            country_code=location.country_code,
            temperature=_optional_temperature(location.last_known_temp, unit_system),
        )
        for location in locations
    ]


def comparison_card(snapshot: WeatherSnapshot, unit_system: UnitSystem) -> ComparisonCard:
    return ComparisonCard(
        name=snapshot.location.name,
        country_code=snapshot.location.country_code,
        temperature=to_display_temperature(snapshot.temperature, unit_system),
        feels_like=to_display_temperature(snapshot.feels_like, unit_system),
        description=snapshot.condition_description,
        icon=snapshot.condition_icon,
        humidity=snapshot.humidity,
        wind_speed=snapshot.wind_speed,
        pressure=snapshot.pressure,
    )


def share_text(snapshot: WeatherSnapshot, unit_system: UnitSystem) -> str:
    """Plain-text summary for sharing the current conditions."""
    temp = to_display_temperature(snapshot.temperature, unit_system)
    return "\n".join([
        f"Weather in {snapshot.location.name}, {snapshot.location.country_code}",
        f"Temperature: {temp}°{temperature_symbol(unit_system)}",
        f"Conditions: {snapshot.condition_description}",
        f"Wind: {snapshot.wind_speed} m/s",
        f"Humidity: {snapshot.humidity:g}%",
    ])
