"""Dashboard orchestration: fetch, derive, render.

One controller owns the current snapshot and the display settings. Each
location lookup runs `Idle -> Loading -> Ready | Failed`; a successful
primary fetch starts the secondary sections (forecast, air quality, UV,
alerts) side by side, and a failing secondary section only degrades
itself. Every lookup takes a new sequence token, and responses carrying
an older token are dropped, so a slow earlier lookup can never overwrite
a later one.
"""

import asyncio
import logging
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from weather_dash.config import (
    CARD_HOURS, CHART_HOURS, DEFAULT_CITY, DISPLAY_TIMEZONE, PREFERENCES_DB_PATH, PROXY_BASE_URL
)
from weather_dash.core import metrics
from weather_dash.core.alerts import evaluate_alerts
from weather_dash.core.forecast import aggregate_daily, first_n_hours, resolve_timezone
from weather_dash.core.preferences import PreferenceStore, SqliteStorage
from weather_dash.dashboard import views
from weather_dash.dashboard.client import ProxyClient
from weather_dash.errors import ComparisonUnavailable, NetworkFailure, PreferenceStoreError
from weather_dash.weather.models import (
    AirQualitySample, Alert, ChartType, DataSource, ForecastEntry, SavedLocation,
    Theme, UnitSystem, UvReading, WeatherSnapshot, parse_forecast
)

logger = logging.getLogger(__name__)

FALLBACK_AQI = 50
FALLBACK_AQI_CATEGORY = "Moderate"
MIN_COMPARISON_LOCATIONS = 2


class LookupStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class DashboardState(BaseModel):
    """Everything the controller currently displays."""
    status: LookupStatus = LookupStatus.IDLE
    error: Optional[str] = None
    snapshot: Optional[WeatherSnapshot] = None
    forecast: List[ForecastEntry] = []
    air_quality: Optional[AirQualitySample] = None
    uv: Optional[UvReading] = None
    alerts: List[Alert] = []
    unit_system: UnitSystem = UnitSystem.METRIC
    theme: Theme = Theme.LIGHT
    chart_type: ChartType = ChartType.TEMPERATURE


class Renderer:
    """Rendering surface. Every method receives display-ready values.

    The base implementation ignores everything; subclasses override the
    sections they draw.
    """

    def render_loading(self) -> None:
        pass

    def render_error(self, message: str) -> None:
        pass

    def render_notice(self, message: str) -> None:
        pass

    def render_current(self, view: views.CurrentView) -> None:
        pass

    def render_sun(self, view: views.SunView) -> None:
        pass

    def render_forecast(self, days: List[views.ForecastDayView]) -> None:
        pass

    def render_chart(self, view: views.ChartView) -> None:
        pass

    def render_hourly_cards(self, cards: List[views.HourlyCardView]) -> None:
        pass

    def render_air_quality(self, sample: AirQualitySample) -> None:
        pass

    def render_uv(self, reading: UvReading) -> None:
        pass

    def render_alerts(self, alerts: List[Alert]) -> None:
        pass

    def render_saved_locations(self, locations: List[views.SavedLocationView]) -> None:
        pass

    def render_search_history(self, history: List[str]) -> None:
        pass


def fallback_air_quality() -> AirQualitySample:
    return AirQualitySample(
        aqi=FALLBACK_AQI,
        category=FALLBACK_AQI_CATEGORY,
        source=DataSource.FALLBACK,
    )


def parse_air_quality(data: Dict[str, Any]) -> AirQualitySample:
    """Derive an AQI sample from an air-pollution payload.

    Raises:
        ValueError: If the payload carries no measurement
    """
    try:
        components = data["list"][0]["components"]
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"Invalid air quality payload: {e}")
    if not isinstance(components, dict):
        raise ValueError(f"Invalid air quality components: {components!r}")
    pm25 = components.get("pm2_5") or 0
    try:
        aqi = metrics.pm25_to_aqi(pm25)
    except TypeError as e:
        raise ValueError(f"Invalid PM2.5 value {pm25!r}: {e}")
    return AirQualitySample(
        pm2_5=pm25,
        aqi=aqi,
        category=metrics.aqi_category(aqi),
        components=components,
        source=DataSource.MEASURED,
    )


def parse_uv(data: Dict[str, Any]) -> UvReading:
    """Read the UV index from a One Call payload.

    Raises:
        ValueError: If the payload has no current block
    """
    try:
        index = data["current"].get("uvi") or 0
        category = metrics.uv_category(index)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid UV payload: {e}")
    return UvReading(index=index, category=category, source=DataSource.MEASURED)


class DashboardController:
    """Owns dashboard state and drives the renderer."""

    def __init__(
        self,
        client: ProxyClient,
        store: PreferenceStore,
        renderer: Optional[Renderer] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """Initialize the controller.

        Args:
            client: Proxy client used for every fetch
            store: Persistent preferences
            renderer: Rendering surface (a silent one if None)
            tz: Observer timezone (system local if None)
            clock: Returns the current time; aware datetimes expected
        """
        self.client = client
        self.store = store
        self.renderer = renderer or Renderer()
        self.tz = tz
        self.clock = clock or self._system_now
        self.state = DashboardState()
        self._sequence = 0

    def _system_now(self) -> datetime:
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)

    def _is_current(self, token: int, snapshot: Optional[WeatherSnapshot] = None) -> bool:
        """Whether a response still belongs to the displayed lookup.

        A section fetched for `snapshot` is also stale once another
        snapshot has replaced it, even under the same token.
        """
        if token != self._sequence:
            logger.debug(f"Discarding response for superseded lookup {token} (latest {self._sequence})")
            return False
        if snapshot is not None and self.state.snapshot is not snapshot:
            logger.debug(f"Discarding response for {snapshot.location.name}, no longer displayed")
            return False
        return True

    # Startup and lookups

    async def start(self) -> None:
        """Apply stored preferences, then load saved locations and the last city."""
        preferences = self.store.get_preferences()
        self.state.unit_system = preferences.unit_system
        self.state.theme = preferences.theme
        self.renderer.render_search_history(self.store.get_search_history())
        self._render_saved_locations()

        city = preferences.last_city or DEFAULT_CITY
        logger.info(f"Starting dashboard with {city} ({preferences.unit_system.value}, {preferences.theme.value})")
        await asyncio.gather(self.refresh_saved_locations(), self.lookup_city(city))

    async def lookup_city(self, city: str) -> None:
        if not city or not city.strip():
            self.renderer.render_error("Please enter a city name")
            return
        await self._lookup(
            lambda: self.client.weather_by_city(city.strip()),
            "City not found. Please try again."
        )

    async def lookup_coordinates(self, lat: float, lon: float) -> None:
        await self._lookup(
            lambda: self.client.weather_by_coordinates(lat, lon),
            "Unable to fetch weather for your location"
        )

    def geolocation_failed(self) -> None:
        """Report that the device position could not be obtained."""
        self.renderer.render_error("Unable to retrieve your location")

    async def _lookup(self, fetch: Callable[[], Awaitable[Dict[str, Any]]], failure_message: str) -> None:
        self._sequence += 1
        token = self._sequence

        self.state.status = LookupStatus.LOADING
        self.state.error = None
        self.renderer.render_loading()

        try:
            snapshot = WeatherSnapshot.from_provider(await fetch())
        except (NetworkFailure, ValueError) as e:
            if not self._is_current(token):
                return
            logger.error(f"Lookup {token} failed: {e}")
            self.state.status = LookupStatus.FAILED
            self.state.error = failure_message
            self.renderer.render_error(failure_message)
            return

        if not self._is_current(token):
            return

        self.state.snapshot = snapshot
        self.state.forecast = []
        self.state.status = LookupStatus.READY
        logger.info(f"Lookup {token} ready: {snapshot.location.name}, {snapshot.location.country_code}")

        self._render_current()
        self.renderer.render_sun(views.sun_view(snapshot, self.clock().timestamp(), self.tz))

        self.renderer.render_search_history(self.store.add_search_history(snapshot.location.name))
        self.store.set_last_city(snapshot.location.name)

        await asyncio.gather(
            self._load_forecast(token),
            self._load_air_quality(token),
            self._load_uv(token),
            self._load_alerts(token),
        )

    # Secondary sections

    async def _load_forecast(self, token: int) -> None:
        snapshot = self.state.snapshot
        try:
            entries = parse_forecast(
                await self.client.forecast(snapshot.location.lat, snapshot.location.lon)
            )
        except (NetworkFailure, ValueError) as e:
            if self._is_current(token, snapshot):
                logger.warning(f"Forecast unavailable for {snapshot.location.name}: {e}")
                self.renderer.render_forecast([])
            return

        if not self._is_current(token, snapshot):
            return
        self.state.forecast = entries
        self._render_forecast()
        self._render_hourly()

    async def _load_air_quality(self, token: int) -> None:
        snapshot = self.state.snapshot
        try:
            sample = parse_air_quality(
                await self.client.air_pollution(snapshot.location.lat, snapshot.location.lon)
            )
        except (NetworkFailure, ValueError) as e:
            logger.warning(f"Air quality unavailable for {snapshot.location.name}, using fallback: {e}")
            sample = fallback_air_quality()

        if not self._is_current(token):
            return
        self.state.air_quality = sample
        self.renderer.render_air_quality(sample)

    async def _load_uv(self, token: int) -> None:
        snapshot = self.state.snapshot
        try:
            reading = parse_uv(await self.client.onecall(snapshot.location.lat, snapshot.location.lon))
        except (NetworkFailure, ValueError) as e:
            logger.warning(f"UV index unavailable for {snapshot.location.name}, estimating: {e}")
            index = metrics.estimate_uv_index(self.clock())
            reading = UvReading(index=index, category=metrics.uv_category(index), source=DataSource.ESTIMATED)

        if not self._is_current(token):
            return
        self.state.uv = reading
        self.renderer.render_uv(reading)

    async def _load_alerts(self, token: int) -> None:
        if not self._is_current(token):
            return
        self._render_alerts()

    # Rendering from held state

    def _render_current(self) -> None:
        snapshot = self.state.snapshot
        if snapshot is None:
            return
        self.renderer.render_current(views.current_view(
            snapshot,
            self.state.unit_system,
            self.clock(),
            can_save=self.store.can_save_location(snapshot.location.name),
        ))

    def _render_alerts(self) -> None:
        if self.state.snapshot is None:
            return
        self.state.alerts = evaluate_alerts(self.state.snapshot, self.state.unit_system)
        self.renderer.render_alerts(self.state.alerts)

    def _render_forecast(self) -> None:
        buckets = aggregate_daily(self.state.forecast, self.tz)
        self.renderer.render_forecast(views.forecast_views(buckets, self.state.unit_system))

    def _render_chart(self) -> None:
        if not self.state.forecast:
            return
        self.renderer.render_chart(views.chart_view(
            first_n_hours(self.state.forecast, CHART_HOURS),
            self.state.chart_type,
            self.state.unit_system,
            self.state.theme,
            self.tz,
        ))

    def _render_hourly(self) -> None:
        self._render_chart()
        self.renderer.render_hourly_cards(views.hourly_cards(
            first_n_hours(self.state.forecast, CARD_HOURS),
            self.state.unit_system,
            self.clock(),
            self.tz,
        ))

    def _render_saved_locations(self) -> None:
        self.renderer.render_saved_locations(
            views.saved_location_views(self.store.get_saved_locations(), self.state.unit_system)
        )

    # Display settings

    async def toggle_unit(self) -> UnitSystem:
        """Switch unit systems.

        Values derived from the held snapshot are re-rendered without a
        fetch; the forecast is requested again because it is not kept
        pre-converted.
        """
        unit_system = (
            UnitSystem.IMPERIAL if self.state.unit_system == UnitSystem.METRIC else UnitSystem.METRIC
        )
        self.state.unit_system = unit_system
        self.store.set_unit_system(unit_system)

        self._render_current()
        self._render_alerts()
        self._render_saved_locations()
        if self.state.snapshot is not None:
            await self._load_forecast(self._sequence)
        return unit_system

    def toggle_theme(self) -> Theme:
        theme = Theme.LIGHT if self.state.theme == Theme.DARK else Theme.DARK
        self.state.theme = theme
        self.store.set_theme(theme)
        self._render_chart()
        return theme

    def set_chart_type(self, chart_type: ChartType) -> None:
        self.state.chart_type = ChartType(chart_type)
        self._render_chart()

    def hourly_detail(self, index: int) -> views.HourlyDetailView:
        """Detail for one of the hourly cards.

        Raises:
            IndexError: If no card exists at `index`
        """
        entries = first_n_hours(self.state.forecast, CARD_HOURS)
        return views.hourly_detail(index, entries[index], self.state.unit_system, self.clock(), self.tz)

    # Search history

    def search_history(self) -> List[str]:
        return self.store.get_search_history()

    def clear_search_history(self) -> None:
        self.store.clear_search_history()
        self.renderer.render_search_history([])

    # Saved locations

    def save_current_location(self) -> Optional[SavedLocation]:
        """Bookmark the displayed location; failures become a notice."""
        if self.state.snapshot is None:
            self.renderer.render_notice("No weather data to save")
            return None

        location = SavedLocation.from_snapshot(self.state.snapshot)
        try:
            self.store.add_saved_location(location)
        except PreferenceStoreError as e:
            logger.info(f"Could not save {location.name}: {e}")
            self.renderer.render_notice(str(e))
            return None

        self._render_saved_locations()
        self._render_current()
        return location

    def remove_saved_location(self, name: str) -> Optional[SavedLocation]:
        """Remove a bookmark by its name."""
        try:
            removed = self.store.remove_saved_location_by_name(name)
        except PreferenceStoreError as e:
            self.renderer.render_notice(str(e))
            return None

        self._render_saved_locations()
        self._render_current()
        return removed

    async def _refresh_saved_location(self, location: SavedLocation) -> None:
        try:
            data = await self.client.weather_by_coordinates(location.lat, location.lon)
            temperature = data["main"]["temp"]
        except (NetworkFailure, KeyError, TypeError) as e:
            logger.warning(f"Keeping cached temperature for {location.name}: {e}")
            return
        self.store.update_saved_temperature(location.name, temperature)

    async def refresh_saved_locations(self) -> None:
        """Fetch fresh temperatures for every bookmark, then redraw them."""
        locations = self.store.get_saved_locations()
        if locations:
            await asyncio.gather(*(self._refresh_saved_location(location) for location in locations))
        self._render_saved_locations()

    async def compare_saved_locations(self) -> List[views.ComparisonCard]:
        """Current conditions for every saved location, in saved order.

        Locations whose fetch fails are left out.

        Raises:
            ComparisonUnavailable: If fewer than two locations are saved
        """
        locations = self.store.get_saved_locations()
        if len(locations) < MIN_COMPARISON_LOCATIONS:
            raise ComparisonUnavailable("Please save at least 2 locations to compare weather.")

        async def fetch(location: SavedLocation) -> Optional[WeatherSnapshot]:
            try:
                data = await self.client.weather_by_coordinates(location.lat, location.lon)
                return WeatherSnapshot.from_provider(data)
            except (NetworkFailure, ValueError) as e:
                logger.error(f"Error fetching comparison data for {location.name}: {e}")
                return None

        snapshots = await asyncio.gather(*(fetch(location) for location in locations))
        return [
            views.comparison_card(snapshot, self.state.unit_system)
            for snapshot in snapshots
            if snapshot is not None
        ]

    def share_text(self) -> Optional[str]:
        if self.state.snapshot is None:
            self.renderer.render_notice("No weather data to share")
            return None
        return views.share_text(self.state.snapshot, self.state.unit_system)

    async def aclose(self):
        """Close the proxy client and the preference storage."""
        await self.client.aclose()
        self.store.storage.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def create_controller(renderer: Optional[Renderer] = None) -> DashboardController:
    """Controller wired to the configured proxy, preference database and timezone."""
    return DashboardController(
        client=ProxyClient(PROXY_BASE_URL),
        store=PreferenceStore(SqliteStorage(PREFERENCES_DB_PATH)),
        renderer=renderer,
        tz=resolve_timezone(DISPLAY_TIMEZONE),
    )
