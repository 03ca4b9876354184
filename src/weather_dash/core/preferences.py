"""Persistent user preferences, search history and saved locations.

Each logical record lives under one fixed key as a JSON string, so the
store works on any string key/value backend. Writes replace a whole
record at once: a failed operation leaves the previous value in place.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from weather_dash.config import MAX_SAVED_LOCATIONS, MAX_SEARCH_HISTORY
from weather_dash.errors import (
    CapacityExceeded, DuplicateLocation, IndexOutOfRange, LocationNotFound
)
from weather_dash.weather.models import Preferences, SavedLocation, Theme, UnitSystem

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "theme": "weather_theme",
    "unit": "weather_unit",
    "last_city": "weather_last_city",
    "search_history": "weather_search_history",
    "saved_locations": "weather_saved_locations",
}

PREFERENCES_TABLE = "preferences"


class KeyValueStorage(ABC):
    """String key/value backend."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    def close(self) -> None:
        pass


class InMemoryStorage(KeyValueStorage):
    """Volatile backend, mostly useful for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteStorage(KeyValueStorage):
    """Single-table SQLite backend."""

    def __init__(self, db_path: str | Path):
        db_file = Path(db_path)
        if not db_file.is_absolute():
            db_file = Path.cwd() / db_file
        db_file.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_file)
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA busy_timeout=5000;")
        self.conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {PREFERENCES_TABLE} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        row = self.conn.execute(
            f"SELECT value FROM {PREFERENCES_TABLE} WHERE key = ?",
            (key,),
        ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.conn:
            self.conn.execute(
                f"""
                INSERT INTO {PREFERENCES_TABLE} (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                  value=excluded.value
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self.conn:
            self.conn.execute(f"DELETE FROM {PREFERENCES_TABLE} WHERE key = ?", (key,))

    def close(self) -> None:
        self.conn.close()


class PreferenceStore:
    """Typed access to the five persisted preference records."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def _read(self, key: str, default: Any) -> Any:
        raw = self.storage.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable preference record '{key}': {e}")
            return default

    def _write(self, key: str, value: Any) -> None:
        self.storage.set(key, json.dumps(value))

    # Scalar preferences

    def get_preferences(self) -> Preferences:
        unit = self._read(STORAGE_KEYS["unit"], UnitSystem.METRIC.value)
        theme = self._read(STORAGE_KEYS["theme"], Theme.LIGHT.value)
        last_city = self._read(STORAGE_KEYS["last_city"], None)
        try:
            return Preferences(unit_system=unit, theme=theme, last_city=last_city)
        except ValidationError as e:
            logger.warning(f"Stored preferences are invalid, using defaults: {e}")
            return Preferences(last_city=last_city if isinstance(last_city, str) else None)

    def set_unit_system(self, unit_system: UnitSystem) -> None:
        self._write(STORAGE_KEYS["unit"], UnitSystem(unit_system).value)

    def set_theme(self, theme: Theme) -> None:
        self._write(STORAGE_KEYS["theme"], Theme(theme).value)

    def set_last_city(self, city: str) -> None:
        self._write(STORAGE_KEYS["last_city"], city)

    # Search history

    def get_search_history(self) -> List[str]:
        history = self._read(STORAGE_KEYS["search_history"], [])
        return [city for city in history if isinstance(city, str)]

    def add_search_history(self, city: str) -> List[str]:
        """Move `city` to the front, replacing any case-insensitive match.

        Returns:
            The updated history, most recent first
        """
        history = [entry for entry in self.get_search_history() if entry.lower() != city.lower()]
        history.insert(0, city)
        history = history[:MAX_SEARCH_HISTORY]
        self._write(STORAGE_KEYS["search_history"], history)
        return history

    def clear_search_history(self) -> None:
        self.storage.delete(STORAGE_KEYS["search_history"])

    # Saved locations

    def get_saved_locations(self) -> List[SavedLocation]:
        locations = []
        for raw in self._read(STORAGE_KEYS["saved_locations"], []):
            try:
                locations.append(SavedLocation.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid saved location {raw!r}: {e}")
        return locations

    def _write_saved_locations(self, locations: List[SavedLocation]) -> None:
        self._write(STORAGE_KEYS["saved_locations"], [loc.model_dump() for loc in locations])

    def can_save_location(self, name: str) -> bool:
        locations = self.get_saved_locations()
        return len(locations) < MAX_SAVED_LOCATIONS and all(loc.name != name for loc in locations)

    def add_saved_location(self, location: SavedLocation) -> List[SavedLocation]:
        """Append a location.

        Raises:
            CapacityExceeded: If the list already holds the maximum
            DuplicateLocation: If a location with the same name is saved
        """
        locations = self.get_saved_locations()
        if len(locations) >= MAX_SAVED_LOCATIONS:
            raise CapacityExceeded(f"Maximum {MAX_SAVED_LOCATIONS} locations can be saved")
        if any(loc.name == location.name for loc in locations):
            raise DuplicateLocation(f"'{location.name}' is already saved")
        locations.append(location)
        self._write_saved_locations(locations)
        logger.info(f"Saved location '{location.name}' ({len(locations)}/{MAX_SAVED_LOCATIONS})")
        return locations

    def remove_saved_location(self, index: int) -> SavedLocation:
        """Remove the location at a position.

        Raises:
            IndexOutOfRange: If no location exists at `index`
        """
        locations = self.get_saved_locations()
        if not 0 <= index < len(locations):
            raise IndexOutOfRange(f"No saved location at position {index}")
        removed = locations.pop(index)
        self._write_saved_locations(locations)
        return removed

    def remove_saved_location_by_name(self, name: str) -> SavedLocation:
        """Remove the location with the given name.

        Raises:
            LocationNotFound: If no saved location has that name
        """
        locations = self.get_saved_locations()
        for index, location in enumerate(locations):
            if location.name == name:
                del locations[index]
                self._write_saved_locations(locations)
                return location
        raise LocationNotFound(f"'{name}' is not a saved location")

    def update_saved_temperature(self, name: str, temperature: float) -> None:
        """Record a fresh temperature for a saved location, if still saved."""
        locations = self.get_saved_locations()
        updated = [
            loc.model_copy(update={"last_known_temp": temperature}) if loc.name == name else loc
            for loc in locations
        ]
        if updated != locations:
            self._write_saved_locations(updated)
