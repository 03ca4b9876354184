"""
Unit tests for the preference store and its storage backends.
"""

import json

import pytest

from weather_dash.core.preferences import (
    STORAGE_KEYS,
    InMemoryStorage,
    KeyValueStorage,
    PreferenceStore,
    SqliteStorage,
)
from weather_dash.errors import (
    CapacityExceeded,
    DuplicateLocation,
    IndexOutOfRange,
    LocationNotFound,
)
from weather_dash.weather.models import SavedLocation, Theme, UnitSystem


def location(name, temp=10.0):
    return SavedLocation(name=name, country_code="XX", lat=1.0, lon=2.0, last_known_temp=temp)


@pytest.fixture
def store():
    return PreferenceStore(InMemoryStorage())


class TestScalarPreferences:
    """Test unit system, theme and last city."""

    def test_defaults(self, store):
        preferences = store.get_preferences()

        assert preferences.unit_system == UnitSystem.METRIC
        assert preferences.theme == Theme.LIGHT
        assert preferences.last_city is None

    def test_overwrite(self, store):
        store.set_unit_system(UnitSystem.IMPERIAL)
        store.set_theme(Theme.DARK)
        store.set_last_city("Oslo")
        store.set_last_city("Bergen")

        preferences = store.get_preferences()
        assert preferences.unit_system == UnitSystem.IMPERIAL
        assert preferences.theme == Theme.DARK
        assert preferences.last_city == "Bergen"

    def test_records_are_json_encoded(self):
        storage = InMemoryStorage()
        PreferenceStore(storage).set_theme(Theme.DARK)

        assert json.loads(storage.get(STORAGE_KEYS["theme"])) == "dark"

    def test_corrupt_records_fall_back_to_defaults(self):
        storage = InMemoryStorage({
            STORAGE_KEYS["unit"]: "{not json",
            STORAGE_KEYS["theme"]: json.dumps("purple"),
        })

        preferences = PreferenceStore(storage).get_preferences()
        assert preferences.unit_system == UnitSystem.METRIC
        assert preferences.theme == Theme.LIGHT


class TestSearchHistory:
    """Test bounded, case-insensitive search history."""

    def test_case_insensitive_dedup_keeps_newest_spelling(self, store):
        store.add_search_history("London")
        history = store.add_search_history("london")

        assert history == ["london"]

    def test_most_recent_first_and_bounded(self, store):
        for city in ["A", "B", "C", "D", "E", "F"]:
            store.add_search_history(city)

        assert store.get_search_history() == ["F", "E", "D", "C", "B"]

    def test_repeat_moves_to_front(self, store):
        for city in ["Paris", "Rome", "Berlin"]:
            store.add_search_history(city)
        store.add_search_history("PARIS")

        assert store.get_search_history() == ["PARIS", "Berlin", "Rome"]

    def test_clear_deletes_record(self):
        storage = InMemoryStorage()
        store = PreferenceStore(storage)
        store.add_search_history("Paris")
        store.clear_search_history()

        assert storage.get(STORAGE_KEYS["search_history"]) is None
        assert store.get_search_history() == []


class TestSavedLocations:
    """Test the bounded saved-location list."""

    def test_sixth_location_exceeds_capacity(self, store):
        for index in range(5):
            store.add_saved_location(location(f"City {index}"))

        with pytest.raises(CapacityExceeded):
            store.add_saved_location(location("City 5"))
        assert len(store.get_saved_locations()) == 5

    def test_duplicate_name_rejected(self, store):
        store.add_saved_location(location("Lima"))

        with pytest.raises(DuplicateLocation):
            store.add_saved_location(location("Lima", temp=20.0))
        assert [loc.name for loc in store.get_saved_locations()] == ["Lima"]

    def test_names_are_case_sensitive(self, store):
        store.add_saved_location(location("Lima"))
        store.add_saved_location(location("LIMA"))

        assert len(store.get_saved_locations()) == 2

    def test_remove_by_index(self, store):
        for name in ["A", "B", "C"]:
            store.add_saved_location(location(name))

        removed = store.remove_saved_location(1)

        assert removed.name == "B"
        assert [loc.name for loc in store.get_saved_locations()] == ["A", "C"]

    @pytest.mark.parametrize("index", [-1, 1, 7])
    def test_remove_invalid_index(self, store, index):
        store.add_saved_location(location("A"))

        with pytest.raises(IndexOutOfRange):
            store.remove_saved_location(index)
        assert len(store.get_saved_locations()) == 1

    def test_remove_by_name(self, store):
        for name in ["A", "B"]:
            store.add_saved_location(location(name))

        store.remove_saved_location_by_name("A")

        assert [loc.name for loc in store.get_saved_locations()] == ["B"]
        with pytest.raises(LocationNotFound):
            store.remove_saved_location_by_name("A")

    def test_can_save_location(self, store):
        assert store.can_save_location("A")
        store.add_saved_location(location("A"))
        assert not store.can_save_location("A")

    def test_update_saved_temperature(self, store):
        store.add_saved_location(location("A", temp=1.0))
        store.update_saved_temperature("A", 21.5)
        store.update_saved_temperature("missing", 5.0)

        assert store.get_saved_locations()[0].last_known_temp == 21.5


class TestSqliteStorage:
    """Test that preferences survive a reconnect."""

    def test_round_trip(self, tmp_path):
        db_path = tmp_path / "prefs.db"

        storage = SqliteStorage(db_path)
        store = PreferenceStore(storage)
        store.set_unit_system(UnitSystem.IMPERIAL)
        store.add_search_history("Tokyo")
        store.add_saved_location(location("Tokyo"))
        storage.close()

        storage = SqliteStorage(db_path)
        store = PreferenceStore(storage)
        assert store.get_preferences().unit_system == UnitSystem.IMPERIAL
        assert store.get_search_history() == ["Tokyo"]
        assert store.get_saved_locations()[0].name == "Tokyo"

        store.clear_search_history()
        assert storage.get(STORAGE_KEYS["search_history"]) is None
        storage.close()


class TestKeyValueStorage:
    """Test the backend interface."""

    def test_incomplete_backend_cannot_be_created(self):
        class ReadOnlyStorage(KeyValueStorage):
            def get(self, key):
                return None

        with pytest.raises(TypeError):
            ReadOnlyStorage()

    def test_in_memory_close_is_harmless(self):
        storage = InMemoryStorage({"k": "v"})
        storage.close()

        assert storage.get("k") == "v"
