"""
Unit tests for forecast parsing and daily aggregation.
"""

from zoneinfo import ZoneInfo

import pytest

from payloads import JAN_1_2024, THREE_HOURS, forecast_item, forecast_payload

from weather_dash.core.forecast import aggregate_daily, first_n_hours, group_by_date, resolve_timezone
from weather_dash.weather.models import ForecastEntry, parse_forecast

UTC = ZoneInfo("UTC")


def entries(count, start=JAN_1_2024, temps=None):
    return parse_forecast(forecast_payload(count=count, start=start, temps=temps))


class TestAggregateDaily:
    """Test calendar-day bucketing."""

    def test_six_days_yield_five_buckets(self):
        buckets = aggregate_daily(entries(48), UTC)

        assert [bucket.date for bucket in buckets] == [
            "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05",
        ]

    def test_min_max_mean(self):
        temps = [4.0, 8.0, 6.0, 2.0, 10.0, 12.0, 0.0, 6.0]
        bucket = aggregate_daily(entries(8, temps=temps), UTC)[0]

        assert bucket.min_temp == 0.0
        assert bucket.max_temp == 12.0
        assert bucket.avg_temp == pytest.approx(6.0)

    def test_representative_condition_is_first_member(self):
        payload = {"list": [
            forecast_item(JAN_1_2024, condition="Clear", icon="01d"),
            forecast_item(JAN_1_2024 + THREE_HOURS, condition="Rain", icon="10d"),
            forecast_item(JAN_1_2024 + 2 * THREE_HOURS, condition="Rain", icon="10d"),
        ]}
        bucket = aggregate_daily(parse_forecast(payload), UTC)[0]

        assert bucket.condition_category == "Clear"
        assert bucket.condition_icon == "01d"

    def test_buckets_follow_observer_timezone(self):
        # 00:00 and 03:00 UTC fall on Dec 31 in New York
        buckets = aggregate_daily(entries(8), ZoneInfo("America/New_York"))

        assert [bucket.date for bucket in buckets] == ["2023-12-31", "2024-01-01"]

    def test_first_seen_order_kept(self):
        grouped = group_by_date(entries(16), UTC)

        assert list(grouped) == ["2024-01-01", "2024-01-02"]
        assert all(len(members) == 8 for members in grouped.values())

    def test_empty_forecast(self):
        assert aggregate_daily([], UTC) == []


class TestFirstNHours:
    """Test the raw prefix used for the hourly views."""

    def test_prefix_without_rebucketing(self):
        sample = entries(40)

        assert first_n_hours(sample, 8) == sample[:8]
        assert len(first_n_hours(sample, 12)) == 12

    def test_short_forecast(self):
        assert len(first_n_hours(entries(3), 8)) == 3


class TestParsing:
    """Test provider payload parsing."""

    def test_parse_entry_fields(self):
        entry = ForecastEntry.from_provider(forecast_item(JAN_1_2024, temp=7.5, pop=0.35))

        assert entry.timestamp == JAN_1_2024
        assert entry.temperature == 7.5
        assert entry.precipitation_probability == 0.35
        assert entry.condition_category == "Clouds"

    def test_missing_list_is_rejected(self):
        with pytest.raises(ValueError):
            parse_forecast({"cod": "200"})

    def test_malformed_entry_is_rejected(self):
        with pytest.raises(ValueError):
            ForecastEntry.from_provider({"dt": JAN_1_2024})

    def test_resolve_timezone(self):
        assert resolve_timezone("") is None
        assert resolve_timezone("UTC") == UTC
        with pytest.raises(ValueError):
            resolve_timezone("Not/AZone")
