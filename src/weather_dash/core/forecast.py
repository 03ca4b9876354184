"""Daily aggregation of the 3-hourly forecast."""

import logging
import zoneinfo
from collections import defaultdict
from datetime import datetime, tzinfo
from typing import Dict, List, Optional, Sequence

from weather_dash.config import DAILY_FORECAST_DAYS
from weather_dash.weather.models import DayBucket, ForecastEntry

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Look up an IANA timezone; empty or None means system local time.

    Raises:
        ValueError: If the timezone name is unknown
    """
    if not name:
        return None
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{name}': {e}")


def local_time(timestamp: float, tz: Optional[tzinfo] = None) -> datetime:
    """Wall-clock time of an epoch timestamp for the observer."""
    if tz is None:
        return datetime.fromtimestamp(timestamp).astimezone()
    return datetime.fromtimestamp(timestamp, tz)


def group_by_date(
    entries: Sequence[ForecastEntry],
    tz: Optional[tzinfo] = None
) -> Dict[str, List[ForecastEntry]]:
    """Group entries by local calendar date, keeping first-seen key order.

    Args:
        entries: Forecast samples in provider order
        tz: Observer timezone (system local if None)

    Returns:
        Dictionary mapping YYYY-MM-DD keys to member entries
    """
    daily_data: Dict[str, List[ForecastEntry]] = defaultdict(list)
    for entry in entries:
        date_key = local_time(entry.timestamp, tz).strftime("%Y-%m-%d")
        daily_data[date_key].append(entry)
    return dict(daily_data)


def aggregate_daily(
    entries: Sequence[ForecastEntry],
    tz: Optional[tzinfo] = None,
    days: int = DAILY_FORECAST_DAYS
) -> List[DayBucket]:
    """Summarize the forecast into at most `days` calendar-day buckets.

    The representative condition of a day is that of its first sample.
    Days past the limit are dropped.
    """
    grouped = group_by_date(entries, tz)
    buckets = []
    for date_key, members in list(grouped.items())[:days]:
        temps = [member.temperature for member in members]
        first = members[0]
        buckets.append(DayBucket(
            date=date_key,
            min_temp=min(temps),
            max_temp=max(temps),
            avg_temp=sum(temps) / len(temps),
            condition_category=first.condition_category,
            condition_description=first.condition_description,
            condition_icon=first.condition_icon,
        ))

    if len(grouped) > days:
        logger.debug(f"Dropped {len(grouped) - days} forecast day(s) past the {days}-day window")
    return buckets


def first_n_hours(entries: Sequence[ForecastEntry], n: int) -> List[ForecastEntry]:
    """The next `n` forecast samples, not re-bucketed."""
    return list(entries[:n])
