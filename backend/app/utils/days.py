from __future__ import annotations
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

def resolve_timezone(name: str | None, default: str = "UTC") -> ZoneInfo:
    """Raise ValueError for names the tz database does not know."""
    try:
        return ZoneInfo(name or default)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValueError(f"unknown timezone: {name}") from None

def as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def local_day(dt: datetime, tz) -> date:
    return as_utc(dt).astimezone(tz).date()

def local_day_start(day: date, tz) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)

def local_day_bounds(day: date, tz) -> tuple[datetime, datetime]:
    """[start, end) of a local day, in UTC, for range queries."""
    start = local_day_start(day, tz)
    end = local_day_start(date.fromordinal(day.toordinal() + 1), tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
