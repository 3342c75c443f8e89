from __future__ import annotations
from datetime import date, datetime
from typing import Iterable

from app.utils.days import local_day

def recent_days(times: Iterable[datetime], tz, limit: int = 30) -> list[date]:
    """Distinct local days in the order the (newest-first) timestamps arrive."""
    seen: set[date] = set()
    days: list[date] = []
    for at in times:
        day = local_day(at, tz)
        if day not in seen:
            seen.add(day)
            days.append(day)
            if len(days) >= limit:
                break
    return days

def exercise_badges(rows: Iterable[tuple[datetime, str]], tz, days: Iterable[date]) -> dict[str, list[str]]:
    """Local day (YYYY-MM-DD) -> sorted distinct exercise labels trained that day."""
    wanted = set(days)
    badges: dict[str, set[str]] = {}
    for at, label in rows:
        day = local_day(at, tz)
        if day in wanted:
            badges.setdefault(day.isoformat(), set()).add(label)
    return {day: sorted(labels) for day, labels in sorted(badges.items())}
