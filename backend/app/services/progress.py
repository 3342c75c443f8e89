from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

import numpy as np

from app.services.one_rm import estimate_one_rep_max
from app.services.prs import SetRecord
from app.utils.days import as_utc, local_day, local_day_start

TIMEFRAME_MONTHS = {"all": None, "6m": 6, "3m": 3, "1m": 1}
TREND_WINDOW_DAYS = 28

@dataclass(frozen=True, slots=True)
class DayPoint:
    day: date
    heaviest: float
    one_rm: float
    volume: float
    trend: float | None = None

def months_back(now: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier, clamped to the month's last day."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    next_month = date(year + (month == 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return now.replace(year=year, month=month, day=min(now.day, last_day))

def timeframe_start(timeframe: str, now: datetime) -> datetime | None:
    if timeframe not in TIMEFRAME_MONTHS:
        raise ValueError(f"unknown timeframe: {timeframe}")
    months = TIMEFRAME_MONTHS[timeframe]
    return None if months is None else months_back(now, months)

def daily_points(sets: Iterable[SetRecord], tz=timezone.utc, since: datetime | None = None) -> list[DayPoint]:
    """Heaviest weight, best estimated 1RM and total volume per local day, successful sets only."""
    by_day: dict[date, DayPoint] = {}
    for s in sets:
        if s.failed:
            continue
        if since is not None and s.effective_at < as_utc(since):
            continue
        day = local_day(s.effective_at, tz)
        cur = by_day.get(day)
        one_rm = estimate_one_rep_max(s.weight, s.reps)
        if cur is None:
            by_day[day] = DayPoint(day, float(s.weight), one_rm, s.volume)
        else:
            by_day[day] = DayPoint(
                day,
                max(cur.heaviest, float(s.weight)),
                max(cur.one_rm, one_rm),
                cur.volume + s.volume,
            )
    return [by_day[d] for d in sorted(by_day)]

def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())  # Monday

def with_trend(points: list[DayPoint]) -> list[DayPoint]:
    """
    Trend of the heaviest weight at each point: average the heaviest values per
    Monday-started week over the trailing 28 days, fit a straight line through
    the weekly averages and read it at the latest week. Needs two weeks of data.
    """
    if len(points) < 2:
        return points

    out = []
    for point in points:
        window_start = point.day - timedelta(days=TREND_WINDOW_DAYS)
        weekly: dict[date, list[float]] = {}
        for p in points:
            if window_start <= p.day <= point.day:
                weekly.setdefault(_week_start(p.day), []).append(p.heaviest)
        if len(weekly) < 2:
            out.append(point)
            continue
        averages = [float(np.mean(weekly[week])) for week in sorted(weekly)]
        x = np.arange(len(averages))
        slope, intercept = np.polyfit(x, averages, 1)
        trend = slope * x[-1] + intercept
        out.append(replace(point, trend=max(0.0, float(trend))))
    return out

def day_iso(day: date, tz) -> str:
    return as_utc(local_day_start(day, tz)).isoformat()
