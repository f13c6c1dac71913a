"""Monday-anchored week keys ("YYYY-Www") used as aggregation buckets.

Keys sort lexicographically in calendar order, so plain string comparison
gives the total order the streak tracker relies on.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

WeekKeyFunc = Callable[[datetime | date | None], str]


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def get_monday_week(when: datetime | date | None = None) -> str:
    """Week key for the Monday-to-Sunday week containing `when` (default: now, UTC)."""
    if when is None:
        when = datetime.now(timezone.utc)
    day = when.date() if isinstance(when, datetime) else when
    iso_year, iso_week, _ = monday_of(day).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def week_bounds(week_key: str) -> tuple[date, date]:
    """(monday, sunday) for a week key."""
    year_part, _, week_part = week_key.partition("-W")
    monday = date.fromisocalendar(int(year_part), int(week_part), 1)
    return monday, monday + timedelta(days=6)
