"""
Date-key helpers.

A date key is the calendar day as `YYYY-MM-DD` in the configured zone
(`settings.TIMEZONE`, host local time when empty). Backend seeding and the
tracker both go through `today_key` so the two never disagree.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from dailyflow.core.config import settings

DATE_KEY_FORMAT = "%Y-%m-%d"


def local_zone() -> Optional[tzinfo]:
    """The configured IANA zone, or None to follow the host clock (and its DST rules)."""
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return None


def now() -> datetime:
    """Timezone-aware current instant in the configured zone."""
    zone = local_zone()
    if zone is None:
        return datetime.now().astimezone()
    return datetime.now(tz=zone)


def current_date() -> date:
    return now().date()


def to_key(day: date) -> str:
    return day.strftime(DATE_KEY_FORMAT)


def parse_key(key: str) -> date:
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def today_key(today: Optional[date] = None) -> str:
    return to_key(today or current_date())


def last_n_dates(n: int, today: Optional[date] = None) -> list[str]:
    """Return n date keys, oldest first, ending at today."""
    end = today or current_date()
    return [to_key(end - timedelta(days=i)) for i in range(n - 1, -1, -1)]


def weekday_labels(n: int, today: Optional[date] = None) -> list[str]:
    """Short weekday names ("Mon", "Tue", ...) for `last_n_dates(n)`."""
    return [parse_key(key).strftime("%a") for key in last_n_dates(n, today)]


def combine(key: str, hhmm: str) -> datetime:
    """Aware datetime for a date key plus an "HH:MM" time in the local zone."""
    day = parse_key(key)
    clock = time.fromisoformat(hhmm)
    zone = local_zone()
    if zone is None:
        # astimezone() on a naive value picks the offset in force on that day.
        return datetime.combine(day, clock).astimezone()
    return datetime.combine(day, clock, tzinfo=zone)
