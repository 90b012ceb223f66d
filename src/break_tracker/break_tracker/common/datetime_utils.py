from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta

from ..core.constants import DATE_FORMAT, TIME_FORMAT

HHMM_PATTERN = re.compile(r"([01]?\d|2[0-3]):[0-5]\d")

def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()

def format_iso_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)

def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()

def is_hhmm(value) -> bool:
    return isinstance(value, str) and bool(HHMM_PATTERN.fullmatch(value))

def hhmm_to_minutes(value: str) -> int:
    """Convert 'HH:MM' into minutes since midnight."""
    if not is_hhmm(value):
        raise ValueError(f"Invalid time string: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)

def clock_hhmm(moment: datetime) -> str:
    return moment.strftime(TIME_FORMAT)

def format_duration(minutes: int) -> str:
    """Human form used in API payloads, e.g. 95 -> '1h 35m'."""
    return f"{minutes // 60}h {minutes % 60}m"

def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)

def at_clock(day: date, hhmm: str) -> datetime:
    """Combine a calendar day with an 'HH:MM' clock time."""
    return datetime.combine(day, time()) + timedelta(minutes=hhmm_to_minutes(hhmm))
