from __future__ import annotations

from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    FieldRule,
    int_between,
    is_iso_date,
    is_non_negative_int,
    is_time_of_day,
    one_of,
)
from ..core.enums import StatsPeriod

_DATE_MESSAGE = "Date must be in ISO 8601 format (YYYY-MM-DD)"

START_BREAK_RULES = (
    FieldRule("startTime", (is_time_of_day,), "Start time must be in HH:mm format"),
    FieldRule("date", (is_iso_date,), _DATE_MESSAGE, optional=True, clean=parse_iso_date),
)

END_BREAK_RULES = (
    FieldRule("endTime", (is_time_of_day,), "End time must be in HH:mm format"),
    FieldRule("date", (is_iso_date,), _DATE_MESSAGE, optional=True, clean=parse_iso_date),
)

WORK_TIME_RULES = (
    FieldRule("minutes", (is_non_negative_int,), "Minutes must be a non-negative integer"),
)

DATE_QUERY_RULES = (
    FieldRule("date", (is_iso_date,), _DATE_MESSAGE, optional=True, clean=parse_iso_date),
)

PERIOD_QUERY_RULES = (
    FieldRule(
        "period",
        (one_of(*(p.value for p in StatsPeriod)),),
        "Period must be one of: week, month, year",
        optional=True,
        clean=StatsPeriod,
    ),
)

MONTH_QUERY_RULES = (
    FieldRule("month", (int_between(1, 12),), "Month must be between 1 and 12", optional=True, clean=int),
    FieldRule("year", (int_between(1970, 9999),), "Year must be a valid year", optional=True, clean=int),
)

USER_ID_RULES = (
    FieldRule("userId", (int_between(1, 2**31 - 1),), "Invalid user ID format", clean=int),
)
