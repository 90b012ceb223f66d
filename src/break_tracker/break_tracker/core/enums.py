from __future__ import annotations

from enum import Enum


class AccountStatus(str, Enum):
    """Activity status of an account."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    BREAK = "break"


class DayStatus(str, Enum):
    """Status of a per-day ledger record."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    BREAK = "break"
    COMPLETED = "completed"


class StatsPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
