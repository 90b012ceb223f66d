from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from ..core.constants import WEEK_LOOKBACK_DAYS
from ..core.enums import StatsPeriod
from .model import DayRecord, record_dict


@dataclass(frozen=True)
class PeriodStats:
    total_work_time: int = 0
    total_break_time: int = 0
    total_days: int = 0
    average_work_time: int = 0
    average_break_time: int = 0
    most_productive_day: Optional[DayRecord] = None
    least_productive_day: Optional[DayRecord] = None

    def to_dict(self) -> dict:
        return {
            "totalWorkTime": self.total_work_time,
            "totalBreakTime": self.total_break_time,
            "totalDays": self.total_days,
            "averageWorkTime": self.average_work_time,
            "averageBreakTime": self.average_break_time,
            "mostProductiveDay": record_dict(self.most_productive_day) if self.most_productive_day else None,
            "leastProductiveDay": record_dict(self.least_productive_day) if self.least_productive_day else None,
        }


def period_start(period: StatsPeriod, today: date) -> date:
    """First day included in a stats period; every period runs through ``today``."""
    if period == StatsPeriod.MONTH:
        return today.replace(day=1)
    if period == StatsPeriod.YEAR:
        return date(today.year, 1, 1)
    return today - timedelta(days=WEEK_LOOKBACK_DAYS)


def _round_half_up(total: int, count: int) -> int:
    return (2 * total + count) // (2 * count)


def summarize(records: Sequence[DayRecord]) -> PeriodStats:
    if not records:
        return PeriodStats()

    ordered = sorted(records, key=lambda r: r.work_date)
    total_work = sum(r.work_time for r in ordered)
    total_break = sum(r.total_break_time for r in ordered)
    count = len(ordered)

    # max()/min() keep the first match, so ties go to the earliest date.
    most = max(ordered, key=lambda r: r.work_time)
    least = min(ordered, key=lambda r: r.work_time)

    return PeriodStats(
        total_work_time=total_work,
        total_break_time=total_break,
        total_days=count,
        average_work_time=_round_half_up(total_work, count),
        average_break_time=_round_half_up(total_break, count),
        most_productive_day=most,
        least_productive_day=least,
    )
