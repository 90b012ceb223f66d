from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Tuple

from ..common.datetime_utils import format_duration, format_iso_date, hhmm_to_minutes
from ..core.enums import DayStatus


@dataclass(frozen=True)
class BreakInterval:
    """One break inside a day record. ``end is None`` means the break is still open."""

    start: str
    end: Optional[str] = None
    duration: int = 0

    @property
    def is_open(self) -> bool:
        return self.end is None

    def close(self, end: str) -> "BreakInterval":
        duration = max(0, hhmm_to_minutes(end) - hhmm_to_minutes(self.start))
        return replace(self, end=end, duration=duration)


@dataclass(frozen=True)
class DayRecord:
    """Domain entity: one ledger record per (account, calendar date)."""

    record_id: Optional[int]
    account_id: int
    work_date: date
    work_time: int = 0
    breaks: Tuple[BreakInterval, ...] = ()
    total_break_time: int = 0
    status: DayStatus = DayStatus.INACTIVE
    last_activity: Optional[datetime] = None

    @property
    def date_key(self) -> str:
        return format_iso_date(self.work_date)

    @property
    def open_break(self) -> Optional[BreakInterval]:
        return next((b for b in self.breaks if b.is_open), None)

    @property
    def total_active_time(self) -> int:
        return self.work_time + self.total_break_time

    @property
    def formatted_work_time(self) -> str:
        return format_duration(self.work_time)

    @property
    def formatted_total_break_time(self) -> str:
        return format_duration(self.total_break_time)


def empty_record(account_id: int, work_date: date) -> DayRecord:
    return DayRecord(record_id=None, account_id=account_id, work_date=work_date)


def recompute(record: DayRecord, *, now: datetime) -> DayRecord:
    """Derive the fields that must never be set directly.

    Every mutating ledger operation passes its result through here before saving.
    """
    total = sum(b.duration for b in record.breaks)
    return replace(record, total_break_time=total, last_activity=now)


def record_dict(record: DayRecord) -> dict:
    return {
        "id": record.record_id,
        "userId": record.account_id,
        "date": record.date_key,
        "workTime": record.work_time,
        "breaks": [{"start": b.start, "end": b.end, "duration": b.duration} for b in record.breaks],
        "totalBreakTime": record.total_break_time,
        "status": record.status.value,
        "lastActivity": record.last_activity.isoformat() if record.last_activity else None,
        "formattedWorkTime": record.formatted_work_time,
        "formattedTotalBreakTime": record.formatted_total_break_time,
        "totalActiveTime": record.total_active_time,
    }
