from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..accounts.model import Account
from ..accounts.service import AccountService
from ..common.datetime_utils import at_clock, is_hhmm, month_bounds, now_local
from ..core.enums import DayStatus, StatsPeriod
from ..core.exceptions import (
    DuplicateIdentityError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .model import BreakInterval, DayRecord, empty_record, recompute
from .repository import DayRecordRepository
from .stats import PeriodStats, period_start, summarize

logger = logging.getLogger(__name__)


def _require_time(value: str, field_name: str) -> str:
    if not is_hhmm(value):
        raise ValidationError(f"Valid {field_name} is required (HH:mm format)")
    return value


class LedgerService:
    """Per-account, per-day ledger of work time and breaks."""

    def __init__(self, records: DayRecordRepository):
        self._records = records

    def find(self, account_id: int, work_date: date) -> Optional[DayRecord]:
        return self._records.get_for_account_and_date(account_id, work_date)

    def get_or_create(self, account_id: int, work_date: date, *, now: datetime | None = None) -> DayRecord:
        existing = self._records.get_for_account_and_date(account_id, work_date)
        if existing:
            return existing

        now = now or now_local()
        try:
            return self._records.create(recompute(empty_record(account_id, work_date), now=now))
        except DuplicateIdentityError:
            # Lost a race with a concurrent create: the store kept the other one.
            existing = self._records.get_for_account_and_date(account_id, work_date)
            if not existing:
                raise
            return existing

    def record_break_start(
        self,
        account_id: int,
        work_date: date,
        start_time: str,
        *,
        now: datetime | None = None,
    ) -> DayRecord:
        _require_time(start_time, "start time")
        now = now or now_local()

        record = self.get_or_create(account_id, work_date, now=now)
        if record.open_break is not None:
            raise InvalidStateError("A break is already in progress for this day")

        record = replace(
            record,
            breaks=record.breaks + (BreakInterval(start=start_time),),
            status=DayStatus.BREAK,
        )
        record = recompute(record, now=now)
        self._records.save(record)
        return record

    def record_break_end(
        self,
        account_id: int,
        work_date: date,
        end_time: str,
        *,
        now: datetime | None = None,
    ) -> DayRecord:
        _require_time(end_time, "end time")
        now = now or now_local()

        record = self._records.get_for_account_and_date(account_id, work_date)
        if not record:
            raise NotFoundError("No daily record found for this date")

        breaks = list(record.breaks)
        index = next((i for i, b in enumerate(breaks) if b.is_open), None)
        if index is None:
            raise NotFoundError("No active break found")

        breaks[index] = breaks[index].close(end_time)
        status = DayStatus.BREAK if any(b.is_open for b in breaks) else DayStatus.COMPLETED

        record = recompute(replace(record, breaks=tuple(breaks), status=status), now=now)
        self._records.save(record)
        return record

    def set_work_time(
        self,
        account_id: int,
        work_date: date,
        minutes: int,
        *,
        now: datetime | None = None,
    ) -> DayRecord:
        now = now or now_local()
        record = self.get_or_create(account_id, work_date, now=now)
        record = recompute(replace(record, work_time=max(0, int(minutes)), status=DayStatus.ACTIVE), now=now)
        self._records.save(record)
        return record

    def records_between(self, account_id: int, start: date, end: date) -> Sequence[DayRecord]:
        return sorted(self._records.list_for_account_between(account_id, start, end), key=lambda r: r.work_date)

    def monthly_records(self, account_id: int, year: int, month: int) -> Sequence[DayRecord]:
        start, end = month_bounds(year, month)
        return self.records_between(account_id, start, end)


@dataclass(frozen=True)
class TrackingSnapshot:
    account: Account
    record: DayRecord


@dataclass(frozen=True)
class StatsReport:
    period: StatsPeriod
    start_date: date
    end_date: date
    stats: PeriodStats


@dataclass(frozen=True)
class MonthlyReport:
    account: Account
    year: int
    month: int
    records: Sequence[DayRecord]

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class TrackingService:
    """Use cases behind the tracking endpoints: keeps account and ledger in step."""

    def __init__(self, accounts: AccountService, ledger: LedgerService):
        self._accounts = accounts
        self._ledger = ledger

    def start_break(
        self,
        account_id: int,
        start_time: str,
        *,
        work_date: date | None = None,
        now: datetime | None = None,
    ) -> TrackingSnapshot:
        now = now or now_local()
        account = self._accounts.get(account_id)
        if account.on_break:
            raise InvalidStateError("You are already on a break")

        record = self._ledger.record_break_start(account_id, work_date or now.date(), start_time, now=now)
        account = self._accounts.start_break(
            account_id,
            started_at=at_clock(record.work_date, start_time),
            now=now,
        )
        logger.info("Account %s started a break at %s on %s", account_id, start_time, record.date_key)
        return TrackingSnapshot(account=account, record=record)

    def end_break(
        self,
        account_id: int,
        end_time: str,
        *,
        work_date: date | None = None,
        now: datetime | None = None,
    ) -> TrackingSnapshot:
        now = now or now_local()
        account = self._accounts.get(account_id)
        if not account.on_break:
            raise InvalidStateError("You are not currently on a break")

        if work_date is None:
            # The open interval lives on the day the break started.
            started = account.current_break_start
            work_date = started.date() if started else now.date()

        record = self._ledger.record_break_end(account_id, work_date, end_time, now=now)
        account = self._accounts.end_break(account_id, now=now)
        logger.info("Account %s ended a break at %s on %s", account_id, end_time, record.date_key)
        return TrackingSnapshot(account=account, record=record)

    def today(self, account_id: int, *, work_date: date | None = None) -> TrackingSnapshot:
        """Read-only: a missing record is returned as an unsaved empty one."""
        account = self._accounts.get(account_id)
        work_date = work_date or now_local().date()
        record = self._ledger.find(account_id, work_date) or empty_record(account_id, work_date)
        return TrackingSnapshot(account=account, record=record)

    def update_work_time(self, account_id: int, minutes: int, *, now: datetime | None = None) -> TrackingSnapshot:
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 0:
            raise ValidationError("Valid minutes value is required")

        now = now or now_local()
        self._accounts.get(account_id)
        today_record = self._ledger.get_or_create(account_id, now.date(), now=now)

        # A new day starts from that day's record, not from yesterday's total.
        account = self._accounts.add_work_time(
            account_id,
            minutes,
            current_total=today_record.work_time,
            now=now,
        )
        record = self._ledger.set_work_time(account_id, now.date(), account.daily_work_time, now=now)
        return TrackingSnapshot(account=account, record=record)

    def stats(self, account_id: int, period: StatsPeriod | str = StatsPeriod.WEEK, *, now: datetime | None = None) -> StatsReport:
        try:
            period = StatsPeriod(period)
        except ValueError:
            raise ValidationError("Period must be one of: week, month, year")

        today = (now or now_local()).date()
        self._accounts.get(account_id)
        start = period_start(period, today)
        records = self._ledger.records_between(account_id, start, today)
        return StatsReport(period=period, start_date=start, end_date=today, stats=summarize(records))

    def monthly_for_account(self, account_id: int, year: int, month: int) -> MonthlyReport:
        account = self._accounts.find(account_id)
        if not account:
            raise NotFoundError("User not found")
        records = self._ledger.monthly_records(account_id, year, month)
        return MonthlyReport(account=account, year=year, month=month, records=records)

    def monthly_for_all(self, year: int, month: int) -> list[MonthlyReport]:
        return [
            MonthlyReport(
                account=account,
                year=year,
                month=month,
                records=self._ledger.monthly_records(account.account_id, year, month),
            )
            for account in self._accounts.list_accounts()
        ]
