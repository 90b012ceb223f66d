from __future__ import annotations

from datetime import date, datetime

import pytest

from src.break_tracker.break_tracker.core.enums import DayStatus
from src.break_tracker.break_tracker.core.exceptions import (
    DuplicateIdentityError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.break_tracker.break_tracker.ledger.model import empty_record
from src.break_tracker.break_tracker.ledger.service import LedgerService

DAY = date(2026, 2, 18)


def test_get_or_create_is_idempotent(records_repo, fixed_now):
    ledger = LedgerService(records_repo)

    first = ledger.get_or_create(1, DAY, now=fixed_now)
    second = ledger.get_or_create(1, DAY, now=fixed_now)

    assert first.record_id == second.record_id
    assert records_repo.creates == 1
    assert first.status == DayStatus.INACTIVE
    assert first.work_time == 0
    assert first.breaks == ()


def test_store_rejects_second_record_for_same_day(records_repo):
    records_repo.create(empty_record(1, DAY))

    with pytest.raises(DuplicateIdentityError):
        records_repo.create(empty_record(1, DAY))


def test_get_or_create_recovers_when_create_loses_a_race(records_repo, fixed_now):
    class RacyRecords:
        """First lookup misses; meanwhile another request inserted the row."""

        def __init__(self, inner):
            self._inner = inner
            self._misses = 1

        def get_for_account_and_date(self, account_id, work_date):
            if self._misses:
                self._misses -= 1
                return None
            return self._inner.get_for_account_and_date(account_id, work_date)

        def create(self, record):
            return self._inner.create(record)

    records_repo.create(empty_record(1, DAY))
    ledger = LedgerService(RacyRecords(records_repo))

    record = ledger.get_or_create(1, DAY, now=fixed_now)

    assert record.record_id == 1
    assert records_repo.creates == 1


def test_break_start_then_end_completes_the_day(records_repo, fixed_now):
    ledger = LedgerService(records_repo)

    started = ledger.record_break_start(1, DAY, "09:00", now=fixed_now)
    assert started.status == DayStatus.BREAK
    assert started.open_break is not None

    ended = ledger.record_break_end(1, DAY, "09:30", now=fixed_now)
    assert ended.status == DayStatus.COMPLETED
    assert ended.breaks[0].duration == 30
    assert ended.total_break_time == 30
    assert records_repo.get_for_account_and_date(1, DAY) == ended


def test_second_open_break_is_rejected(records_repo, fixed_now):
    ledger = LedgerService(records_repo)
    ledger.record_break_start(1, DAY, "09:00", now=fixed_now)

    with pytest.raises(InvalidStateError):
        ledger.record_break_start(1, DAY, "09:05", now=fixed_now)

    assert len(records_repo.get_for_account_and_date(1, DAY).breaks) == 1


def test_end_without_open_break_raises_not_found(records_repo, fixed_now):
    ledger = LedgerService(records_repo)

    with pytest.raises(NotFoundError):
        ledger.record_break_end(1, DAY, "10:00", now=fixed_now)

    ledger.get_or_create(1, DAY, now=fixed_now)
    with pytest.raises(NotFoundError):
        ledger.record_break_end(1, DAY, "10:00", now=fixed_now)


def test_total_break_time_tracks_every_interval(records_repo, fixed_now):
    ledger = LedgerService(records_repo)

    for start, end in [("09:00", "09:10"), ("12:00", "12:45"), ("16:30", "16:20")]:
        ledger.record_break_start(1, DAY, start, now=fixed_now)
        record = ledger.record_break_end(1, DAY, end, now=fixed_now)
        assert record.total_break_time == sum(b.duration for b in record.breaks)

    assert [b.duration for b in record.breaks] == [10, 45, 0]
    assert record.total_break_time == 55


@pytest.mark.parametrize("value", ["9.00", "24:00", "12:60", "", "noon"])
def test_malformed_times_are_rejected(records_repo, fixed_now, value):
    ledger = LedgerService(records_repo)

    with pytest.raises(ValidationError):
        ledger.record_break_start(1, DAY, value, now=fixed_now)


def test_monthly_records_use_real_month_end(records_repo, fixed_now):
    ledger = LedgerService(records_repo)
    for d in [date(2026, 1, 31), date(2026, 2, 1), date(2026, 2, 28), date(2026, 3, 1)]:
        ledger.get_or_create(1, d, now=fixed_now)
    ledger.get_or_create(2, date(2026, 2, 10), now=fixed_now)

    records = ledger.monthly_records(1, 2026, 2)

    assert [r.work_date for r in records] == [date(2026, 2, 1), date(2026, 2, 28)]


def test_set_work_time_marks_day_active(records_repo, fixed_now):
    ledger = LedgerService(records_repo)

    record = ledger.set_work_time(1, DAY, 45, now=datetime(2026, 2, 18, 10, 0))

    assert record.work_time == 45
    assert record.status == DayStatus.ACTIVE
    assert record.last_activity == datetime(2026, 2, 18, 10, 0)
