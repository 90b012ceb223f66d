from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.break_tracker.break_tracker.core.enums import AccountStatus, DayStatus, StatsPeriod
from src.break_tracker.break_tracker.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.break_tracker.break_tracker.ledger.model import DayRecord, empty_record


def _seed(records_repo, account_id: int, work_date: date, work_time: int, total_break: int = 0) -> DayRecord:
    return records_repo.add(
        DayRecord(
            record_id=None,
            account_id=account_id,
            work_date=work_date,
            work_time=work_time,
            total_break_time=total_break,
            status=DayStatus.ACTIVE,
        )
    )


def test_login_then_single_break_scenario(container, alice, fixed_now):
    result = container.auth_service.authenticate("a@x.com", "pw12345", now=fixed_now)
    assert result.account.status == AccountStatus.ACTIVE

    started = container.tracking_service.start_break(alice.account_id, "09:00", now=fixed_now)
    assert started.account.status == AccountStatus.BREAK
    assert started.account.current_break_start == fixed_now
    assert started.record.status == DayStatus.BREAK

    ended = container.tracking_service.end_break(
        alice.account_id, "09:30", now=fixed_now + timedelta(minutes=30)
    )
    assert ended.account.status == AccountStatus.ACTIVE
    assert ended.account.current_break_start is None
    assert ended.record.breaks[0].duration == 30
    assert ended.record.status == DayStatus.COMPLETED
    assert ended.record.total_break_time == 30


def test_start_break_twice_is_invalid(container, alice, fixed_now):
    container.tracking_service.start_break(alice.account_id, "09:00", now=fixed_now)

    with pytest.raises(InvalidStateError):
        container.tracking_service.start_break(alice.account_id, "09:10", now=fixed_now)


def test_end_break_when_not_on_break_is_invalid(container, alice, fixed_now):
    with pytest.raises(InvalidStateError):
        container.tracking_service.end_break(alice.account_id, "09:10", now=fixed_now)


def test_end_break_defaults_to_the_day_the_break_started(container, alice, records_repo, fixed_now):
    container.tracking_service.start_break(alice.account_id, "23:40", now=fixed_now.replace(hour=23, minute=40))
    next_morning = fixed_now + timedelta(days=1)

    snap = container.tracking_service.end_break(alice.account_id, "23:55", now=next_morning)

    assert snap.record.work_date == fixed_now.date()
    assert snap.record.total_break_time == 15
    assert records_repo.get_for_account_and_date(alice.account_id, next_morning.date()) is None


def test_dated_break_is_ended_on_its_own_record(container, alice, records_repo, fixed_now):
    yesterday = fixed_now.date() - timedelta(days=1)

    started = container.tracking_service.start_break(alice.account_id, "09:00", work_date=yesterday, now=fixed_now)
    assert started.account.current_break_start.date() == yesterday

    ended = container.tracking_service.end_break(alice.account_id, "09:30", now=fixed_now)

    assert ended.record.work_date == yesterday
    assert ended.record.status == DayStatus.COMPLETED
    assert ended.record.total_break_time == 30
    assert ended.account.status == AccountStatus.ACTIVE
    assert records_repo.get_for_account_and_date(alice.account_id, fixed_now.date()) is None


def test_logout_closes_a_dated_break_and_frees_the_day(container, alice, records_repo, fixed_now):
    yesterday = fixed_now.date() - timedelta(days=1)
    container.tracking_service.start_break(alice.account_id, "09:00", work_date=yesterday, now=fixed_now)

    account = container.auth_service.end_session(alice.account_id, now=fixed_now)

    assert account.status == AccountStatus.INACTIVE
    record = records_repo.get_for_account_and_date(alice.account_id, yesterday)
    assert record.open_break is None
    assert record.status == DayStatus.COMPLETED
    assert record.breaks[0].end == "23:59"

    container.auth_service.authenticate("a@x.com", "pw12345", now=fixed_now)
    again = container.tracking_service.start_break(alice.account_id, "10:00", work_date=yesterday, now=fixed_now)
    assert len(again.record.breaks) == 2


def test_failed_ledger_step_leaves_account_untouched(container, alice, records_repo, fixed_now):
    with pytest.raises(ValidationError):
        container.tracking_service.start_break(alice.account_id, "25:00", now=fixed_now)

    assert container.account_service.get(alice.account_id).status == AccountStatus.INACTIVE


def test_update_work_time_accumulates_and_mirrors(container, alice, fixed_now):
    container.tracking_service.update_work_time(alice.account_id, 60, now=fixed_now)
    snap = container.tracking_service.update_work_time(alice.account_id, 30, now=fixed_now)

    assert snap.account.daily_work_time == 90
    assert snap.record.work_time == 90
    assert snap.record.status == DayStatus.ACTIVE


def test_update_work_time_starts_over_on_a_new_day(container, alice, fixed_now):
    container.tracking_service.update_work_time(alice.account_id, 120, now=fixed_now)

    snap = container.tracking_service.update_work_time(alice.account_id, 15, now=fixed_now + timedelta(days=1))

    assert snap.account.daily_work_time == 15
    assert snap.record.work_time == 15


@pytest.mark.parametrize("minutes", [-1, True, 1.5, "10"])
def test_update_work_time_rejects_bad_minutes(container, alice, fixed_now, minutes):
    with pytest.raises(ValidationError):
        container.tracking_service.update_work_time(alice.account_id, minutes, now=fixed_now)


def test_today_does_not_create_a_record(container, alice, records_repo, fixed_now):
    snap = container.tracking_service.today(alice.account_id, work_date=fixed_now.date())

    assert snap.record == empty_record(alice.account_id, fixed_now.date())
    assert records_repo.creates == 0


def test_weekly_stats_scenario(container, alice, records_repo, fixed_now):
    today = fixed_now.date()
    _seed(records_repo, alice.account_id, today - timedelta(days=3), 10, 5)
    _seed(records_repo, alice.account_id, today - timedelta(days=2), 50, 20)
    _seed(records_repo, alice.account_id, today - timedelta(days=1), 30, 0)
    # outside the 7 day window
    _seed(records_repo, alice.account_id, today - timedelta(days=8), 500)

    report = container.tracking_service.stats(alice.account_id, "week", now=fixed_now)

    assert report.period == StatsPeriod.WEEK
    assert report.start_date == today - timedelta(days=7)
    assert report.end_date == today
    assert report.stats.total_days == 3
    assert report.stats.total_work_time == 90
    assert report.stats.average_work_time == 30
    assert report.stats.total_break_time == 25
    assert report.stats.average_break_time == 8
    assert report.stats.most_productive_day.work_time == 50
    assert report.stats.least_productive_day.work_time == 10


def test_stats_ties_go_to_the_earliest_day(container, alice, records_repo, fixed_now):
    today = fixed_now.date()
    first = _seed(records_repo, alice.account_id, today - timedelta(days=2), 40)
    _seed(records_repo, alice.account_id, today - timedelta(days=1), 40)

    stats = container.tracking_service.stats(alice.account_id, "week", now=fixed_now).stats

    assert stats.most_productive_day.record_id == first.record_id
    assert stats.least_productive_day.record_id == first.record_id


def test_month_and_year_periods(container, alice, records_repo, fixed_now):
    _seed(records_repo, alice.account_id, date(2026, 1, 20), 100)
    _seed(records_repo, alice.account_id, date(2026, 2, 1), 20)

    month = container.tracking_service.stats(alice.account_id, StatsPeriod.MONTH, now=fixed_now)
    year = container.tracking_service.stats(alice.account_id, StatsPeriod.YEAR, now=fixed_now)

    assert month.start_date == date(2026, 2, 1)
    assert month.stats.total_work_time == 20
    assert year.start_date == date(2026, 1, 1)
    assert year.stats.total_work_time == 120


def test_stats_without_records_are_zero(container, alice, fixed_now):
    stats = container.tracking_service.stats(alice.account_id, now=fixed_now).stats

    assert stats.total_days == 0
    assert stats.average_work_time == 0
    assert stats.most_productive_day is None


def test_unknown_period_is_rejected(container, alice, fixed_now):
    with pytest.raises(ValidationError):
        container.tracking_service.stats(alice.account_id, "decade", now=fixed_now)


def test_monthly_for_account_and_all(container, alice, records_repo):
    bob = container.auth_service.register(name="Bob", email="b@x.com", password="pw12345")
    _seed(records_repo, alice.account_id, date(2026, 2, 3), 60)
    _seed(records_repo, alice.account_id, date(2026, 2, 1), 30)
    _seed(records_repo, bob.account_id, date(2026, 3, 1), 90)

    mine = container.tracking_service.monthly_for_account(alice.account_id, 2026, 2)
    assert mine.month_key == "2026-02"
    assert [r.work_date.day for r in mine.records] == [1, 3]

    everyone = container.tracking_service.monthly_for_all(2026, 2)
    by_id = {r.account.account_id: r for r in everyone}
    assert set(by_id) == {alice.account_id, bob.account_id}
    assert len(by_id[bob.account_id].records) == 0


def test_monthly_for_unknown_account(container):
    with pytest.raises(NotFoundError):
        container.tracking_service.monthly_for_account(404, 2026, 2)
