from __future__ import annotations

from flask import Flask, g, request

from ..accounts.guard import build_token_required
from ..accounts.service import profile_dict
from ..common.datetime_utils import format_iso_date, now_local
from ..common.http import json_body, ok
from ..common.validators import validate
from ..container import Container
from ..core.constants import DEFAULT_STATS_PERIOD
from .model import record_dict
from .service import MonthlyReport, TrackingSnapshot
from .validation import (
    DATE_QUERY_RULES,
    END_BREAK_RULES,
    MONTH_QUERY_RULES,
    PERIOD_QUERY_RULES,
    START_BREAK_RULES,
    USER_ID_RULES,
    WORK_TIME_RULES,
)


def _snapshot(s: TrackingSnapshot) -> dict:
    return {"user": profile_dict(s.account), "dayRecord": record_dict(s.record)}


def _calendar(report: MonthlyReport) -> dict:
    return {
        r.date_key: {
            "workTime": r.work_time,
            "breaks": [{"start": b.start, "end": b.end, "duration": b.duration} for b in r.breaks],
            "totalBreakTime": r.total_break_time,
            "status": r.status.value,
        }
        for r in report.records
    }


def _target_month() -> tuple[int, int]:
    query = validate(request.args, MONTH_QUERY_RULES)
    today = now_local().date()
    # Both parts are needed to pick another month; otherwise use the current one.
    if "month" in query and "year" in query:
        return query["year"], query["month"]
    return today.year, today.month


def register(app: Flask, container: Container) -> None:
    token_required = build_token_required(container)
    tracking = container.tracking_service

    @app.route("/api/tracking/start-break", methods=["POST"], endpoint="tracking_start_break")
    @token_required
    def tracking_start_break():
        data = validate(json_body(), START_BREAK_RULES)
        snap = tracking.start_break(g.account.account_id, data["startTime"], work_date=data.get("date"))
        return ok("Break started successfully", _snapshot(snap))

    @app.route("/api/tracking/end-break", methods=["POST"], endpoint="tracking_end_break")
    @token_required
    def tracking_end_break():
        data = validate(json_body(), END_BREAK_RULES)
        snap = tracking.end_break(g.account.account_id, data["endTime"], work_date=data.get("date"))
        return ok("Break ended successfully", _snapshot(snap))

    @app.route("/api/tracking/today", methods=["GET"], endpoint="tracking_today")
    @token_required
    def tracking_today():
        query = validate(request.args, DATE_QUERY_RULES)
        snap = tracking.today(g.account.account_id, work_date=query.get("date"))
        return ok("Today's data retrieved successfully", _snapshot(snap))

    @app.route("/api/tracking/stats", methods=["GET"], endpoint="tracking_stats")
    @token_required
    def tracking_stats():
        query = validate(request.args, PERIOD_QUERY_RULES)
        report = tracking.stats(g.account.account_id, query.get("period", DEFAULT_STATS_PERIOD))
        return ok(
            "User statistics retrieved successfully",
            {
                "period": report.period.value,
                "startDate": format_iso_date(report.start_date),
                "endDate": format_iso_date(report.end_date),
                "stats": report.stats.to_dict(),
            },
        )

    @app.route("/api/tracking/work-time", methods=["PUT"], endpoint="tracking_work_time")
    @token_required
    def tracking_work_time():
        data = validate(json_body(), WORK_TIME_RULES)
        snap = tracking.update_work_time(g.account.account_id, data["minutes"])
        return ok("Work time updated successfully", _snapshot(snap))

    @app.route("/api/tracking/users", methods=["GET"], endpoint="tracking_users")
    @token_required
    def tracking_users():
        users = [profile_dict(a) for a in container.account_service.list_accounts()]
        return ok("Users retrieved successfully", {"users": users})

    @app.route("/api/tracking/user/<user_id>/monthly", methods=["GET"], endpoint="tracking_user_monthly")
    @token_required
    def tracking_user_monthly(user_id: str):
        account_id = validate({"userId": user_id}, USER_ID_RULES)["userId"]
        year, month = _target_month()
        report = tracking.monthly_for_account(account_id, year, month)
        return ok(
            "Monthly data retrieved successfully",
            {
                "user": {
                    "id": report.account.account_id,
                    "name": report.account.name,
                    "email": report.account.email,
                    "avatar": report.account.avatar,
                    "status": report.account.status.value,
                },
                "month": report.month_key,
                "data": _calendar(report),
            },
        )

    @app.route("/api/tracking/monthly", methods=["GET"], endpoint="tracking_monthly")
    @token_required
    def tracking_monthly():
        year, month = _target_month()
        reports = tracking.monthly_for_all(year, month)
        return ok(
            "All users monthly data retrieved successfully",
            {
                "month": f"{year:04d}-{month:02d}",
                "users": {
                    str(r.account.account_id): {"name": r.account.name, "data": _calendar(r)}
                    for r in reports
                },
            },
        )
