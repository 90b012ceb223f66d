from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence

import mysql.connector

from ..core.enums import DayStatus
from ..core.exceptions import DuplicateIdentityError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, mysql_time_to_hhmm
from .model import BreakInterval, DayRecord
from .repository import DayRecordRepository

_COLUMNS = "record_id, account_id, work_date, work_time, total_break_time, status, last_activity"


def _row_to_record(row: dict, breaks: Sequence[BreakInterval]) -> DayRecord:
    return DayRecord(
        record_id=int(row["record_id"]),
        account_id=int(row["account_id"]),
        work_date=row["work_date"],
        work_time=int(row.get("work_time") or 0),
        breaks=tuple(breaks),
        total_break_time=int(row.get("total_break_time") or 0),
        status=DayStatus(row["status"]),
        last_activity=row.get("last_activity"),
    )


def _row_to_break(row: dict) -> BreakInterval:
    return BreakInterval(
        start=mysql_time_to_hhmm(row["start_time"]),
        end=mysql_time_to_hhmm(row.get("end_time")),
        duration=int(row.get("duration") or 0),
    )


class MySQLDayRecordRepository(DayRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_breaks(self, cur, record_ids: Sequence[int]) -> Dict[int, List[BreakInterval]]:
        out: Dict[int, List[BreakInterval]] = {rid: [] for rid in record_ids}
        if not record_ids:
            return out

        placeholders = ",".join(["%s"] * len(record_ids))
        cur.execute(
            f"""
            SELECT record_id, position, start_time, end_time, duration
            FROM break_intervals
            WHERE record_id IN ({placeholders})
            ORDER BY record_id ASC, position ASC
            """,
            tuple(record_ids),
        )
        for r in fetchall(cur):
            out[int(r["record_id"])].append(_row_to_break(r))
        return out

    def _write_breaks(self, cur, record_id: int, breaks: Sequence[BreakInterval]) -> None:
        cur.execute("DELETE FROM break_intervals WHERE record_id=%s", (record_id,))
        for position, b in enumerate(breaks):
            cur.execute(
                """
                INSERT INTO break_intervals(record_id, position, start_time, end_time, duration)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (record_id, position, b.start, b.end, int(b.duration)),
            )

    def get_for_account_and_date(self, account_id: int, work_date: date) -> Optional[DayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM day_records WHERE account_id=%s AND work_date=%s",
                (account_id, work_date),
            )
            row = fetchone(cur)
            if not row:
                return None
            record_id = int(row["record_id"])
            breaks = self._load_breaks(cur, [record_id])
            return _row_to_record(row, breaks[record_id])

    def create(self, record: DayRecord) -> DayRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO day_records(account_id, work_date, work_time, total_break_time, status, last_activity)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.account_id,
                        record.work_date,
                        int(record.work_time),
                        int(record.total_break_time),
                        record.status.value,
                        record.last_activity,
                    ),
                )
                record_id = int(cur.lastrowid)
                self._write_breaks(cur, record_id, record.breaks)
                return replace(record, record_id=record_id)
        except mysql.connector.IntegrityError as exc:
            raise DuplicateIdentityError(
                f"A day record already exists for user {record.account_id} on {record.date_key}"
            ) from exc

    def save(self, record: DayRecord) -> None:
        if record.record_id is None:
            raise ValueError("Cannot save a day record that was never created")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE day_records
                SET work_time=%s, total_break_time=%s, status=%s, last_activity=%s
                WHERE record_id=%s
                """,
                (
                    int(record.work_time),
                    int(record.total_break_time),
                    record.status.value,
                    record.last_activity,
                    record.record_id,
                ),
            )
            self._write_breaks(cur, record.record_id, record.breaks)

    def list_for_account_between(self, account_id: int, start: date, end: date) -> Sequence[DayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM day_records
                WHERE account_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (account_id, start, end),
            )
            rows = fetchall(cur)
            breaks = self._load_breaks(cur, [int(r["record_id"]) for r in rows])
            return [_row_to_record(r, breaks[int(r["record_id"])]) for r in rows]
