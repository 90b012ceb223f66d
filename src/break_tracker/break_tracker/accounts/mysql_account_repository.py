from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AccountStatus
from ..core.exceptions import DuplicateIdentityError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account
from .repository import AccountRepository

_COLUMNS = """
    account_id, name, email, password_hash, avatar, status, current_break_start,
    daily_work_time, last_active_date, created_at, updated_at
"""


def _row_to_account(row: dict) -> Account:
    return Account(
        account_id=int(row["account_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        avatar=row.get("avatar"),
        status=AccountStatus(row["status"]),
        current_break_start=row.get("current_break_start"),
        daily_work_time=int(row.get("daily_work_time") or 0),
        last_active_date=row.get("last_active_date"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, account_id: int) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE account_id=%s", (account_id,))
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def list_all(self) -> Sequence[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts ORDER BY name ASC, account_id ASC")
            return [_row_to_account(r) for r in fetchall(cur)]

    def create_account(self, *, name: str, email: str, password_hash: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO accounts(name, email, password_hash, status, daily_work_time)
                    VALUES(%s,%s,%s,%s,0)
                    """,
                    (name, email, password_hash, AccountStatus.INACTIVE.value),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            raise DuplicateIdentityError("User with this email already exists") from exc

    def save(self, account: Account) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE accounts
                    SET name=%s, email=%s, password_hash=%s, avatar=%s, status=%s,
                        current_break_start=%s, daily_work_time=%s, last_active_date=%s
                    WHERE account_id=%s
                    """,
                    (
                        account.name,
                        account.email,
                        account.password_hash,
                        account.avatar,
                        account.status.value,
                        account.current_break_start,
                        int(account.daily_work_time),
                        account.last_active_date,
                        account.account_id,
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            raise DuplicateIdentityError("Email is already taken") from exc
