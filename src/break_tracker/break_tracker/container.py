from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .accounts.mysql_account_repository import MySQLAccountRepository
from .accounts.repository import AccountRepository
from .accounts.service import AccountService, AuthService
from .accounts.tokens import TokenService
from .core.constants import DEFAULT_TOKEN_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .ledger.mysql_day_record_repository import MySQLDayRecordRepository
from .ledger.repository import DayRecordRepository
from .ledger.service import LedgerService, TrackingService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    accounts_repo: AccountRepository
    day_records_repo: DayRecordRepository

    token_service: TokenService
    auth_service: AuthService
    account_service: AccountService
    ledger_service: LedgerService
    tracking_service: TrackingService


def build_services(
    *,
    accounts_repo: AccountRepository,
    day_records_repo: DayRecordRepository,
    token_service: TokenService,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""
    ledger_service = LedgerService(day_records_repo)
    account_service = AccountService(accounts_repo)
    auth_service = AuthService(accounts_repo, token_service, ledger=ledger_service)
    tracking_service = TrackingService(account_service, ledger_service)

    return Container(
        conn=conn,
        accounts_repo=accounts_repo,
        day_records_repo=day_records_repo,
        token_service=token_service,
        auth_service=auth_service,
        account_service=account_service,
        ledger_service=ledger_service,
        tracking_service=tracking_service,
    )


def build_container(*, db_config: dict, jwt_secret: str, jwt_expires_days: int = DEFAULT_TOKEN_DAYS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        accounts_repo=MySQLAccountRepository(conn),
        day_records_repo=MySQLDayRecordRepository(conn),
        token_service=TokenService(jwt_secret, expires_days=jwt_expires_days),
        conn=conn,
    )
