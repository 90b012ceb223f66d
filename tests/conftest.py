from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.break_tracker.break_tracker.accounts.model import Account
from src.break_tracker.break_tracker.accounts.tokens import TokenService
from src.break_tracker.break_tracker.container import build_services
from src.break_tracker.break_tracker.core.exceptions import DuplicateIdentityError
from src.break_tracker.break_tracker.ledger.model import DayRecord


class InMemoryAccounts:
    """Dict-backed account store enforcing the unique email key."""

    def __init__(self):
        self._by_id: dict[int, Account] = {}
        self._next_id = 1

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._by_id.get(int(account_id))

    def get_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self._by_id.values() if a.email == email), None)

    def list_all(self):
        return list(self._by_id.values())

    def create_account(self, *, name: str, email: str, password_hash: str) -> int:
        if self.get_by_email(email):
            raise DuplicateIdentityError("User with this email already exists")
        account_id = self._next_id
        self._next_id += 1
        created = datetime(2026, 2, 1, 8, 0)
        self._by_id[account_id] = Account(
            account_id=account_id,
            name=name,
            email=email,
            password_hash=password_hash,
            last_active_date=created,
            created_at=created,
            updated_at=created,
        )
        return account_id

    def save(self, account: Account) -> None:
        other = self.get_by_email(account.email)
        if other and other.account_id != account.account_id:
            raise DuplicateIdentityError("Email is already taken")
        self._by_id[account.account_id] = account


class InMemoryDayRecords:
    """Dict-backed ledger store enforcing the (account, date) unique key."""

    def __init__(self):
        self._by_key: dict[tuple[int, date], DayRecord] = {}
        self._next_id = 1
        self.creates = 0

    def get_for_account_and_date(self, account_id: int, work_date: date) -> Optional[DayRecord]:
        return self._by_key.get((account_id, work_date))

    def create(self, record: DayRecord) -> DayRecord:
        key = (record.account_id, record.work_date)
        if key in self._by_key:
            raise DuplicateIdentityError("A day record already exists")
        record = replace(record, record_id=self._next_id)
        self._next_id += 1
        self.creates += 1
        self._by_key[key] = record
        return record

    def save(self, record: DayRecord) -> None:
        assert record.record_id is not None
        self._by_key[(record.account_id, record.work_date)] = record

    def list_for_account_between(self, account_id: int, start: date, end: date):
        items = [r for (aid, d), r in self._by_key.items() if aid == account_id and start <= d <= end]
        items.sort(key=lambda r: r.work_date)
        return items

    def add(self, record: DayRecord) -> DayRecord:
        return self.create(record)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 18, 9, 0, 0)


@pytest.fixture
def accounts_repo() -> InMemoryAccounts:
    return InMemoryAccounts()


@pytest.fixture
def records_repo() -> InMemoryDayRecords:
    return InMemoryDayRecords()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-jwt-secret", expires_days=7)


@pytest.fixture
def container(accounts_repo, records_repo, token_service):
    return build_services(
        accounts_repo=accounts_repo,
        day_records_repo=records_repo,
        token_service=token_service,
    )


@pytest.fixture
def alice(container) -> Account:
    return container.auth_service.register(name="Alice", email="a@x.com", password="pw12345")
