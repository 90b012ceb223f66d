from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DayRecord


class DayRecordRepository(Protocol):
    """Repository interface for day records.

    The store owns the (account_id, work_date) uniqueness: ``create`` raises
    ``DuplicateIdentityError`` if a record for that pair already exists.
    """

    def get_for_account_and_date(self, account_id: int, work_date: date) -> Optional[DayRecord]:
        raise NotImplementedError

    def create(self, record: DayRecord) -> DayRecord:
        """Insert a record (with its breaks) and return it with ``record_id`` set."""

        raise NotImplementedError

    def save(self, record: DayRecord) -> None:
        """Persist every field and the full break list of an existing record."""

        raise NotImplementedError

    def list_for_account_between(self, account_id: int, start: date, end: date) -> Sequence[DayRecord]:
        """Records with ``start <= work_date <= end``, ascending by date."""

        raise NotImplementedError
