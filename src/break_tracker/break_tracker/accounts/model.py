from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AccountStatus


@dataclass(frozen=True)
class Account:
    """Domain entity: Account.

    Note: plain data object, no DB access. ``status == BREAK`` exactly when
    ``current_break_start`` is set.
    """

    account_id: int
    name: str
    email: str
    password_hash: str
    status: AccountStatus = AccountStatus.INACTIVE
    avatar: Optional[str] = None
    current_break_start: Optional[datetime] = None
    daily_work_time: int = 0
    last_active_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def on_break(self) -> bool:
        return self.status == AccountStatus.BREAK
