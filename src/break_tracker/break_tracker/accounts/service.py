from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import clock_hhmm, now_local
from ..common.validators import normalize_email, require_min_length, require_non_empty
from ..core.constants import PASSWORD_MIN_LENGTH
from ..core.enums import AccountStatus
from ..core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .model import Account
from .repository import AccountRepository
from .tokens import TokenService

if TYPE_CHECKING:
    from ..ledger.service import LedgerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    account: Account
    token: str


def profile_dict(account: Account) -> dict:
    """Public view of an account (never includes the password hash)."""

    def _iso(value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    return {
        "id": account.account_id,
        "name": account.name,
        "email": account.email,
        "avatar": account.avatar,
        "status": account.status.value,
        "currentBreakStart": _iso(account.current_break_start),
        "dailyWorkTime": account.daily_work_time,
        "lastActiveDate": _iso(account.last_active_date),
        "createdAt": _iso(account.created_at),
        "updatedAt": _iso(account.updated_at),
    }


def _verify_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # e.g. placeholder or corrupted hashes
        return False


class AuthService:
    """Use cases: register, login, logout, change password."""

    def __init__(
        self,
        accounts: AccountRepository,
        tokens: TokenService,
        ledger: Optional["LedgerService"] = None,
    ):
        self._accounts = accounts
        self._tokens = tokens
        self._ledger = ledger

    def register(self, *, name: str, email: str, password: str) -> Account:
        name = require_non_empty(name, "Name")
        email = normalize_email(require_non_empty(email, "Email"))
        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)

        if self._accounts.get_by_email(email):
            raise DuplicateIdentityError("User with this email already exists")

        account_id = self._accounts.create_account(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        account = self._accounts.get_by_id(account_id)
        if not account:
            raise NotFoundError("User not found")
        logger.info("Registered account %s (%s)", account.account_id, account.email)
        return account

    def issue_token(self, account: Account) -> str:
        return self._tokens.issue(account)

    def authenticate(self, email: str, password: str, *, now: datetime | None = None) -> LoginResult:
        now = now or now_local()
        account = self._accounts.get_by_email(normalize_email(email or ""))
        if not account or not _verify_password(account.password_hash, password or ""):
            raise AuthenticationError("Invalid email or password")

        # An account on break stays on break across logins.
        status = account.status if account.on_break else AccountStatus.ACTIVE
        account = replace(account, status=status, last_active_date=now)
        self._accounts.save(account)

        logger.info("Account %s logged in", account.account_id)
        return LoginResult(account=account, token=self._tokens.issue(account))

    def end_session(self, account_id: int, *, now: datetime | None = None) -> Account:
        """Log out. An open break is closed first, on the day it started."""
        now = now or now_local()
        account = _require_account(self._accounts, account_id)

        if account.on_break and self._ledger is not None:
            started = account.current_break_start or now
            end_time = clock_hhmm(now) if started.date() == now.date() else "23:59"
            try:
                self._ledger.record_break_end(account_id, started.date(), end_time, now=now)
            except NotFoundError:
                logger.warning("Account %s was on break without an open interval on %s", account_id, started.date())

        account = replace(
            account,
            status=AccountStatus.INACTIVE,
            current_break_start=None,
            last_active_date=now,
        )
        self._accounts.save(account)
        logger.info("Account %s logged out", account_id)
        return account

    def change_password(self, account_id: int, *, current_password: str, new_password: str) -> None:
        account = _require_account(self._accounts, account_id)
        if not _verify_password(account.password_hash, current_password or ""):
            raise AuthenticationError("Current password is incorrect")

        require_min_length(new_password, "New password", PASSWORD_MIN_LENGTH)
        self._accounts.save(replace(account, password_hash=generate_password_hash(new_password)))
        logger.info("Account %s changed password", account_id)


class AccountService:
    """Use cases: profile management and account-level status transitions."""

    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts

    def get(self, account_id: int) -> Account:
        return _require_account(self._accounts, account_id)

    def find(self, account_id: int) -> Optional[Account]:
        return self._accounts.get_by_id(account_id)

    def list_accounts(self) -> Sequence[Account]:
        return sorted(self._accounts.list_all(), key=lambda a: (a.name.lower(), a.account_id))

    def update_profile(
        self,
        account_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Account:
        account = _require_account(self._accounts, account_id)
        changes: dict = {}

        if name is not None:
            changes["name"] = require_non_empty(name, "Name")

        if email is not None:
            email = normalize_email(require_non_empty(email, "Email"))
            other = self._accounts.get_by_email(email)
            if other and other.account_id != account_id:
                raise DuplicateIdentityError("Email is already taken")
            changes["email"] = email

        if avatar is not None:
            changes["avatar"] = avatar.strip() or None

        if not changes:
            return account

        account = replace(account, **changes)
        self._accounts.save(account)
        return account

    def start_break(
        self,
        account_id: int,
        *,
        started_at: datetime | None = None,
        now: datetime | None = None,
    ) -> Account:
        """Mark the account as on break.

        ``started_at`` is the moment the break interval was recorded for; its
        date names the day record holding the open interval. Defaults to ``now``.
        """
        now = now or now_local()
        account = _require_account(self._accounts, account_id)
        if account.on_break:
            raise InvalidStateError("You are already on a break")

        account = replace(
            account,
            status=AccountStatus.BREAK,
            current_break_start=started_at or now,
            last_active_date=now,
        )
        self._accounts.save(account)
        return account

    def end_break(self, account_id: int, *, now: datetime | None = None) -> Account:
        now = now or now_local()
        account = _require_account(self._accounts, account_id)
        if not account.on_break or account.current_break_start is None:
            raise InvalidStateError("You are not currently on a break")

        account = replace(account, status=AccountStatus.ACTIVE, current_break_start=None, last_active_date=now)
        self._accounts.save(account)
        return account

    def add_work_time(
        self,
        account_id: int,
        minutes: int,
        *,
        current_total: Optional[int] = None,
        now: datetime | None = None,
    ) -> Account:
        """Add ``minutes`` to the running daily total.

        ``current_total`` overrides the stored total, e.g. with the work time
        already recorded for today when a new day has started.
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 0:
            raise ValidationError("Valid minutes value is required")

        now = now or now_local()
        account = _require_account(self._accounts, account_id)

        base = account.daily_work_time if current_total is None else int(current_total)
        account = replace(account, daily_work_time=max(0, base + minutes), last_active_date=now)
        self._accounts.save(account)
        return account


def _require_account(accounts: AccountRepository, account_id: int) -> Account:
    account = accounts.get_by_id(account_id)
    if not account:
        raise NotFoundError("User not found")
    return account
