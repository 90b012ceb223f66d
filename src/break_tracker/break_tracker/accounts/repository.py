from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Account


class AccountRepository(Protocol):
    """Repository interface for Account.

    Services depend on this protocol, never on a concrete database.
    ``create_account`` and ``save`` raise ``DuplicateIdentityError`` when the
    email is already used by another account.
    """

    def get_by_id(self, account_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Account]:
        raise NotImplementedError

    def create_account(self, *, name: str, email: str, password_hash: str) -> int:
        raise NotImplementedError

    def save(self, account: Account) -> None:
        raise NotImplementedError
