from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_DAYS
from ..core.exceptions import TokenExpiredError, TokenInvalidError
from .model import Account

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    account_id: int
    email: str
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies the bearer tokens handed out at login."""

    def __init__(
        self,
        secret: str,
        *,
        expires_days: int = DEFAULT_TOKEN_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._lifetime = timedelta(days=int(expires_days))
        self._clock = clock or _utc_now

    def issue(self, account: Account) -> str:
        issued_at = self._clock()
        payload = {
            "userId": account.account_id,
            "email": account.email,
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "userId"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired, please login again") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError("Token is not valid") from exc

        try:
            account_id = int(payload["userId"])
        except (TypeError, ValueError) as exc:
            raise TokenInvalidError("Token is not valid") from exc

        return TokenClaims(
            account_id=account_id,
            email=str(payload.get("email", "")),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
