from __future__ import annotations

from functools import wraps

from flask import g, request

from ..core.exceptions import TokenError, TokenInvalidError


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise TokenError("Access denied: no token provided")
    return token.strip()


def build_token_required(container):
    """Decorator factory: resolves the bearer token to ``g.account``."""

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            claims = container.token_service.verify(bearer_token())
            account = container.account_service.find(claims.account_id)
            if not account:
                raise TokenInvalidError("User no longer exists")
            g.account = account
            return view(*args, **kwargs)

        return wrapper

    return token_required
