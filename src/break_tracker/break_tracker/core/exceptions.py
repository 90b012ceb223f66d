from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str = "Validation failed", errors: Optional[Sequence[dict]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class AuthenticationError(DomainError):
    """Raised when credentials are invalid."""


class TokenError(DomainError):
    """Raised when a bearer token is missing or cannot be trusted."""


class TokenExpiredError(TokenError):
    """Raised when a bearer token is well-formed but past its expiry."""


class TokenInvalidError(TokenError):
    """Raised when a bearer token is malformed or badly signed."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicateIdentityError(DomainError):
    """Raised when an email (or another unique key) is already taken."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class InvalidStateError(DomainError):
    """Raised on an illegal status transition, e.g. starting a break twice."""
