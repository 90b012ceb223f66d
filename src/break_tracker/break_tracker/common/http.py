"""JSON envelope and error translation shared by every controller."""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateIdentityError,
    InvalidStateError,
    NotFoundError,
    TokenError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Order matters: the first matching class wins.
STATUS_BY_ERROR = (
    (ValidationError, 400),
    (InvalidStateError, 400),
    (AuthenticationError, 401),
    (TokenError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateIdentityError, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def ok(message: str, data: Any = None, status: int = 200):
    body: dict = {"error": False, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int, errors: Optional[Sequence[dict]] = None):
    body: dict = {"error": True, "message": message}
    if errors:
        body["errors"] = list(errors)
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        errors = e.errors if isinstance(e, ValidationError) else None
        return fail(str(e), status_for(e), errors)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if bool(current_app.config.get("DEBUG", False)):
            return fail(f"Internal server error: {e}", 500)
        return fail("Internal server error", 500)
