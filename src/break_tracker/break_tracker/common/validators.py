"""Declarative request validation.

Each endpoint describes its input as a table of ``FieldRule`` rows; ``validate``
evaluates the whole table and reports every failing field at once.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..core.constants import DATE_FORMAT
from ..core.exceptions import ValidationError
from .datetime_utils import is_hhmm

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")

Check = Callable[[Any], bool]


@dataclass(frozen=True)
class FieldRule:
    field: str
    checks: Sequence[Check]
    message: str
    optional: bool = False
    clean: Optional[Callable[[Any], Any]] = None
    # An optional field sent as "" is passed through (to clear a value).
    allow_blank: bool = False


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate(payload: Optional[Mapping[str, Any]], rules: Sequence[FieldRule]) -> dict:
    """Run ``rules`` against ``payload`` and return the cleaned values.

    Optional fields that are absent (or blank) are left out of the result,
    except blank strings for rules with ``allow_blank``.
    """
    payload = payload or {}
    cleaned: dict = {}
    errors: list[dict] = []

    for rule in rules:
        value = payload.get(rule.field)
        if _is_blank(value):
            if rule.optional:
                if rule.allow_blank and isinstance(value, str):
                    cleaned[rule.field] = ""
                continue
            errors.append({"field": rule.field, "message": rule.message, "value": value})
            continue

        if not all(check(value) for check in rule.checks):
            errors.append({"field": rule.field, "message": rule.message, "value": value})
            continue

        cleaned[rule.field] = rule.clean(value) if rule.clean else value

    if errors:
        raise ValidationError("Validation failed", errors)
    return cleaned


# ---- checks ----


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def length_between(min_len: int, max_len: int) -> Check:
    def check(value: Any) -> bool:
        return isinstance(value, str) and min_len <= len(value.strip()) <= max_len

    return check


def min_length(min_len: int) -> Check:
    def check(value: Any) -> bool:
        return isinstance(value, str) and len(value) >= min_len

    return check


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def is_time_of_day(value: Any) -> bool:
    return is_hhmm(value)


def is_iso_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def is_non_negative_int(value: Any) -> bool:
    # JSON true/false would otherwise pass as 1/0.
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def int_between(low: int, high: int) -> Check:
    """Accept ints or digit strings (query params) within [low, high]."""

    def check(value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, str):
            value = value.strip()
            # str.isdigit() also accepts characters such as '²' that int() rejects.
            if not (value.isascii() and value.isdecimal()):
                return False
            value = int(value)
        return isinstance(value, int) and low <= value <= high

    return check


def one_of(*choices: str) -> Check:
    def check(value: Any) -> bool:
        return value in choices

    return check


def normalize_email(value: str) -> str:
    return value.strip().lower()


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value
