from __future__ import annotations

from ..common.validators import (
    FieldRule,
    is_email,
    is_string,
    length_between,
    min_length,
    normalize_email,
)
from ..core.constants import NAME_MAX_LENGTH, NAME_MIN_LENGTH, PASSWORD_MIN_LENGTH

_NAME_MESSAGE = f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
_EMAIL_MESSAGE = "Please provide a valid email address"
_PASSWORD_MESSAGE = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"

REGISTER_RULES = (
    FieldRule("name", (length_between(NAME_MIN_LENGTH, NAME_MAX_LENGTH),), _NAME_MESSAGE, clean=str.strip),
    FieldRule("email", (is_email,), _EMAIL_MESSAGE, clean=normalize_email),
    FieldRule("password", (min_length(PASSWORD_MIN_LENGTH),), _PASSWORD_MESSAGE),
)

LOGIN_RULES = (
    FieldRule("email", (is_email,), _EMAIL_MESSAGE, clean=normalize_email),
    FieldRule("password", (is_string,), "Password is required"),
)

PROFILE_UPDATE_RULES = (
    FieldRule(
        "name",
        (length_between(NAME_MIN_LENGTH, NAME_MAX_LENGTH),),
        _NAME_MESSAGE,
        optional=True,
        clean=str.strip,
    ),
    FieldRule("email", (is_email,), _EMAIL_MESSAGE, optional=True, clean=normalize_email),
    FieldRule(
        "avatar",
        (is_string, length_between(1, 500)),
        "Avatar must be a URL string",
        optional=True,
        allow_blank=True,
    ),
)

CHANGE_PASSWORD_RULES = (
    FieldRule("currentPassword", (is_string,), "Current password is required"),
    FieldRule(
        "newPassword",
        (min_length(PASSWORD_MIN_LENGTH),),
        f"New password must be at least {PASSWORD_MIN_LENGTH} characters long",
    ),
)
