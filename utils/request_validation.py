"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        require_fields(data, required_keys)

    return data


def require_fields(data: dict, keys: Iterable[str]) -> None:
    """Raise a 400 error naming every key that is missing or blank."""

    missing = [key for key in keys if not _has_value(data.get(key))]
    if missing:
        raise BadRequest(
            "Missing required fields: {}.".format(", ".join(sorted(missing)))
        )


def _has_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    if not isinstance(raw_email, str):
        return ""
    return raw_email.strip().lower()


def validate_email(raw_email: str | None) -> str:
    email = normalize_email(raw_email)
    if not EMAIL_PATTERN.match(email):
        raise BadRequest("A valid email address is required.")
    return email


def validate_password(raw_password: str | None) -> str:
    password = raw_password if isinstance(raw_password, str) else ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    return password


def optional_string(data: dict, key: str) -> str | None:
    """Return a stripped string for ``key`` or None when absent or blank."""

    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string.")
    value = value.strip()
    return value or None
