"""Session and password-reset token helpers."""

from __future__ import annotations

import hashlib
import secrets

from flask_jwt_extended import create_access_token

from models.user import User

RESET_TOKEN_BYTES = 20


def issue_session_token(user: User) -> str:
    """Return a signed, expiring access token identifying ``user``."""

    return create_access_token(identity=str(user.id))


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> tuple[str, str]:
    """Return ``(raw_token, token_hash)``.

    Only the hash is persisted; the raw value is handed to the user.
    """

    raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
    return raw_token, hash_reset_token(raw_token)
