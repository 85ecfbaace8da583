"""Bearer-token authentication and role checks for views.

The decorators resolve the caller from the ``Authorization`` header and hand
it to the wrapped view as the ``principal`` keyword argument:

* ``protect`` rejects the request with 401 when no valid token is present.
* ``optional_protect`` never rejects; ``principal`` is ``None`` for
  anonymous callers or unusable tokens.
* ``admin_required`` behaves like ``protect`` and additionally requires the
  admin role (403 otherwise).
"""

from __future__ import annotations

from functools import wraps

from flask import current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import Forbidden, Unauthorized

from models import db
from models.user import Role, User


def _load_principal() -> User | None:
    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def resolve_principal() -> User:
    """Return the user named by the request's bearer token or raise 401."""

    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as error:
        raise Unauthorized("Not authorized, token failed or missing.") from error

    user = _load_principal()
    if user is None:
        raise Unauthorized("Not authorized, user no longer exists.")
    return user


def resolve_optional_principal() -> User | None:
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        current_app.logger.info(
            "Ignoring invalid bearer token; continuing unauthenticated."
        )
        return None
    return _load_principal()


def is_admin(principal: User | None) -> bool:
    return principal is not None and principal.role == Role.ADMIN.value


def can_modify(principal: User | None, owner_id: int) -> bool:
    """Owners and administrators may change a resource."""

    if principal is None:
        return False
    return principal.id == owner_id or is_admin(principal)


def protect(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        kwargs["principal"] = resolve_principal()
        return view(*args, **kwargs)

    return wrapper


def optional_protect(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        kwargs["principal"] = resolve_optional_principal()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        principal = resolve_principal()
        if not is_admin(principal):
            raise Forbidden("Not authorized as an admin.")
        kwargs["principal"] = principal
        return view(*args, **kwargs)

    return wrapper
