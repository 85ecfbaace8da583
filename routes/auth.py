"""Authentication blueprint: accounts, sessions and password reset."""

from __future__ import annotations

from datetime import timedelta
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden,
    InternalServerError,
    NotFound,
    Unauthorized,
)

from models import db, utcnow
from models.user import Role, User
from utils.auth import protect
from utils.mailer import MailSettings, send_email
from utils.request_validation import (
    parse_json_request,
    require_fields,
    validate_email,
    validate_password,
)
from utils.tokens import generate_reset_token, hash_reset_token, issue_session_token

auth_bp = Blueprint("auth", __name__)

RESET_EMAIL_SUBJECT = "Password reset request"


def _find_user_by_email(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email).first()


def _session_payload(user: User) -> dict:
    return {"access_token": issue_session_token(user), "user": user.to_dict()}


def _create_account(payload: dict, role: Role) -> User:
    """Validate a registration payload and persist the new user."""

    require_fields(payload, ("name", "email", "password"))
    name = str(payload["name"]).strip()
    email = validate_email(payload.get("email"))
    password = validate_password(payload.get("password"))

    if _find_user_by_email(email) is not None:
        raise Conflict("A user with that email already exists.")

    user = User(name=name, email=email, role=role.value)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as error:
        db.session.rollback()
        raise Conflict("A user with that email already exists.") from error

    return user


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new reader account."""
    payload = parse_json_request(request)
    user = _create_account(payload, Role.USER)
    current_app.logger.info("Registered user id=%s", user.id)
    return jsonify(_session_payload(user)), HTTPStatus.CREATED


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT access token."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    email = validate_email(payload.get("email"))
    password = payload.get("password")
    if not isinstance(password, str):
        raise BadRequest("Password must be a string.")

    user = _find_user_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid email or password.")

    return jsonify(_session_payload(user)), HTTPStatus.OK


@auth_bp.route("/profile", methods=["GET"])
@protect
def profile(principal: User):
    return jsonify(principal.to_dict())


@auth_bp.route("/register-admin", methods=["POST"])
def register_admin() -> tuple:
    """Register an administrator.

    Guarded only by the shared ``ADMIN_REGISTRATION_SECRET``; when that secret
    is not configured no admin can be registered through this endpoint.
    """
    payload = parse_json_request(request)
    require_fields(payload, ("name", "email", "password", "adminSecretKey"))

    secret = current_app.config.get("ADMIN_REGISTRATION_SECRET")
    if not secret or payload.get("adminSecretKey") != secret:
        current_app.logger.warning("Rejected admin registration with invalid secret")
        raise Forbidden("Invalid admin secret key.")

    user = _create_account(payload, Role.ADMIN)
    current_app.logger.info("Registered admin id=%s", user.id)
    return jsonify(_session_payload(user)), HTTPStatus.CREATED


def _reset_email_html(name: str, reset_url: str, ttl_minutes: int) -> str:
    return (
        f"<h1>Password reset</h1>"
        f"<p>Hello {name},</p>"
        f"<p>We received a request to reset your password. "
        f"Click the link below to choose a new one:</p>"
        f'<p><a href="{reset_url}" clicktracking="off">{reset_url}</a></p>'
        f"<p>This link expires in {ttl_minutes} minutes. "
        f"If you did not ask for a reset you can ignore this email.</p>"
    )


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    """Start a password reset by issuing a single-use, expiring token."""
    payload = parse_json_request(request)
    email = validate_email(payload.get("email"))

    user = _find_user_by_email(email)
    if user is None:
        raise NotFound("No user found with that email.")

    ttl_minutes = int(current_app.config["RESET_TOKEN_TTL_MINUTES"])
    raw_token, token_hash = generate_reset_token()
    user.start_password_reset(token_hash, utcnow() + timedelta(minutes=ttl_minutes))
    db.session.commit()

    frontend_url = current_app.config["FRONTEND_URL"].rstrip("/")
    reset_url = f"{frontend_url}/reset-password/{raw_token}"
    settings: MailSettings = current_app.extensions["mail_settings"]

    try:
        if not settings.configured:
            current_app.logger.warning(
                "Mail is not configured; returning reset link for user id=%s in the response",
                user.id,
            )
            return jsonify(
                {
                    "message": "Mail is not configured. Use the link below to reset your password.",
                    "reset_url": reset_url,
                }
            )

        send_email(
            settings,
            to=user.email,
            subject=RESET_EMAIL_SUBJECT,
            html=_reset_email_html(user.name, reset_url, ttl_minutes),
        )
    except Exception as error:
        current_app.logger.exception(
            "Password reset failed for user id=%s; clearing reset token", user.id
        )
        db.session.rollback()
        user.clear_password_reset()
        db.session.commit()
        raise InternalServerError("The reset email could not be sent.") from error

    current_app.logger.info("Password reset email sent to user id=%s", user.id)
    return jsonify({"message": "A password reset link has been sent to your email."})


@auth_bp.route("/reset-password/<token>", methods=["PUT"])
def reset_password(token: str):
    """Consume a reset token and set a new password."""
    payload = parse_json_request(request)
    password = validate_password(payload.get("password"))

    user = User.query.filter(
        User.reset_password_token_hash == hash_reset_token(token),
        User.reset_password_expires_at > utcnow(),
    ).first()
    if user is None:
        raise BadRequest("Reset token is invalid or has expired.")

    user.set_password(password)
    user.clear_password_reset()
    db.session.commit()
    current_app.logger.info("Password reset completed for user id=%s", user.id)

    body = _session_payload(user)
    body["message"] = "Password has been reset."
    return jsonify(body)
