"""Tests for the forgot/reset password flow."""

from __future__ import annotations

from datetime import timedelta

from flask.testing import FlaskClient

import routes.auth
from conftest import create_user
from models import db, utcnow
from models.user import User
from utils.mailer import MailSettings
from utils.tokens import hash_reset_token

EMAIL = "forgetful@example.com"


def _request_reset(client: FlaskClient) -> str:
    response = client.post("/api/auth/forgot-password", json={"email": EMAIL})
    assert response.status_code == 200
    reset_url = response.get_json()["reset_url"]
    assert reset_url.startswith("https://blog.example/reset-password/")
    return reset_url.rsplit("/", 1)[-1]


def _configure_mail(app) -> None:
    app.extensions["mail_settings"] = MailSettings(
        host="smtp.test",
        port=587,
        username="blog@example.com",
        password="mail-pass",
        from_name="MyBlog",
    )


def test_forgot_password_stores_only_the_token_hash(client: FlaskClient, app):
    user_id = create_user(app, EMAIL)

    raw_token = _request_reset(client)

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.reset_password_token_hash == hash_reset_token(raw_token)
        assert user.reset_password_token_hash != raw_token
        remaining = user.reset_password_expires_at - utcnow()
        assert timedelta(minutes=14) < remaining <= timedelta(minutes=15)


def test_forgot_password_unknown_email(client: FlaskClient):
    response = client.post(
        "/api/auth/forgot-password", json={"email": "nobody@example.com"}
    )

    assert response.status_code == 404


def test_reset_password_consumes_token(client: FlaskClient, app):
    user_id = create_user(app, EMAIL, "OldPass123")
    raw_token = _request_reset(client)

    response = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"password": "NewPass123"}
    )

    assert response.status_code == 200
    assert response.get_json()["access_token"]

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.check_password("NewPass123")
        assert user.reset_password_token_hash is None
        assert user.reset_password_expires_at is None

    reuse = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"password": "Another123"}
    )
    assert reuse.status_code == 400

    login = client.post(
        "/api/auth/login", json={"email": EMAIL, "password": "NewPass123"}
    )
    assert login.status_code == 200


def test_reset_password_after_expiry_fails(client: FlaskClient, app):
    user_id = create_user(app, EMAIL, "OldPass123")
    raw_token = _request_reset(client)

    with app.app_context():
        user = db.session.get(User, user_id)
        user.reset_password_expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

    response = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"password": "NewPass123"}
    )

    assert response.status_code == 400
    with app.app_context():
        assert db.session.get(User, user_id).check_password("OldPass123")


def test_reset_password_with_unknown_token(client: FlaskClient, app):
    create_user(app, EMAIL)
    _request_reset(client)

    response = client.put(
        "/api/auth/reset-password/deadbeef", json={"password": "NewPass123"}
    )

    assert response.status_code == 400


def test_reset_password_validates_new_password(client: FlaskClient, app):
    create_user(app, EMAIL)
    raw_token = _request_reset(client)

    response = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"password": "123"}
    )

    assert response.status_code == 400


def test_forgot_password_sends_mail_when_configured(client: FlaskClient, app, monkeypatch):
    create_user(app, EMAIL, name="Forgetful")
    _configure_mail(app)
    sent = []

    def fake_send_email(settings, to, subject, html):
        sent.append({"to": to, "subject": subject, "html": html})

    monkeypatch.setattr(routes.auth, "send_email", fake_send_email)

    response = client.post("/api/auth/forgot-password", json={"email": EMAIL})

    assert response.status_code == 200
    assert "reset_url" not in response.get_json()
    assert len(sent) == 1
    assert sent[0]["to"] == EMAIL
    assert "https://blog.example/reset-password/" in sent[0]["html"]
    assert "Forgetful" in sent[0]["html"]


def test_failed_mail_clears_reset_token(client: FlaskClient, app, monkeypatch):
    user_id = create_user(app, EMAIL)
    _configure_mail(app)

    def broken_send_email(settings, to, subject, html):
        raise OSError("connection refused")

    monkeypatch.setattr(routes.auth, "send_email", broken_send_email)

    response = client.post("/api/auth/forgot-password", json={"email": EMAIL})

    assert response.status_code == 500
    assert response.get_json()["error"] == "Internal Server Error"
    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.reset_password_token_hash is None
        assert user.reset_password_expires_at is None
