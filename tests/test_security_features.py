"""Tests covering CORS, rate limiting and the JSON error envelope on the blog API."""

from __future__ import annotations

from pathlib import Path

import pytest
from flask import Flask

from app import create_app
from conftest import _BaseTestConfig, auth_headers, create_post, create_user
from models import db
from models.user import Role


@pytest.fixture()
def build_app(tmp_path: Path):
    """Return a factory for apps with per-test configuration overrides."""

    built: list[Flask] = []

    def _build(**overrides) -> Flask:
        class TestConfig(_BaseTestConfig):
            UPLOAD_DIR = str(tmp_path / "uploads")

        for key, value in overrides.items():
            setattr(TestConfig, key, value)

        application = create_app(TestConfig)
        with application.app_context():
            db.create_all()
        built.append(application)
        return application

    yield _build

    for application in built:
        with application.app_context():
            db.session.remove()
            db.drop_all()


def test_post_listing_allows_configured_origin(build_app):
    app = build_app(CORS_ORIGINS=["https://blog.example"])
    client = app.test_client()

    allowed = client.get("/api/posts", headers={"Origin": "https://blog.example"})
    foreign = client.get("/api/posts", headers={"Origin": "https://evil.example"})

    assert allowed.status_code == 200
    assert allowed.headers.get("Access-Control-Allow-Origin") == "https://blog.example"
    assert "Access-Control-Allow-Origin" not in foreign.headers


def test_login_is_rate_limited_with_json_envelope(build_app):
    app = build_app(RATE_LIMIT="2 per minute")
    create_user(app, "j1@example.com", "J1Pass123")
    client = app.test_client()
    credentials = {"email": "j1@example.com", "password": "J1Pass123"}

    first = client.post("/api/auth/login", json=credentials)
    second = client.post("/api/auth/login", json=credentials)
    third = client.post("/api/auth/login", json=credentials)

    assert first.status_code == 200
    assert second.status_code == 200
    assert third.status_code == 429
    payload = third.get_json()
    assert payload["error"] == "Too Many Requests"
    assert payload["request_id"] == third.headers["X-Request-ID"]


def test_missing_post_returns_error_envelope(client, app):
    admin_id = create_user(app, "admin@example.com", name="Admin", role=Role.ADMIN)

    response = client.get("/api/posts/id/999", headers=auth_headers(app, admin_id))

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["error"] == "Not Found"
    assert payload["detail"]
    assert payload["request_id"] == response.headers["X-Request-ID"]


def test_invalid_json_body_on_post_creation_returns_envelope(client, app, admin_headers):
    response = client.post(
        "/api/posts", data="not-json", content_type="text/plain", headers=admin_headers
    )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "Bad Request"
    assert "Request content type" in payload["detail"]


def test_request_id_is_echoed_on_api_routes(client, app, admin_id, category_id):
    create_post(app, admin_id, category_id, "Tracked")

    listed = client.get("/api/posts", headers={"X-Request-ID": "abc-123"})
    missing = client.get("/api/posts/not-a-post", headers={"X-Request-ID": "def-456"})

    assert listed.headers["X-Request-ID"] == "abc-123"
    assert missing.status_code == 404
    assert missing.headers["X-Request-ID"] == "def-456"
    assert missing.get_json()["request_id"] == "def-456"
