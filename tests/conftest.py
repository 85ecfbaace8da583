"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.category import Category  # noqa: E402
from models.post import Post  # noqa: E402
from models.user import Role, User  # noqa: E402
from utils.tokens import issue_session_token  # noqa: E402

ADMIN_SECRET = "let-me-in"


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-signing-secret-with-enough-length-for-hs256"
    ADMIN_REGISTRATION_SECRET = ADMIN_SECRET
    FRONTEND_URL = "https://blog.example"
    EMAIL_USER = None
    EMAIL_PASS = None
    RATE_LIMIT = "1000 per minute"


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def db_session(app: Flask):
    """Yield the database session inside an application context."""

    with app.app_context():
        yield db.session


def create_user(
    app: Flask,
    email: str,
    password: str = "Secret123",
    *,
    name: str = "Test User",
    role: Role = Role.USER,
) -> int:
    """Persist a user and return its id."""

    with app.app_context():
        user = User(name=name, email=email, role=role.value)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def auth_headers(app: Flask, user_id: int) -> dict[str, str]:
    with app.app_context():
        token = issue_session_token(db.session.get(User, user_id))
    return {"Authorization": f"Bearer {token}"}


def create_category(app: Flask, name: str = "General") -> int:
    with app.app_context():
        category = Category(name=name, slug=name.lower().replace(" ", "-"))
        db.session.add(category)
        db.session.commit()
        return category.id


def create_post(
    app: Flask,
    author_id: int,
    category_id: int,
    title: str,
    *,
    status: str = "published",
    content: str = "<p>Body</p>",
) -> int:
    with app.app_context():
        post = Post(
            title=title,
            slug=title.lower().replace(" ", "-"),
            content=content,
            category_id=category_id,
            author_id=author_id,
            image="/uploads/default-post.jpg",
            status=status,
        )
        db.session.add(post)
        db.session.commit()
        return post.id


@pytest.fixture()
def admin_id(app: Flask) -> int:
    return create_user(app, "admin@example.com", "AdminPass123", name="Admin", role=Role.ADMIN)


@pytest.fixture()
def reader_id(app: Flask) -> int:
    return create_user(app, "reader@example.com", "ReaderPass123", name="Reader")


@pytest.fixture()
def admin_headers(app: Flask, admin_id: int) -> dict[str, str]:
    return auth_headers(app, admin_id)


@pytest.fixture()
def reader_headers(app: Flask, reader_id: int) -> dict[str, str]:
    return auth_headers(app, reader_id)


@pytest.fixture()
def category_id(app: Flask) -> int:
    return create_category(app, "Travel Notes")
