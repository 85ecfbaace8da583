"""Database initialization and model exports."""

from datetime import UTC, datetime

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the columns are stored."""

    return datetime.now(UTC).replace(tzinfo=None)


# Import models to register them with SQLAlchemy metadata.
from .user import Role, User  # noqa: E402,F401
from .category import Category  # noqa: E402,F401
from .post import Post, PostStatus  # noqa: E402,F401
from .comment import Comment  # noqa: E402,F401

__all__ = [
    "db",
    "utcnow",
    "Role",
    "User",
    "Category",
    "Post",
    "PostStatus",
    "Comment",
]
