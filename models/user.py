"""User model definition."""

from __future__ import annotations

import enum
from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db, utcnow


class Role(str, enum.Enum):
    """Closed set of account roles."""

    USER = "user"
    ADMIN = "admin"


class User(db.Model):
    """Represents a blog account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(16),
        nullable=False,
        default=Role.USER.value,
        server_default=db.text("'user'"),
    )
    reset_password_token_hash = db.Column(db.String(64), nullable=True, index=True)
    reset_password_expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def start_password_reset(self, token_hash: str, expires_at: datetime) -> None:
        self.reset_password_token_hash = token_hash
        self.reset_password_expires_at = expires_at

    def clear_password_reset(self) -> None:
        self.reset_password_token_hash = None
        self.reset_password_expires_at = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def to_dict(self) -> dict:
        """Serialize the public fields of the user."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
