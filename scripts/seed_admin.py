"""Seed an administrator user."""

import os

from app import create_app
from models import db
from models.user import Role, User

ADMIN_NAME = os.getenv("SEED_ADMIN_NAME", "Administrator")
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(name=ADMIN_NAME, email=ADMIN_EMAIL, role=Role.ADMIN.value)
            admin.set_password(ADMIN_PASSWORD)
            db.session.add(admin)
            action = "created"
        else:
            admin.role = Role.ADMIN.value
            admin.set_password(ADMIN_PASSWORD)
            action = "updated"
        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
