"""Seed an administrator account.

Signup never grants the admin role, so administrators are created or
promoted here.
"""

import os

from app import create_app
from models import db
from models.account import Account
from services.credentials import ensure_hashed
from storage import SQLAlchemyAccountStore

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")


def seed_admin(email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD) -> str:
    """Create or promote the admin account and return the action taken."""

    email = email.strip().lower()
    store = SQLAlchemyAccountStore(db)
    admin = store.find_by_email(email)
    if admin is None:
        admin = Account(name=ADMIN_NAME, email=email, age=0, role="admin")
        action = "created"
    else:
        admin.role = "admin"
        action = "updated"
    admin.mark_verified()
    ensure_hashed(admin, password)
    store.save(admin)
    return action


def main() -> None:
    app = create_app()
    with app.app_context():
        action = seed_admin()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
