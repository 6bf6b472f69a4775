"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import re
import sys
from io import BytesIO
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
from models.account import Account  # noqa: E402
from services.credentials import ensure_hashed  # noqa: E402
from services.mailer import Mailer  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    PUBLIC_BASE_URL = "http://accounts.test"


class RecordingMailer(Mailer):
    """Mail transport that keeps every message in memory."""

    def __init__(self):
        self.outbox: list[dict[str, str]] = []

    def send(self, to: str, subject: str, html: str) -> None:
        self.outbox.append({"to": to, "subject": subject, "html": html})

    def last_token(self, path: str) -> str:
        match = re.search(rf"/auth/{path}/([0-9a-f]{{64}})", self.outbox[-1]["html"])
        assert match, self.outbox[-1]["html"]
        return match.group(1)


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def app(mailer) -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig, mailer=mailer)

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
def accounts(app: Flask):
    """The application's account lifecycle service."""

    return app.extensions["accounts"]


def create_account(
    email: str,
    password: str,
    *,
    role: str = "user",
    verified: bool = True,
    name: str = "Test User",
    age: int = 30,
) -> Account:
    """Persist an account directly; call inside an app context."""

    account = Account(name=name, email=email, age=age, role=role, is_verified=verified)
    ensure_hashed(account, password)
    db.session.add(account)
    db.session.commit()
    return account


def signup_form(**overrides) -> dict:
    form = {
        "name": "Ana",
        "email": "a@x.com",
        "password": "secret1",
        "age": "30",
        "profilePic": (BytesIO(b"\x89PNG fake image"), "me.png", "image/png"),
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}
