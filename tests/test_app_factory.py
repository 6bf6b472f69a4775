"""Tests for the Flask application factory."""
from __future__ import annotations

from services.lifecycle import AccountLifecycle
from storage import SQLAlchemyAccountStore


def test_health_endpoint_returns_ok(client):
    """The health endpoint should respond with an OK payload."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_root_welcome(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Welcome" in response.data


def test_blueprints_registered(app):
    """Application factory should register expected blueprints."""
    assert {"auth", "users", "protected"}.issubset(set(app.blueprints.keys()))


def test_accounts_service_is_wired(app, mailer):
    accounts = app.extensions["accounts"]
    assert isinstance(accounts, AccountLifecycle)
    assert isinstance(accounts.store, SQLAlchemyAccountStore)
    assert accounts.mailer is mailer
    assert accounts.base_url == "http://accounts.test"
    assert accounts.tokens.reset_ttl.total_seconds() == 3600
    assert accounts.tokens.verification_ttl.total_seconds() == 24 * 3600
