"""Tests for session and one-time token handling."""

from __future__ import annotations

from datetime import datetime, timedelta

import jwt
import pytest

from services.exceptions import InvalidOneTimeToken, InvalidSessionToken
from services.tokens import OneTimeToken, SessionToken, TokenService
from services.credentials import digest_token
from models.account import utcnow

from conftest import create_account


def test_session_token_round_trip_carries_id_and_role(app, accounts):
    with app.app_context():
        account = create_account("ana@x.com", "secret1", role="admin")
        token = accounts.tokens.issue_session(account)
        claims = accounts.tokens.decode_session(token.value)

        assert claims.account_id == account.id
        assert claims.role == "admin"
        remaining = claims.expires_at - utcnow()
        assert timedelta(minutes=55) < remaining <= timedelta(hours=1)


def test_expired_session_token_is_rejected(app):
    tokens = TokenService(session_ttl=timedelta(seconds=-30))
    with app.app_context():
        account = create_account("ana@x.com", "secret1")
        token = tokens.issue_session(account)

        with pytest.raises(InvalidSessionToken):
            tokens.decode_session(token.value)


def test_session_token_signed_with_other_secret_is_rejected(app, accounts):
    forged = jwt.encode(
        {"sub": "1", "role": "admin", "exp": utcnow() + timedelta(hours=1)},
        "some-other-secret-that-is-long-enough-too",
        algorithm="HS256",
    )
    with app.app_context():
        with pytest.raises(InvalidSessionToken):
            accounts.tokens.decode_session(forged)


@pytest.mark.parametrize("raw", [None, "", "not-a-token", "a.b.c"])
def test_malformed_session_tokens_are_rejected(app, accounts, raw):
    with app.app_context():
        with pytest.raises(InvalidSessionToken):
            accounts.tokens.decode_session(raw)


def test_session_token_value_object_checks_shape():
    with pytest.raises(InvalidSessionToken):
        SessionToken("plain")


def test_one_time_tokens_are_random_hex():
    tokens = {OneTimeToken.generate().value for _ in range(20)}

    assert len(tokens) == 20
    for value in tokens:
        assert len(value) == 64
        int(value, 16)


@pytest.mark.parametrize("raw", ["", "abc", "z" * 64, "a" * 63])
def test_one_time_token_rejects_malformed_values(raw):
    with pytest.raises(InvalidOneTimeToken):
        TokenService.parse_one_time(raw)


def test_reset_token_persists_only_digest_with_expiry():
    now = datetime(2026, 1, 1, 12, 0, 0)
    tokens = TokenService(clock=lambda: now)

    issued = tokens.issue_reset()

    assert issued.digest == digest_token(issued.token.value)
    assert issued.digest != issued.token.value
    assert issued.expires_at == now + timedelta(hours=1)


def test_verification_expiry_can_be_disabled():
    token, expires_at = TokenService(verification_ttl=None).issue_verification()

    assert expires_at is None
    assert len(token.value) == 64


def test_is_expired_uses_clock():
    now = datetime(2026, 1, 1, 12, 0, 0)
    tokens = TokenService(clock=lambda: now)

    assert tokens.is_expired(now) is True
    assert tokens.is_expired(now + timedelta(seconds=1)) is False
    assert tokens.is_expired(None) is False
