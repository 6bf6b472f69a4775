"""Tests for password hashing and the pre-persist hashing step."""

from __future__ import annotations

import pytest

from models.account import Account
from services import credentials
from services.credentials import (
    CredentialError,
    PasswordHash,
    digest_token,
    ensure_hashed,
    hash_password,
    verify_password,
)


def test_hash_is_salted_and_verifies():
    first = hash_password("secret1")
    second = hash_password("secret1")

    assert first.value != "secret1"
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second.value)
    assert not verify_password("secret2", first)


@pytest.mark.parametrize("value", ["secret1", "", "a$b", "md5$salt$hash", "$$"])
def test_password_hash_rejects_non_hash_values(value):
    with pytest.raises(ValueError):
        PasswordHash(value)


def test_verify_password_handles_missing_or_plaintext_hash():
    assert verify_password("secret1", None) is False
    assert verify_password("secret1", "secret1") is False
    assert verify_password("", hash_password("secret1")) is False


def test_ensure_hashed_does_not_rehash_existing_hash():
    account = Account(name="Ana", email="a@x.com", age=30)
    ensure_hashed(account, "secret1")
    stored = account.password

    ensure_hashed(account)

    assert account.password == stored
    assert verify_password("secret1", account.password)


def test_ensure_hashed_refuses_plaintext_in_password_field():
    account = Account(name="Ana", email="a@x.com", age=30, password="secret1")

    with pytest.raises(CredentialError):
        ensure_hashed(account)


def test_hash_failure_raises_and_leaves_password_untouched(monkeypatch):
    def _broken(_plaintext):
        raise ValueError("no entropy")

    monkeypatch.setattr(credentials, "generate_password_hash", _broken)
    account = Account(name="Ana", email="a@x.com", age=30)

    with pytest.raises(CredentialError):
        ensure_hashed(account, "secret1")
    assert account.password is None


def test_digest_token_is_sha256_hex():
    digest = digest_token("abc")

    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert digest_token("abc") == digest
