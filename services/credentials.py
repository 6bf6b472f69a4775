"""Password hashing and verification."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

MIN_PASSWORD_LENGTH = 6

# Methods werkzeug emits as the first segment of "method$salt$hash".
_HASH_METHODS = ("scrypt", "pbkdf2")


class CredentialError(RuntimeError):
    """Raised when a password cannot be hashed; the write must not proceed."""


def _is_hash_format(value: str) -> bool:
    parts = value.split("$")
    if len(parts) != 3 or not all(parts):
        return False
    return parts[0].split(":", 1)[0] in _HASH_METHODS


@dataclass(frozen=True)
class PasswordHash:
    """A salted one-way password hash as produced by :func:`hash_password`."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _is_hash_format(self.value):
            raise ValueError("Value is not a password hash.")

    def __str__(self) -> str:
        return self.value


def hash_password(plaintext: str) -> PasswordHash:
    """Hash ``plaintext`` with a random salt and an adaptive work factor."""

    if not isinstance(plaintext, str) or not plaintext:
        raise CredentialError("Password must be a non-empty string.")
    try:
        hashed = generate_password_hash(plaintext)
    except (ValueError, OSError, MemoryError) as exc:
        raise CredentialError("Password hashing failed.") from exc
    return PasswordHash(hashed)


def verify_password(plaintext: str, hashed: PasswordHash | str | None) -> bool:
    """Return True when ``plaintext`` matches the stored hash."""

    if not plaintext or not hashed:
        return False
    try:
        stored = hashed if isinstance(hashed, PasswordHash) else PasswordHash(hashed)
    except ValueError:
        return False
    return check_password_hash(stored.value, plaintext)


def ensure_hashed(account, new_password: str | None = None) -> None:
    """Prepare ``account.password`` for persistence.

    A new password is hashed and assigned. Without one, the stored value is
    left untouched after checking that it already is a hash, so re-saving an
    account never hashes a hash.
    """

    if new_password is not None:
        account.password = hash_password(new_password).value
        return
    try:
        PasswordHash(account.password)
    except ValueError as exc:
        raise CredentialError("Stored password is not hashed.") from exc


def digest_token(token: str) -> str:
    """One-way digest under which reset tokens are stored."""

    return hashlib.sha256(token.encode("utf-8")).hexdigest()

