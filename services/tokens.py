"""Session and one-time token issuance and validation."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from models.account import utcnow

from .credentials import digest_token
from .exceptions import InvalidOneTimeToken, InvalidSessionToken

ONE_TIME_TOKEN_BYTES = 32
_HEX = frozenset(string.hexdigits.lower())


@dataclass(frozen=True)
class SessionToken:
    """A signed, self-contained bearer token."""

    value: str

    def __post_init__(self) -> None:
        segments = self.value.split(".") if isinstance(self.value, str) else []
        if len(segments) != 3 or not all(segments):
            raise InvalidSessionToken()

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SessionClaims:
    account_id: int
    role: str
    expires_at: datetime


@dataclass(frozen=True)
class OneTimeToken:
    """Opaque random token proving access to an inbox."""

    value: str

    def __post_init__(self) -> None:
        value = self.value
        if (
            not isinstance(value, str)
            or len(value) != ONE_TIME_TOKEN_BYTES * 2
            or not set(value) <= _HEX
        ):
            raise InvalidOneTimeToken()

    @classmethod
    def generate(cls) -> "OneTimeToken":
        return cls(secrets.token_hex(ONE_TIME_TOKEN_BYTES))

    @property
    def digest(self) -> str:
        return digest_token(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IssuedResetToken:
    token: OneTimeToken
    digest: str
    expires_at: datetime


class TokenService:
    """Issues and validates the three token kinds.

    Session tokens are signed with the application's ``JWT_SECRET_KEY`` by
    flask-jwt-extended and validated purely by signature and expiry. One-time
    tokens come from :mod:`secrets`; reset tokens are only ever handed back
    together with the digest that should be persisted in their place.
    """

    def __init__(
        self,
        *,
        session_ttl: timedelta = timedelta(hours=1),
        verification_ttl: Optional[timedelta] = timedelta(hours=24),
        reset_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_ttl = session_ttl
        self.verification_ttl = verification_ttl
        self.reset_ttl = reset_ttl
        self.clock = clock

    def issue_session(self, account) -> SessionToken:
        token = create_access_token(
            identity=str(account.id),
            additional_claims={"role": account.role},
            expires_delta=self.session_ttl,
        )
        return SessionToken(token)

    def decode_session(self, raw: Optional[str]) -> SessionClaims:
        """Return the claims of a valid session token or raise 401."""

        if not raw:
            raise InvalidSessionToken()
        token = raw if isinstance(raw, SessionToken) else SessionToken(raw)
        try:
            claims = decode_token(token.value)
        except (jwt.PyJWTError, JWTExtendedException) as exc:
            raise InvalidSessionToken() from exc

        try:
            return SessionClaims(
                account_id=int(claims["sub"]),
                role=str(claims["role"]),
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(
                    tzinfo=None
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidSessionToken() from exc

    def issue_verification(self) -> tuple[OneTimeToken, Optional[datetime]]:
        expires_at = None
        if self.verification_ttl:
            expires_at = self.clock() + self.verification_ttl
        return OneTimeToken.generate(), expires_at

    def issue_reset(self) -> IssuedResetToken:
        token = OneTimeToken.generate()
        return IssuedResetToken(
            token=token,
            digest=token.digest,
            expires_at=self.clock() + self.reset_ttl,
        )

    @staticmethod
    def parse_one_time(raw: Optional[str]) -> OneTimeToken:
        return OneTimeToken((raw or "").strip().lower())

    def is_expired(self, expires_at: Optional[datetime]) -> bool:
        return expires_at is not None and expires_at <= self.clock()
