"""Authentication and role checks for protected views."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, request

from .exceptions import RoleForbidden, Unauthenticated
from .tokens import SessionClaims

BEARER_PREFIX = "Bearer "


def require_role(claims: Optional[SessionClaims], role: str) -> None:
    """Return normally only when ``claims`` carry exactly ``role``.

    Denial is always raised: missing claims are unauthenticated (401) and a
    role mismatch is forbidden (403). There is no role hierarchy.
    """

    if not isinstance(claims, SessionClaims):
        raise Unauthenticated()
    if claims.role != role:
        raise RoleForbidden()


def bearer_token(header: Optional[str]) -> str:
    if not header:
        raise Unauthenticated()
    if not header.startswith(BEARER_PREFIX):
        raise Unauthenticated("Authorization header must use the Bearer scheme.")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated()
    return token


def authenticate_request() -> SessionClaims:
    """Validate the request's bearer token and expose its claims on ``g``."""

    tokens = current_app.extensions["accounts"].tokens
    claims = tokens.decode_session(bearer_token(request.headers.get("Authorization")))
    g.claims = claims
    return claims


def auth_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapper


def role_required(role: str) -> Callable[[Callable], Callable]:
    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            require_role(authenticate_request(), role)
            return view(*args, **kwargs)

        return wrapper

    return decorator
