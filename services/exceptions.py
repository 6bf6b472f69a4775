"""HTTP-aware error taxonomy raised by the account services."""

from __future__ import annotations

from werkzeug.exceptions import BadRequest, Forbidden, NotFound, Unauthorized


class ValidationFailed(BadRequest):
    """Malformed input; carries one entry per offending field."""

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__("Validation failed.")
        self.errors = errors


class AccountExists(BadRequest):
    description = "User already exists"


class InvalidCredentials(BadRequest):
    description = "Invalid email or password"


class AccountNotVerified(BadRequest):
    description = "Please verify your email before logging in."


class InvalidOneTimeToken(BadRequest):
    description = "Invalid or expired token."


class AccountNotFound(NotFound):
    description = "User not found"


class Unauthenticated(Unauthorized):
    description = "Access Denied. No token provided."


class InvalidSessionToken(Unauthenticated):
    description = "Invalid token"


class RoleForbidden(Forbidden):
    description = "Access Denied. Insufficient permissions."


class UnknownEmail(BadRequest):
    description = "User with this email does not exist."


class InvalidAccountId(BadRequest):
    description = "Invalid user ID"
