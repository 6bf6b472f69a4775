"""Account credential and lifecycle services."""

from .access import auth_required, require_role, role_required
from .credentials import CredentialError, PasswordHash, hash_password, verify_password
from .lifecycle import AccountLifecycle
from .mailer import Mailer, SMTPMailer
from .tokens import OneTimeToken, SessionClaims, SessionToken, TokenService

__all__ = [
    "AccountLifecycle",
    "CredentialError",
    "Mailer",
    "OneTimeToken",
    "PasswordHash",
    "SMTPMailer",
    "SessionClaims",
    "SessionToken",
    "TokenService",
    "auth_required",
    "hash_password",
    "require_role",
    "role_required",
    "verify_password",
]
