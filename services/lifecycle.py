"""Account lifecycle: signup, verification, login and password reset.

States are ``unverified -> active`` and, independently, ``active <->
reset pending``. Every transition is a single read-modify-write against the
injected store:

* The email uniqueness check and the insert are not atomic; the unique
  constraint on ``accounts.email`` settles concurrent signups.
* Token lookup and token clearing are not atomic either, so two concurrent
  requests holding the same one-time token may both succeed.

Mail is dispatched only after the state change has been committed, and a
failed delivery never undoes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional

from email_validator import EmailNotValidError, validate_email

from models.account import DEFAULT_ROLE, ROLES, Account

from .credentials import MIN_PASSWORD_LENGTH, ensure_hashed, verify_password
from .exceptions import (
    AccountExists,
    AccountNotFound,
    AccountNotVerified,
    InvalidCredentials,
    InvalidOneTimeToken,
    UnknownEmail,
    ValidationFailed,
)
from .mailer import Mailer
from .tokens import IssuedResetToken, SessionToken, TokenService

if TYPE_CHECKING:
    from storage.abstract_store import AccountStore

logger = logging.getLogger(__name__)

VERIFICATION_FAILED = "Invalid or expired verification token"
RESET_FAILED = "Invalid or expired token."
UPDATABLE_FIELDS = ("name", "email", "age", "password")


@dataclass(frozen=True)
class ProfileImage:
    data: bytes
    content_type: str


def _error(field: str, message: str) -> dict[str, str]:
    return {"field": field, "message": message}


def normalize_email(raw_email: Optional[str]) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    if not isinstance(raw_email, str):
        return ""
    return raw_email.strip().lower()


def _check_email(raw_email, errors: list) -> str:
    email = normalize_email(raw_email)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        errors.append(_error("email", "Valid email is required"))
    return email


def _check_name(raw_name, errors: list) -> str:
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if not name:
        errors.append(_error("name", "Name is required"))
    return name


def _check_password(raw_password, errors: list, field: str = "password") -> str:
    password = raw_password if isinstance(raw_password, str) else ""
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            _error(field, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        )
    return password


def _check_age(raw_age, errors: list) -> Optional[int]:
    if isinstance(raw_age, bool):
        raw_age = None
    try:
        return int(str(raw_age).strip())
    except (TypeError, ValueError):
        errors.append(_error("age", "Age must be a number"))
        return None


def _check_role(raw_role, errors: list) -> str:
    """Return the role to assign; ``admin`` is never granted through signup."""

    if raw_role in (None, ""):
        return DEFAULT_ROLE
    if raw_role not in ROLES:
        errors.append(_error("role", "Invalid role"))
        return DEFAULT_ROLE
    return DEFAULT_ROLE if raw_role == "admin" else raw_role


class AccountLifecycle:
    """Drives accounts through their credential states."""

    def __init__(
        self,
        store: "AccountStore",
        tokens: TokenService,
        mailer: Mailer,
        *,
        base_url: str = "http://localhost:3000",
    ):
        self.store = store
        self.tokens = tokens
        self.mailer = mailer
        self.base_url = base_url.rstrip("/")

    # Signup and verification

    def signup(
        self, fields: Mapping[str, object], image: Optional[ProfileImage]
    ) -> Account:
        errors: list[dict[str, str]] = []
        name = _check_name(fields.get("name"), errors)
        email = _check_email(fields.get("email"), errors)
        password = _check_password(fields.get("password"), errors)
        age = _check_age(fields.get("age"), errors)
        role = _check_role(fields.get("role"), errors)
        if errors:
            raise ValidationFailed(errors)

        existing = self.store.find_by_email(email)
        if existing is not None:
            if not existing.is_verified and self.tokens.is_expired(
                existing.verification_expires
            ):
                return self._reissue_verification(existing)
            raise AccountExists()
        if image is None or not image.data:
            raise ValidationFailed(
                [_error("profilePic", "Profile picture is required!")]
            )

        token, expires_at = self.tokens.issue_verification()
        account = Account(
            name=name,
            email=email,
            age=age,
            role=role,
            is_verified=False,
            verification_token=token.value,
            verification_expires=expires_at,
        )
        account.set_profile_pic(image.data, image.content_type)
        ensure_hashed(account, password)
        self.store.add(account)
        logger.info("Account %s created, pending verification", account.id)
        self._send_verification(account, token)
        return account

    def _reissue_verification(self, account: Account) -> Account:
        """Replace an expired verification token and mail the new one."""

        token, expires_at = self.tokens.issue_verification()
        account.verification_token = token.value
        account.verification_expires = expires_at
        ensure_hashed(account)
        self.store.save(account)
        logger.info("Verification token reissued for account %s", account.id)
        self._send_verification(account, token)
        return account

    def _send_verification(self, account: Account, token) -> None:
        link = f"{self.base_url}/auth/verify/{token}"
        self.mailer.dispatch(
            account.email,
            "Email Verification",
            f'<p>Click <a href="{link}">here</a> to verify your email.</p>',
        )

    def verify_email(self, raw_token: Optional[str]) -> Account:
        try:
            token = self.tokens.parse_one_time(raw_token)
        except InvalidOneTimeToken:
            raise InvalidOneTimeToken(VERIFICATION_FAILED) from None

        account = self.store.find_by_verification_token(token.value)
        if account is None or self.tokens.is_expired(account.verification_expires):
            raise InvalidOneTimeToken(VERIFICATION_FAILED)

        account.mark_verified()
        ensure_hashed(account)
        self.store.save(account)
        logger.info("Account %s verified", account.id)
        return account

    # Authentication

    def login(self, raw_email: Optional[str], password: Optional[str]) -> SessionToken:
        errors: list[dict[str, str]] = []
        email = _check_email(raw_email, errors)
        if not isinstance(password, str) or not password.strip():
            errors.append(_error("password", "Password is required"))
        if errors:
            raise ValidationFailed(errors)

        account = self.store.find_by_email(email)
        if account is None:
            raise InvalidCredentials()
        if not account.is_verified:
            raise AccountNotVerified()
        if not verify_password(password, account.password):
            raise InvalidCredentials()
        return self.tokens.issue_session(account)

    # Password reset

    def forgot_password(self, raw_email: Optional[str]) -> IssuedResetToken:
        account = self.store.find_by_email(normalize_email(raw_email))
        if account is None:
            raise UnknownEmail()

        issued = self.tokens.issue_reset()
        account.start_password_reset(issued.digest, issued.expires_at)
        ensure_hashed(account)
        self.store.save(account)
        logger.info("Password reset requested for account %s", account.id)

        link = f"{self.base_url}/auth/reset-password/{issued.token}"
        self.mailer.dispatch(
            account.email,
            "Password Reset",
            f'<p>Click <a href="{link}">here</a> to reset your password.</p>',
        )
        return issued

    def reset_password(
        self, raw_token: Optional[str], new_password: Optional[str]
    ) -> Account:
        errors: list[dict[str, str]] = []
        password = _check_password(new_password, errors, field="newPassword")
        if errors:
            raise ValidationFailed(errors)

        try:
            token = self.tokens.parse_one_time(raw_token)
        except InvalidOneTimeToken:
            raise InvalidOneTimeToken(RESET_FAILED) from None

        account = self.store.find_by_reset_digest(token.digest, self.tokens.clock())
        if account is None:
            raise InvalidOneTimeToken(RESET_FAILED)

        ensure_hashed(account, password)
        account.clear_password_reset()
        self.store.save(account)
        logger.info("Password reset completed for account %s", account.id)
        return account

    # Direct account administration

    def create_account(self, fields: Mapping[str, object]) -> Account:
        """Create an account without the verification flow."""

        errors: list[dict[str, str]] = []
        name = _check_name(fields.get("name"), errors)
        email = _check_email(fields.get("email"), errors)
        password = _check_password(fields.get("password"), errors)
        age = _check_age(fields.get("age"), errors)
        if errors:
            raise ValidationFailed(errors)

        account = Account(name=name, email=email, age=age, role=DEFAULT_ROLE)
        ensure_hashed(account, password)
        return self.store.add(account)

    def list_accounts(self) -> list[Account]:
        return self.store.list_all()

    def get_account(self, account_id: int) -> Account:
        account = self.store.get(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    def update_account(self, account_id: int, fields: Mapping[str, object]) -> Account:
        unknown = sorted(key for key in fields if key not in UPDATABLE_FIELDS)
        if unknown:
            raise ValidationFailed(
                [_error(key, "Field cannot be updated") for key in unknown]
            )

        account = self.get_account(account_id)
        errors: list[dict[str, str]] = []
        changes: dict[str, object] = {}
        if "name" in fields:
            changes["name"] = _check_name(fields["name"], errors)
        if "email" in fields:
            changes["email"] = _check_email(fields["email"], errors)
        if "age" in fields:
            changes["age"] = _check_age(fields["age"], errors)
        new_password = None
        if "password" in fields:
            new_password = _check_password(fields["password"], errors)
        if errors:
            raise ValidationFailed(errors)

        for key, value in changes.items():
            setattr(account, key, value)
        ensure_hashed(account, new_password)
        return self.store.save(account)

    def delete_account(self, account_id: int) -> dict[str, object]:
        """Delete the account and return its last public representation."""

        account = self.get_account(account_id)
        snapshot = account.to_dict()
        self.store.delete(account)
        return snapshot

    def profile_picture(self, account_id: int) -> ProfileImage:
        account = self.store.get(account_id)
        if account is None or account.profile_pic is None:
            raise AccountNotFound("Image not found")
        return ProfileImage(
            data=account.profile_pic,
            content_type=account.profile_pic_content_type or "application/octet-stream",
        )
