"""Account model definition."""

from datetime import datetime, timezone
from typing import Optional

from . import db


ROLES = ("user", "admin")
DEFAULT_ROLE = "user"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Account(db.Model):
    """Represents a registered account and its credential state."""

    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    age = db.Column(db.Integer, nullable=False)
    role = db.Column(
        db.Enum(*ROLES, name="account_role"),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=db.text("'user'"),
    )
    password = db.Column(db.String(255), nullable=False)
    is_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    verification_token = db.Column(db.String(64), nullable=True, index=True)
    verification_expires = db.Column(db.DateTime, nullable=True)
    reset_password_token = db.Column(db.String(64), nullable=True, index=True)
    reset_password_expires = db.Column(db.DateTime, nullable=True)
    profile_pic = db.Column(db.LargeBinary, nullable=True)
    profile_pic_content_type = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def mark_verified(self) -> None:
        """Activate the account and drop its verification token."""

        self.is_verified = True
        self.verification_token = None
        self.verification_expires = None

    def start_password_reset(self, token_digest: str, expires_at: datetime) -> None:
        self.reset_password_token = token_digest
        self.reset_password_expires = expires_at

    def clear_password_reset(self) -> None:
        self.reset_password_token = None
        self.reset_password_expires = None

    @property
    def reset_pending(self) -> bool:
        return self.reset_password_token is not None

    def set_profile_pic(self, data: bytes, content_type: Optional[str]) -> None:
        self.profile_pic = data
        self.profile_pic_content_type = content_type or "application/octet-stream"

    def to_dict(self) -> dict[str, object]:
        """Public representation; credential columns are never exposed."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "role": self.role,
            "is_verified": bool(self.is_verified),
            "has_profile_pic": self.profile_pic is not None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Account {self.email}>"
