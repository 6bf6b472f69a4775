"""Account storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from models.account import Account


class AccountStore(ABC):
    """Interface for account persistence backends."""

    @abstractmethod
    def add(self, account: Account) -> Account:
        """Insert a new account; raise ``AccountExists`` on a duplicate email."""

    @abstractmethod
    def save(self, account: Account) -> Account:
        """Persist changes made to an already stored account."""

    @abstractmethod
    def delete(self, account: Account) -> None:
        """Remove the account."""

    @abstractmethod
    def get(self, account_id: int) -> Optional[Account]:
        """Return the account with the given id, if any."""

    @abstractmethod
    def list_all(self) -> list[Account]:
        """Return every stored account."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Account]:
        """Return the account registered under ``email``."""

    @abstractmethod
    def find_by_verification_token(self, token: str) -> Optional[Account]:
        """Return the unverified account holding ``token``."""

    @abstractmethod
    def find_by_reset_digest(self, digest: str, now: datetime) -> Optional[Account]:
        """Return the account whose reset digest matches and expires after ``now``."""
