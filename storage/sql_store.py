"""SQLAlchemy account storage implementation."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.account import Account
from services.exceptions import AccountExists

from .abstract_store import AccountStore

logger = logging.getLogger(__name__)


class SQLAlchemyAccountStore(AccountStore):
    """Persist accounts through a Flask-SQLAlchemy session.

    Every write commits immediately; a failed commit is rolled back so the
    scoped session stays usable for the next request.
    """

    def __init__(self, db: SQLAlchemy):
        self._db = db

    @property
    def _session(self):
        return self._db.session

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def add(self, account: Account) -> Account:
        self._session.add(account)
        try:
            self._commit()
        except IntegrityError as exc:
            logger.info("Rejected duplicate account insert for %s", account.email)
            raise AccountExists() from exc
        return account

    def save(self, account: Account) -> Account:
        self._session.add(account)
        try:
            self._commit()
        except IntegrityError as exc:
            raise AccountExists() from exc
        return account

    def delete(self, account: Account) -> None:
        self._session.delete(account)
        self._commit()

    def get(self, account_id: int) -> Optional[Account]:
        return self._session.get(Account, account_id)

    def list_all(self) -> list[Account]:
        return Account.query.order_by(Account.id.asc()).all()

    def find_by_email(self, email: str) -> Optional[Account]:
        return Account.query.filter(func.lower(Account.email) == email.lower()).first()

    def find_by_verification_token(self, token: str) -> Optional[Account]:
        return Account.query.filter_by(
            verification_token=token, is_verified=False
        ).first()

    def find_by_reset_digest(self, digest: str, now: datetime) -> Optional[Account]:
        return Account.query.filter(
            Account.reset_password_token == digest,
            Account.reset_password_expires > now,
        ).first()
