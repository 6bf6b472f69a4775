"""Account storage backends."""

from .abstract_store import AccountStore
from .sql_store import SQLAlchemyAccountStore

__all__ = ["AccountStore", "SQLAlchemyAccountStore"]
