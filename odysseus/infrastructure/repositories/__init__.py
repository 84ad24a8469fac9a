"""Repository implementations."""

from .account_repository import PostgresAccountRepository
from .transaction_repository import PostgresTransactionRepository
from .user_repository import PostgresUserRepository

__all__ = [
    "PostgresAccountRepository",
    "PostgresTransactionRepository",
    "PostgresUserRepository",
]
