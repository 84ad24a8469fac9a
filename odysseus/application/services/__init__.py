"""Application services (use cases)."""

from .account_service import AccountService
from .auth_service import AuthService
from .transaction_service import TransactionService

__all__ = [
    "AccountService",
    "AuthService",
    "TransactionService",
]
