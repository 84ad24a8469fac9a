"""Domain Entities - Core business objects."""

from .account import Account, AccountKind
from .transaction import MAX_AMOUNT_CENTS, Transaction, TransactionKind
from .user import User

__all__ = [
    "Account",
    "AccountKind",
    "MAX_AMOUNT_CENTS",
    "Transaction",
    "TransactionKind",
    "User",
]
