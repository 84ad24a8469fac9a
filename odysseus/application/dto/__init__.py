"""Data Transfer Objects for application layer."""

from .auth import RegisterRequest, LoginRequest, UserResponse, AuthResponse
from .account import OpenAccountRequest, AccountResponse
from .transaction import (
    ApplyTransactionRequest,
    ApplyTransactionResult,
    TransactionResponse,
    TransactionHistoryResponse,
    LedgerMismatch,
    ReconciliationResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
    "OpenAccountRequest",
    "AccountResponse",
    "ApplyTransactionRequest",
    "ApplyTransactionResult",
    "TransactionResponse",
    "TransactionHistoryResponse",
    "LedgerMismatch",
    "ReconciliationResponse",
]
