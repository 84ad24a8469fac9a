"""Pydantic schemas for API request/response validation."""

from .auth import (
    RegisterRequestSchema,
    LoginRequestSchema,
    RefreshRequestSchema,
    UserSchema,
    AuthResponseSchema,
)
from .account import OpenAccountRequestSchema, AccountResponseSchema
from .transaction import (
    ApplyTransactionRequestSchema,
    TransactionResponseSchema,
    TransactionHistoryResponseSchema,
    LedgerMismatchSchema,
    ReconciliationResponseSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "RegisterRequestSchema",
    "LoginRequestSchema",
    "RefreshRequestSchema",
    "UserSchema",
    "AuthResponseSchema",
    "OpenAccountRequestSchema",
    "AccountResponseSchema",
    "ApplyTransactionRequestSchema",
    "TransactionResponseSchema",
    "TransactionHistoryResponseSchema",
    "LedgerMismatchSchema",
    "ReconciliationResponseSchema",
    "ErrorResponseSchema",
]
