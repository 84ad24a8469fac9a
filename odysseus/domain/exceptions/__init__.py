"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException, InvalidInputException, ForbiddenException
from .auth import (
    AuthenticationException,
    InvalidCredentialsException,
    UserNotFoundException,
    EmailAlreadyInUseException,
)
from .account import AccountNotFoundException, InsufficientFundsException
from .transaction import (
    TransactionNotFoundException,
    DuplicateIdempotencyKeyException,
    IdempotencyKeyConflictException,
    LedgerConsistencyException,
)

__all__ = [
    "DomainException",
    "InvalidInputException",
    "ForbiddenException",
    "AuthenticationException",
    "InvalidCredentialsException",
    "UserNotFoundException",
    "EmailAlreadyInUseException",
    "AccountNotFoundException",
    "InsufficientFundsException",
    "TransactionNotFoundException",
    "DuplicateIdempotencyKeyException",
    "IdempotencyKeyConflictException",
    "LedgerConsistencyException",
]
