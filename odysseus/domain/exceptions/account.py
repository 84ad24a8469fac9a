"""Account-related domain exceptions."""

from .base import DomainException


class AccountNotFoundException(DomainException):
    """Raised when an account cannot be found."""

    def __init__(self, account_id: str):
        super().__init__(
            message=f"Account not found: {account_id}",
            code="ACCOUNT_NOT_FOUND",
        )
        self.account_id = account_id


class InsufficientFundsException(DomainException):
    """Raised when a debit would take the balance below zero."""

    def __init__(self, account_id: str, amount_cents: int):
        super().__init__(
            message="Insufficient funds",
            code="INSUFFICIENT_FUNDS",
        )
        self.account_id = account_id
        self.amount_cents = amount_cents
