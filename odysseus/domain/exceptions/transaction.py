"""Transaction-related domain exceptions."""

from .base import DomainException


class TransactionNotFoundException(DomainException):
    """Raised when no transaction matches a lookup."""

    def __init__(self, reference: str):
        super().__init__(
            message=f"Transaction not found: {reference}",
            code="TRANSACTION_NOT_FOUND",
        )
        self.reference = reference


class DuplicateIdempotencyKeyException(DomainException):
    """
    Raised by the transaction log when an idempotency key already exists.

    Never surfaced to callers: the transaction service converts it into a
    replay of the stored transaction.
    """

    def __init__(self, idempotency_key: str):
        super().__init__(
            message=f"Duplicate idempotency key: {idempotency_key}",
            code="DUPLICATE_IDEMPOTENCY_KEY",
        )
        self.idempotency_key = idempotency_key


class IdempotencyKeyConflictException(DomainException):
    """Raised when an idempotency key was already used on another account."""

    def __init__(self, idempotency_key: str):
        super().__init__(
            message="Idempotency key already used for a different account",
            code="IDEMPOTENCY_KEY_CONFLICT",
        )
        self.idempotency_key = idempotency_key


class LedgerConsistencyException(DomainException):
    """
    Raised when a balance mutation committed but its log entry did not.

    Requires out-of-band reconciliation; must never be retried
    automatically.
    """

    def __init__(self, account_id: str, balance_after_cents: int | None, reason: str):
        super().__init__(
            message="Transaction could not be recorded; reconciliation required",
            code="LEDGER_INCONSISTENT",
        )
        self.account_id = account_id
        self.balance_after_cents = balance_after_cents
        self.reason = reason
