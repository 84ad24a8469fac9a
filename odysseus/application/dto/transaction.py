"""Data transfer objects for transaction posting and read-back."""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from odysseus.domain.entities import MAX_AMOUNT_CENTS, TransactionKind
from odysseus.domain.entities.timestamps import isoformat_utc

MAX_DESCRIPTION_LENGTH = 256
MIN_IDEMPOTENCY_KEY_LENGTH = 6
MAX_IDEMPOTENCY_KEY_LENGTH = 100


@dataclass(frozen=True)
class ApplyTransactionRequest:
    """
    Input data for posting a transaction.

    Without an ``idempotency_key`` there is no replay protection: a
    retried request is applied again.
    """

    account_id: UUID
    kind: TransactionKind
    amount_cents: int
    description: Optional[str] = None
    idempotency_key: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not isinstance(self.kind, TransactionKind):
            errors.append("kind must be credit or debit")

        if (
            isinstance(self.amount_cents, bool)
            or not isinstance(self.amount_cents, int)
            or not 0 < self.amount_cents <= MAX_AMOUNT_CENTS
        ):
            errors.append(
                f"amount_cents must be a positive integer no greater than {MAX_AMOUNT_CENTS}"
            )

        if self.description is not None and len(self.description) > MAX_DESCRIPTION_LENGTH:
            errors.append(
                f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )

        if self.idempotency_key is not None and not (
            MIN_IDEMPOTENCY_KEY_LENGTH
            <= len(self.idempotency_key)
            <= MAX_IDEMPOTENCY_KEY_LENGTH
        ):
            errors.append(
                "idempotency_key must be between "
                f"{MIN_IDEMPOTENCY_KEY_LENGTH} and {MAX_IDEMPOTENCY_KEY_LENGTH} characters"
            )

        return errors


@dataclass(frozen=True)
class TransactionResponse:
    """Response data for an applied transaction."""

    id: str
    account_id: str
    kind: str
    amount_cents: int
    balance_after_cents: int
    description: Optional[str]
    created_at: str

    @classmethod
    def from_entity(cls, transaction) -> "TransactionResponse":
        return cls(
            id=str(transaction.id),
            account_id=str(transaction.account_id),
            kind=transaction.kind.value,
            amount_cents=transaction.amount_cents,
            balance_after_cents=transaction.balance_after_cents,
            description=transaction.description,
            created_at=isoformat_utc(transaction.created_at),
        )


@dataclass(frozen=True)
class ApplyTransactionResult:
    """Outcome of a posting: the transaction and whether it was a replay."""

    transaction: TransactionResponse
    replayed: bool


@dataclass(frozen=True)
class TransactionHistoryResponse:
    """Transactions of an account, newest first."""

    account_id: str
    transactions: List[TransactionResponse]

    @classmethod
    def from_entities(cls, account_id, transactions: list) -> "TransactionHistoryResponse":
        return cls(
            account_id=str(account_id),
            transactions=[TransactionResponse.from_entity(t) for t in transactions],
        )


@dataclass(frozen=True)
class LedgerMismatch:
    """A log entry whose recorded balance disagrees with the replay."""

    transaction_id: str
    expected_balance_after_cents: int
    recorded_balance_after_cents: int


@dataclass(frozen=True)
class ReconciliationResponse:
    """Result of replaying an account's log from its opening balance."""

    account_id: str
    opening_balance_cents: int
    replayed_balance_cents: int
    current_balance_cents: int
    transaction_count: int
    mismatches: List[LedgerMismatch]

    @property
    def consistent(self) -> bool:
        return (
            not self.mismatches
            and self.replayed_balance_cents == self.current_balance_cents
        )
