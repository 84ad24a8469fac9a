"""Transaction entity representing one applied ledger entry."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .timestamps import isoformat_utc, utc_now

# Upper bound for a single amount (ten billion dollars); keeps balances well
# inside a 64-bit column.
MAX_AMOUNT_CENTS = 10**12


class TransactionKind(str, Enum):
    """Direction of a transaction."""

    CREDIT = "credit"  # Money in
    DEBIT = "debit"  # Money out

    def signed(self, amount_cents: int) -> int:
        """Return the balance delta for an amount of this kind."""
        return amount_cents if self is TransactionKind.CREDIT else -amount_cents


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of a transaction applied to an account.

    Attributes:
        account_id: Account the transaction was applied to
        kind: Credit or debit
        amount_cents: Strictly positive amount in cents
        balance_after_cents: Account balance right after this transaction
        description: Optional free text
        idempotency_key: Optional client token, unique across the ledger
    """

    account_id: UUID
    kind: TransactionKind
    amount_cents: int
    balance_after_cents: int
    description: Optional[str] = None
    idempotency_key: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def signed_amount_cents(self) -> int:
        """Get the amount with credit positive and debit negative."""
        return self.kind.signed(self.amount_cents)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": str(self.id),
            "account_id": str(self.account_id),
            "kind": self.kind.value,
            "amount_cents": self.amount_cents,
            "balance_after_cents": self.balance_after_cents,
            "description": self.description,
            "created_at": isoformat_utc(self.created_at),
        }
