"""Account entity holding a balance in cents."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from .timestamps import isoformat_utc, utc_now


class AccountKind(str, Enum):
    """Type of account."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"


@dataclass
class Account:
    """
    A typed account owned by a single user.

    The balance is only ever changed through the guarded increment of the
    account repository; it never goes below zero, for every kind including
    ``credit``.
    """

    owner_id: UUID
    kind: AccountKind
    balance_cents: int = 0
    opening_balance_cents: int = 0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def is_owned_by(self, user_id: UUID) -> bool:
        """Check whether the given user owns this account."""
        return self.owner_id == user_id

    @property
    def balance_dollars(self) -> float:
        """Get balance in dollars."""
        return self.balance_cents / 100

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "kind": self.kind.value,
            "balance_cents": self.balance_cents,
            "opening_balance_cents": self.opening_balance_cents,
            "created_at": isoformat_utc(self.created_at),
        }
