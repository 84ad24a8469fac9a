"""Data transfer objects for account operations."""

from dataclasses import dataclass
from typing import List
from uuid import UUID

from odysseus.domain.entities import MAX_AMOUNT_CENTS, AccountKind
from odysseus.domain.entities.timestamps import isoformat_utc


@dataclass(frozen=True)
class OpenAccountRequest:
    """Input data for opening an account."""

    owner_id: UUID
    kind: AccountKind
    opening_balance_cents: int = 0

    def validate(self) -> List[str]:
        errors = []

        if not isinstance(self.kind, AccountKind):
            errors.append("kind must be one of checking, savings, credit")

        if (
            isinstance(self.opening_balance_cents, bool)
            or not isinstance(self.opening_balance_cents, int)
            or not 0 <= self.opening_balance_cents <= MAX_AMOUNT_CENTS
        ):
            errors.append(
                "opening_balance_cents must be a non-negative integer "
                f"no greater than {MAX_AMOUNT_CENTS}"
            )

        return errors


@dataclass(frozen=True)
class AccountResponse:
    """Response data for an account."""

    id: str
    owner_id: str
    kind: str
    balance_cents: int
    created_at: str

    @classmethod
    def from_entity(cls, account) -> "AccountResponse":
        return cls(
            id=str(account.id),
            owner_id=str(account.owner_id),
            kind=account.kind.value,
            balance_cents=account.balance_cents,
            created_at=isoformat_utc(account.created_at),
        )
