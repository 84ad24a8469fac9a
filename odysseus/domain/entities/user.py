"""User entity representing a registered ledger customer."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from .timestamps import isoformat_utc, utc_now


@dataclass
class User:
    """
    A registered user.

    ``password_hash`` is a bcrypt digest and is never serialized.
    """

    email: str
    name: str
    password_hash: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "created_at": isoformat_utc(self.created_at),
        }
