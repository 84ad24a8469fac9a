"""Account-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from odysseus.domain.entities import MAX_AMOUNT_CENTS, AccountKind


class OpenAccountRequestSchema(BaseModel):
    """Schema for POST /v1/accounts request body."""

    user_id: UUID = Field(
        ...,
        description="Owner of the new account; must be the caller",
    )
    kind: AccountKind = Field(
        ...,
        description="Account type",
        examples=["checking"],
    )
    opening_balance_cents: int = Field(
        0,
        ge=0,
        le=MAX_AMOUNT_CENTS,
        strict=True,
        description="Opening balance in cents",
        examples=[10000],
    )


class AccountResponseSchema(BaseModel):
    """Schema for an account in responses."""

    id: str = Field(..., description="UUID of the account")
    owner_id: str = Field(..., description="UUID of the owning user")
    kind: str = Field(..., examples=["checking"])
    balance_cents: int = Field(..., ge=0, description="Current balance in cents")
    created_at: str = Field(..., description="ISO 8601 timestamp")
