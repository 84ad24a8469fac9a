"""Transaction-related Pydantic schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from odysseus.domain.entities import MAX_AMOUNT_CENTS, TransactionKind


class ApplyTransactionRequestSchema(BaseModel):
    """Schema for POST /v1/accounts/{account_id}/transactions request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "kind": "debit",
                    "amount_cents": 2500,
                    "description": "Coffee beans",
                    "idempotency_key": "tx-2025-09-17-0001",
                }
            ]
        }
    )

    kind: TransactionKind = Field(
        ...,
        description="credit adds to the balance, debit subtracts",
    )
    amount_cents: int = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT_CENTS,
        strict=True,
        description="Amount in cents",
        examples=[2500],
    )
    description: Optional[str] = Field(
        None,
        max_length=256,
        description="Free text shown in the statement",
    )
    idempotency_key: Optional[str] = Field(
        None,
        min_length=6,
        max_length=100,
        description=(
            "Client token; retries with the same key return the original "
            "transaction. Without it a retry is applied again."
        ),
    )


class TransactionResponseSchema(BaseModel):
    """Schema for a transaction in responses."""

    id: str = Field(..., description="UUID of the transaction")
    account_id: str = Field(..., description="UUID of the account")
    kind: str = Field(..., examples=["debit"])
    amount_cents: int = Field(..., gt=0, examples=[2500])
    balance_after_cents: int = Field(
        ...,
        ge=0,
        description="Account balance right after this transaction",
        examples=[7500],
    )
    description: Optional[str] = None
    created_at: str = Field(..., description="ISO 8601 timestamp")


class TransactionHistoryResponseSchema(BaseModel):
    """Schema for GET /v1/accounts/{account_id}/transactions response."""

    account_id: str
    transactions: list[TransactionResponseSchema] = Field(
        ...,
        description="Transactions, newest first",
    )


class LedgerMismatchSchema(BaseModel):
    """A log entry whose balance disagrees with the replay."""

    transaction_id: str
    expected_balance_after_cents: int
    recorded_balance_after_cents: int


class ReconciliationResponseSchema(BaseModel):
    """Schema for GET /v1/accounts/{account_id}/reconciliation response."""

    account_id: str
    consistent: bool
    opening_balance_cents: int
    replayed_balance_cents: int
    current_balance_cents: int
    transaction_count: int
    mismatches: list[LedgerMismatchSchema]
