"""Idempotent read-back endpoint."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from odysseus.application.services import TransactionService
from odysseus.core.dependencies import get_current_user_id, get_transaction_service
from odysseus.presentation.schemas import ErrorResponseSchema, TransactionResponseSchema
from .accounts import transaction_schema

transactions_router = APIRouter(prefix="/transactions")


@transactions_router.get(
    "/by-key/{idempotency_key}",
    response_model=TransactionResponseSchema,
    summary="Get Transaction by Idempotency Key",
    description="""
    Read back the transaction recorded under an idempotency key, e.g. after
    a client timed out without seeing the posting response.
    """,
    responses={
        401: {"model": ErrorResponseSchema, "description": "Unauthenticated"},
        404: {"model": ErrorResponseSchema, "description": "No transaction for key"},
    },
)
async def get_transaction_by_key(
    idempotency_key: Annotated[
        str,
        Path(min_length=6, max_length=100, description="Client idempotency key"),
    ],
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    transaction_service: Annotated[TransactionService, Depends(get_transaction_service)],
) -> TransactionResponseSchema:
    transaction = await transaction_service.get_by_idempotency_key(
        idempotency_key, caller_id
    )
    return transaction_schema(transaction)
