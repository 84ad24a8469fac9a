"""Account and transaction posting endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response

from odysseus.application.dto import (
    AccountResponse,
    ApplyTransactionRequest,
    OpenAccountRequest,
    TransactionResponse,
)
from odysseus.application.services import AccountService, TransactionService
from odysseus.core.dependencies import (
    get_account_service,
    get_current_user_id,
    get_transaction_service,
)
from odysseus.core.metrics import track_transaction_latency
from odysseus.presentation.schemas import (
    AccountResponseSchema,
    ApplyTransactionRequestSchema,
    ErrorResponseSchema,
    LedgerMismatchSchema,
    OpenAccountRequestSchema,
    ReconciliationResponseSchema,
    TransactionHistoryResponseSchema,
    TransactionResponseSchema,
)

REPLAY_HEADER = "Idempotent-Replayed"

accounts_router = APIRouter(
    prefix="/accounts",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        401: {"model": ErrorResponseSchema, "description": "Unauthenticated"},
        403: {"model": ErrorResponseSchema, "description": "Not the account owner"},
        404: {"model": ErrorResponseSchema, "description": "Account not found"},
    },
)


def _account_schema(account: AccountResponse) -> AccountResponseSchema:
    return AccountResponseSchema(
        id=account.id,
        owner_id=account.owner_id,
        kind=account.kind,
        balance_cents=account.balance_cents,
        created_at=account.created_at,
    )


def transaction_schema(transaction: TransactionResponse) -> TransactionResponseSchema:
    return TransactionResponseSchema(
        id=transaction.id,
        account_id=transaction.account_id,
        kind=transaction.kind,
        amount_cents=transaction.amount_cents,
        balance_after_cents=transaction.balance_after_cents,
        description=transaction.description,
        created_at=transaction.created_at,
    )


@accounts_router.post(
    "",
    response_model=AccountResponseSchema,
    status_code=201,
    summary="Open Account",
    description="Open a checking, savings or credit account for the caller.",
)
async def open_account(
    request: OpenAccountRequestSchema,
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> AccountResponseSchema:
    account = await account_service.open_account(
        OpenAccountRequest(
            owner_id=request.user_id,
            kind=request.kind,
            opening_balance_cents=request.opening_balance_cents,
        ),
        caller_id,
    )
    return _account_schema(account)


@accounts_router.get(
    "",
    response_model=list[AccountResponseSchema],
    summary="List Accounts",
    description="List a user's accounts, newest first.",
)
async def list_accounts(
    user_id: Annotated[UUID, Query(description="Owner whose accounts to list")],
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> list[AccountResponseSchema]:
    accounts = await account_service.list_accounts(user_id, caller_id)
    return [_account_schema(account) for account in accounts]


@accounts_router.get(
    "/{account_id}",
    response_model=AccountResponseSchema,
    summary="Get Account",
)
async def get_account(
    account_id: Annotated[UUID, Path(description="UUID of the account")],
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> AccountResponseSchema:
    account = await account_service.get_account(account_id, caller_id)
    return _account_schema(account)


@accounts_router.post(
    "/{account_id}/transactions",
    response_model=TransactionResponseSchema,
    status_code=201,
    summary="Post Transaction",
    description="""
    Apply a credit or debit to an account owned by the caller.

    When `idempotency_key` matches an earlier transaction, that transaction
    is returned unchanged with status 200 and the `Idempotent-Replayed: true`
    header; the balance is not touched again.
    """,
    responses={
        200: {"model": TransactionResponseSchema, "description": "Idempotent replay"},
        409: {
            "model": ErrorResponseSchema,
            "description": "Insufficient funds, or idempotency key already used on another account",
        },
        500: {"model": ErrorResponseSchema, "description": "Reconciliation required"},
    },
)
async def post_transaction(
    account_id: Annotated[UUID, Path(description="UUID of the account")],
    request: ApplyTransactionRequestSchema,
    response: Response,
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    transaction_service: Annotated[TransactionService, Depends(get_transaction_service)],
) -> TransactionResponseSchema:
    dto = ApplyTransactionRequest(
        account_id=account_id,
        kind=request.kind,
        amount_cents=request.amount_cents,
        description=request.description,
        idempotency_key=request.idempotency_key,
    )

    with track_transaction_latency():
        result = await transaction_service.apply(dto, caller_id)

    if result.replayed:
        response.status_code = 200
    response.headers[REPLAY_HEADER] = "true" if result.replayed else "false"

    return transaction_schema(result.transaction)


@accounts_router.get(
    "/{account_id}/transactions",
    response_model=TransactionHistoryResponseSchema,
    summary="List Transactions",
    description="List an account's transactions, newest first.",
)
async def list_transactions(
    account_id: Annotated[UUID, Path(description="UUID of the account")],
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    transaction_service: Annotated[TransactionService, Depends(get_transaction_service)],
    limit: Annotated[
        int,
        Query(ge=1, le=500, description="Maximum number of transactions to return"),
    ] = 50,
    offset: Annotated[int, Query(ge=0, description="Transactions to skip")] = 0,
) -> TransactionHistoryResponseSchema:
    history = await transaction_service.list_transactions(
        account_id, caller_id, limit=limit, offset=offset
    )
    return TransactionHistoryResponseSchema(
        account_id=history.account_id,
        transactions=[transaction_schema(t) for t in history.transactions],
    )


@accounts_router.get(
    "/{account_id}/reconciliation",
    response_model=ReconciliationResponseSchema,
    summary="Reconcile Ledger",
    description="""
    Replay the account's transactions from its opening balance and compare
    each recorded balance and the final sum against the stored balance.
    """,
)
async def reconcile_account(
    account_id: Annotated[UUID, Path(description="UUID of the account")],
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    transaction_service: Annotated[TransactionService, Depends(get_transaction_service)],
) -> ReconciliationResponseSchema:
    report = await transaction_service.reconcile(account_id, caller_id)
    return ReconciliationResponseSchema(
        account_id=report.account_id,
        consistent=report.consistent,
        opening_balance_cents=report.opening_balance_cents,
        replayed_balance_cents=report.replayed_balance_cents,
        current_balance_cents=report.current_balance_cents,
        transaction_count=report.transaction_count,
        mismatches=[
            LedgerMismatchSchema(
                transaction_id=m.transaction_id,
                expected_balance_after_cents=m.expected_balance_after_cents,
                recorded_balance_after_cents=m.recorded_balance_after_cents,
            )
            for m in report.mismatches
        ],
    )
