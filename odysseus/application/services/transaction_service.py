"""Transaction service - posts idempotent credit/debit transactions."""

from uuid import UUID

import structlog

from odysseus.core.metrics import (
    record_idempotent_replay,
    record_ledger_consistency_failure,
    record_transaction,
)
from odysseus.domain.entities import Account, Transaction
from odysseus.domain.exceptions import (
    AccountNotFoundException,
    DuplicateIdempotencyKeyException,
    ForbiddenException,
    IdempotencyKeyConflictException,
    InsufficientFundsException,
    InvalidInputException,
    LedgerConsistencyException,
    TransactionNotFoundException,
)
from odysseus.domain.interfaces import AccountRepository, TransactionRepository
from odysseus.application.dto import (
    ApplyTransactionRequest,
    ApplyTransactionResult,
    LedgerMismatch,
    ReconciliationResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)

logger = structlog.get_logger(__name__)


class TransactionService:
    """
    Application service for posting and reading back transactions.

    Every repository call is a suspension point and no lock is held across
    them. Balance safety comes from the repository's guarded increment and
    idempotency from the unique key in the transaction log.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        transaction_repository: TransactionRepository,
    ):
        self._account_repo = account_repository
        self._transaction_repo = transaction_repository

    async def apply(
        self,
        request: ApplyTransactionRequest,
        caller_id: UUID,
    ) -> ApplyTransactionResult:
        """
        Apply a credit or debit to an account.

        Args:
            request: The validated transaction request
            caller_id: Authenticated user making the request

        Returns:
            ApplyTransactionResult with the created or replayed transaction

        Raises:
            InvalidInputException: If the request is malformed
            AccountNotFoundException: If the account does not exist
            ForbiddenException: If the caller does not own the account
            IdempotencyKeyConflictException: If the key belongs to another account
            InsufficientFundsException: If a debit would overdraw the account
            LedgerConsistencyException: If the balance changed but the log
                entry could not be written
        """
        errors = request.validate()
        if errors:
            raise InvalidInputException("; ".join(errors))

        kind = request.kind.value
        log = logger.bind(
            account_id=str(request.account_id),
            kind=kind,
            amount_cents=request.amount_cents,
            idempotency_key=request.idempotency_key,
        )

        account = await self._get_owned_account(request.account_id, caller_id)

        if request.idempotency_key:
            existing = await self._transaction_repo.find_by_idempotency_key(
                request.idempotency_key
            )
            if existing is not None:
                self._ensure_same_account(existing, account, request.idempotency_key)
                log.info("transaction_replayed", transaction_id=str(existing.id))
                record_idempotent_replay("lookup")
                record_transaction(kind, "replayed")
                return ApplyTransactionResult(
                    transaction=TransactionResponse.from_entity(existing),
                    replayed=True,
                )

        delta = request.kind.signed(request.amount_cents)
        balance_after = await self._account_repo.adjust_balance(account.id, delta)

        if balance_after is None:
            log.info("insufficient_funds")
            record_transaction(kind, "insufficient_funds")
            raise InsufficientFundsException(str(account.id), request.amount_cents)

        record = Transaction(
            account_id=account.id,
            kind=request.kind,
            amount_cents=request.amount_cents,
            balance_after_cents=balance_after,
            description=request.description,
            idempotency_key=request.idempotency_key,
        )

        try:
            created = await self._transaction_repo.append(record)
        except DuplicateIdempotencyKeyException:
            return await self._replay_after_race(request, account, log)
        except Exception as exc:
            log.critical(
                "ledger_append_failed",
                balance_after_cents=balance_after,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            record_ledger_consistency_failure()
            record_transaction(kind, "failed")
            raise LedgerConsistencyException(
                account_id=str(account.id),
                balance_after_cents=balance_after,
                reason=str(exc),
            ) from exc

        log.info(
            "transaction_applied",
            transaction_id=str(created.id),
            balance_after_cents=created.balance_after_cents,
        )
        record_transaction(kind, "applied", request.amount_cents)

        return ApplyTransactionResult(
            transaction=TransactionResponse.from_entity(created),
            replayed=False,
        )

    async def get_by_idempotency_key(
        self,
        idempotency_key: str,
        caller_id: UUID,
    ) -> TransactionResponse:
        """
        Read back the transaction recorded under an idempotency key.

        Raises:
            TransactionNotFoundException: If no transaction uses the key, or
                it belongs to an account the caller does not own
        """
        transaction = await self._transaction_repo.find_by_idempotency_key(
            idempotency_key
        )
        if transaction is None:
            raise TransactionNotFoundException(idempotency_key)

        account = await self._account_repo.get_by_id(transaction.account_id)
        if account is None or not account.is_owned_by(caller_id):
            raise TransactionNotFoundException(idempotency_key)

        return TransactionResponse.from_entity(transaction)

    async def list_transactions(
        self,
        account_id: UUID,
        caller_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> TransactionHistoryResponse:
        """
        List an account's transactions, newest first.

        Raises:
            AccountNotFoundException: If the account does not exist
            ForbiddenException: If the caller does not own the account
        """
        account = await self._get_owned_account(account_id, caller_id)
        transactions = await self._transaction_repo.list_by_account(
            account.id,
            newest_first=True,
            limit=limit,
            offset=offset,
        )
        return TransactionHistoryResponse.from_entities(account.id, transactions)

    async def reconcile(
        self,
        account_id: UUID,
        caller_id: UUID,
    ) -> ReconciliationResponse:
        """
        Replay an account's log from its opening balance.

        Every recorded ``balance_after_cents`` must equal the running sum,
        and the final sum must equal the current balance.
        """
        account = await self._get_owned_account(account_id, caller_id)
        transactions = await self._transaction_repo.list_by_account(
            account.id,
            newest_first=False,
        )
        # read after the log
        current = await self._account_repo.get_by_id(account.id)
        current_balance = current.balance_cents if current else account.balance_cents

        running = account.opening_balance_cents
        mismatches = []
        for transaction in transactions:
            running += transaction.signed_amount_cents
            if transaction.balance_after_cents != running:
                mismatches.append(
                    LedgerMismatch(
                        transaction_id=str(transaction.id),
                        expected_balance_after_cents=running,
                        recorded_balance_after_cents=transaction.balance_after_cents,
                    )
                )

        report = ReconciliationResponse(
            account_id=str(account.id),
            opening_balance_cents=account.opening_balance_cents,
            replayed_balance_cents=running,
            current_balance_cents=current_balance,
            transaction_count=len(transactions),
            mismatches=mismatches,
        )

        if not report.consistent:
            logger.error(
                "ledger_reconciliation_failed",
                account_id=str(account.id),
                replayed_balance_cents=running,
                current_balance_cents=current_balance,
                mismatches=len(mismatches),
            )
        else:
            logger.info(
                "ledger_reconciled",
                account_id=str(account.id),
                transaction_count=len(transactions),
            )

        return report

    async def _get_owned_account(self, account_id: UUID, caller_id: UUID) -> Account:
        """Resolve an account, checking existence before ownership."""
        account = await self._account_repo.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundException(str(account_id))

        if not account.is_owned_by(caller_id):
            logger.warning(
                "account_access_forbidden",
                account_id=str(account_id),
                caller_id=str(caller_id),
            )
            raise ForbiddenException()

        return account

    def _ensure_same_account(
        self,
        existing: Transaction,
        account: Account,
        idempotency_key: str,
    ) -> None:
        if existing.account_id != account.id:
            raise IdempotencyKeyConflictException(idempotency_key)

    async def _replay_after_race(
        self,
        request: ApplyTransactionRequest,
        account: Account,
        log,
    ) -> ApplyTransactionResult:
        """Return the transaction a concurrent writer committed under our key."""
        existing = await self._transaction_repo.find_by_idempotency_key(
            request.idempotency_key
        )
        if existing is None:
            # The unique index fired but the winner is not visible.
            record_ledger_consistency_failure()
            record_transaction(request.kind.value, "failed")
            log.critical("idempotent_replay_missing")
            raise LedgerConsistencyException(
                account_id=str(account.id),
                balance_after_cents=None,
                reason="duplicate idempotency key without a visible entry",
            )

        self._ensure_same_account(existing, account, request.idempotency_key)
        log.info("transaction_replayed_after_race", transaction_id=str(existing.id))
        record_idempotent_replay("race")
        record_transaction(request.kind.value, "replayed")
        return ApplyTransactionResult(
            transaction=TransactionResponse.from_entity(existing),
            replayed=True,
        )
