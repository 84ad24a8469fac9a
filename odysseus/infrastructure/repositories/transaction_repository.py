"""PostgreSQL implementation of TransactionRepository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from odysseus.domain.entities import Transaction, TransactionKind
from odysseus.domain.entities.timestamps import ensure_utc
from odysseus.domain.exceptions import DuplicateIdempotencyKeyException
from odysseus.domain.interfaces import TransactionRepository
from odysseus.infrastructure.database.models import TransactionModel


class PostgresTransactionRepository(TransactionRepository):
    """
    PostgreSQL implementation of the transaction log.

    Entries are insert-only. A collision on the unique ``idempotency_key``
    index rolls the session back, which also undoes a balance increment
    made earlier in the same database transaction, and is reported as
    ``DuplicateIdempotencyKeyException``.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(self, transaction: Transaction) -> Transaction:
        """Insert a transaction into the log."""
        model = TransactionModel(
            id=str(transaction.id),
            account_id=str(transaction.account_id),
            kind=transaction.kind.value,
            amount_cents=transaction.amount_cents,
            balance_after_cents=transaction.balance_after_cents,
            description=transaction.description,
            idempotency_key=transaction.idempotency_key,
            created_at=transaction.created_at,
        )

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            if transaction.idempotency_key and "idempotency_key" in str(exc.orig):
                raise DuplicateIdempotencyKeyException(
                    transaction.idempotency_key
                ) from exc
            raise

        return transaction

    async def get_by_id(self, transaction_id: UUID) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        stmt = select(TransactionModel).where(
            TransactionModel.id == str(transaction_id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def find_by_idempotency_key(self, key: str) -> Optional[Transaction]:
        """Retrieve the transaction recorded under an idempotency key."""
        stmt = select(TransactionModel).where(TransactionModel.idempotency_key == key)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def list_by_account(
        self,
        account_id: UUID,
        newest_first: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Transaction]:
        """Retrieve transactions for an account in log order."""
        order = TransactionModel.seq.desc() if newest_first else TransactionModel.seq.asc()
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.account_id == str(account_id))
            .order_by(order)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: TransactionModel) -> Transaction:
        """Convert database model to domain entity."""
        return Transaction(
            id=UUID(model.id),
            account_id=UUID(model.account_id),
            kind=TransactionKind(model.kind),
            amount_cents=model.amount_cents,
            balance_after_cents=model.balance_after_cents,
            description=model.description,
            idempotency_key=model.idempotency_key,
            created_at=ensure_utc(model.created_at),
        )
