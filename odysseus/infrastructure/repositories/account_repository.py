"""PostgreSQL implementation of AccountRepository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from odysseus.domain.entities import Account, AccountKind
from odysseus.domain.entities.timestamps import ensure_utc
from odysseus.domain.interfaces import AccountRepository
from odysseus.infrastructure.database.models import AccountModel


class PostgresAccountRepository(AccountRepository):
    """
    PostgreSQL implementation of the Account repository.

    Balance changes are a single guarded ``UPDATE ... RETURNING`` statement;
    the row lock taken by the update serializes concurrent writers on the
    same account.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, account: Account) -> Account:
        """Persist a newly opened account."""
        model = AccountModel(
            id=str(account.id),
            owner_id=str(account.owner_id),
            kind=account.kind.value,
            balance_cents=account.balance_cents,
            opening_balance_cents=account.opening_balance_cents,
            created_at=account.created_at,
        )

        self._session.add(model)
        await self._session.flush()

        return account

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Retrieve an account by ID."""
        stmt = (
            select(AccountModel)
            .where(AccountModel.id == str(account_id))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_owner(self, owner_id: UUID) -> List[Account]:
        """Retrieve accounts for a user, ordered by created_at descending."""
        stmt = (
            select(AccountModel)
            .where(AccountModel.owner_id == str(owner_id))
            .order_by(AccountModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def adjust_balance(self, account_id: UUID, delta_cents: int) -> Optional[int]:
        """Apply a guarded increment and return the new balance."""
        new_balance = AccountModel.balance_cents + delta_cents
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == str(account_id))
            .where(new_balance >= 0)
            .values(balance_cents=new_balance)
            .returning(AccountModel.balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: AccountModel) -> Account:
        """Convert database model to domain entity."""
        return Account(
            id=UUID(model.id),
            owner_id=UUID(model.owner_id),
            kind=AccountKind(model.kind),
            balance_cents=model.balance_cents,
            opening_balance_cents=model.opening_balance_cents,
            created_at=ensure_utc(model.created_at),
        )
