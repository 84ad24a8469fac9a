"""PostgreSQL implementation of UserRepository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from odysseus.domain.entities import User
from odysseus.domain.entities.timestamps import ensure_utc
from odysseus.domain.exceptions import EmailAlreadyInUseException
from odysseus.domain.interfaces import UserRepository
from odysseus.infrastructure.database.models import UserModel


class PostgresUserRepository(UserRepository):
    """
    PostgreSQL implementation of the User repository.

    Email uniqueness is enforced by the unique index on ``users.email``.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, user: User) -> User:
        """Persist a user to the database."""
        model = UserModel(
            id=str(user.id),
            email=user.email,
            name=user.name,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise EmailAlreadyInUseException(user.email) from exc

        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Retrieve a user by ID."""
        stmt = select(UserModel).where(UserModel.id == str(user_id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by email."""
        stmt = select(UserModel).where(UserModel.email == email.lower())
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def list_all(self) -> List[User]:
        """Retrieve all users, newest first."""
        stmt = select(UserModel).order_by(UserModel.created_at.desc())
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: UserModel) -> User:
        """Convert database model to domain entity."""
        return User(
            id=UUID(model.id),
            email=model.email,
            name=model.name,
            password_hash=model.password_hash,
            created_at=ensure_utc(model.created_at),
        )
