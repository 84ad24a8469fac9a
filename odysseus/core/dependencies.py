"""Dependency injection for FastAPI."""

from typing import Annotated, Optional
from uuid import UUID

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from odysseus.core.security import decode_token
from odysseus.domain.exceptions import AuthenticationException
from odysseus.infrastructure.database import get_db_session
from odysseus.infrastructure.repositories import (
    PostgresAccountRepository,
    PostgresTransactionRepository,
    PostgresUserRepository,
)
from odysseus.application.services import (
    AccountService,
    AuthService,
    TransactionService,
)

bearer_scheme = HTTPBearer(auto_error=False)


# Repository dependencies
async def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresUserRepository:
    """Get a UserRepository instance."""
    return PostgresUserRepository(session)


async def get_account_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAccountRepository:
    """Get an AccountRepository instance."""
    return PostgresAccountRepository(session)


async def get_transaction_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresTransactionRepository:
    """Get a TransactionRepository instance."""
    return PostgresTransactionRepository(session)


# Identity
async def get_current_user_id(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials],
        Depends(bearer_scheme),
    ],
) -> UUID:
    """Resolve the verified user id from the bearer access token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException()

    user_id = decode_token(credentials.credentials)
    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return user_id


# Service dependencies
async def get_auth_service(
    user_repo: Annotated[PostgresUserRepository, Depends(get_user_repository)],
) -> AuthService:
    """Get an AuthService instance."""
    return AuthService(user_repository=user_repo)


async def get_account_service(
    account_repo: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
    user_repo: Annotated[PostgresUserRepository, Depends(get_user_repository)],
) -> AccountService:
    """Get an AccountService instance."""
    return AccountService(
        account_repository=account_repo,
        user_repository=user_repo,
    )


async def get_transaction_service(
    account_repo: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
    transaction_repo: Annotated[
        PostgresTransactionRepository,
        Depends(get_transaction_repository),
    ],
) -> TransactionService:
    """Get a TransactionService instance with all dependencies."""
    return TransactionService(
        account_repository=account_repo,
        transaction_repository=transaction_repo,
    )
