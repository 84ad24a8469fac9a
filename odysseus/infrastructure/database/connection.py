"""Engine and session lifecycle for the ledger database."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from odysseus.core.config import is_sqlite_url, settings, to_async_url
from .models import Base

logger = structlog.get_logger(__name__)


class DatabaseSessionManager:
    """
    Owns the async engine and hands out one session per request.

    A request's balance update and its log entry share that session, so
    they commit together when the request succeeds and are rolled back
    together when it raises.
    """

    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    def init(self, database_url: str | None = None) -> None:
        """
        Create the engine and session factory.

        Args:
            database_url: Overrides ``settings.database_url``; plain
                ``postgres://``/``sqlite://`` URLs get their async driver
        """
        url = to_async_url(database_url) if database_url else settings.async_database_url

        options = {"echo": settings.debug, "pool_pre_ping": True}
        if not is_sqlite_url(url):
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
            )

        self._engine = create_async_engine(url, **options)
        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("database_initialized", driver=self._engine.url.drivername)

    async def create_all(self) -> None:
        """Create missing tables with their unique indexes and check constraints."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ensured")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on clean exit and rolled back on any exception."""
        if self._sessionmaker is None:
            raise RuntimeError("Database not initialized. Call init() first.")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


db_manager = DatabaseSessionManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding the request's session."""
    async with db_manager.session() as session:
        yield session
