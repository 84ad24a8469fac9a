"""
Fixtures for integration tests.

Provides:
- Test client for the FastAPI app
- In-memory SQLite database with one session per request
- Registered users with bearer tokens and accounts
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from odysseus.core.config import settings
from odysseus.infrastructure.database import Base, get_db_session
from odysseus.main import app


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client backed by the in-memory database.

    Each request gets its own session, committed when the request
    succeeds and rolled back otherwise, as in production.
    """

    async def override_get_db_session():
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def register_user(client: AsyncClient):
    """
    Register a user through the API.

    The returned body carries ready-to-use ``headers`` with its bearer token.
    """

    async def _register(email: str, name: str = "Test User") -> dict:
        response = await client.post(
            "/v1/auth/register",
            json={"email": email, "name": name, "password": "correct-horse"},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['access_token']}"}
        return body

    return _register


@pytest.fixture
def open_account(client: AsyncClient):
    """Open an account for a registered user through the API."""

    async def _open(user: dict, kind: str = "checking", opening_balance_cents: int = 0) -> dict:
        response = await client.post(
            "/v1/accounts",
            json={
                "user_id": user["user"]["id"],
                "kind": kind,
                "opening_balance_cents": opening_balance_cents,
            },
            headers=user["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _open


@pytest_asyncio.fixture
async def ada(register_user) -> dict:
    """A registered user."""
    return await register_user("ada@example.com", "Ada Lovelace")


@pytest_asyncio.fixture
async def eve(register_user) -> dict:
    """A second registered user who owns nothing of Ada's."""
    return await register_user("eve@example.com", "Eve")


@pytest_asyncio.fixture
async def checking(open_account, ada: dict) -> dict:
    """Ada's checking account with an empty balance."""
    return await open_account(ada)
