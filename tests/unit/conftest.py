"""
Fixtures for unit tests.

Provides in-memory implementations of the repository ports:
- A shared store standing in for the database
- Per-request "units of work" so concurrent requests behave like separate
  database sessions (a duplicate-key failure undoes that request's
  balance change, as a SQL rollback would)
"""

import asyncio
from dataclasses import replace
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest

from odysseus.application.services import AccountService, TransactionService
from odysseus.domain.entities import Account, AccountKind, Transaction, User
from odysseus.domain.exceptions import (
    DuplicateIdempotencyKeyException,
    EmailAlreadyInUseException,
)
from odysseus.domain.interfaces import (
    AccountRepository,
    TransactionRepository,
    UserRepository,
)


# =============================================================================
# In-memory store
# =============================================================================

class InMemoryStore:
    """Shared state for all fake repositories in a test."""

    def __init__(self):
        self.users: Dict[UUID, User] = {}
        self.accounts: Dict[UUID, Account] = {}
        self.transactions: List[Transaction] = []
        self.fail_next_append: Optional[Exception] = None
        self.calls: List[str] = []

    def add_user(self, email: str = "ada@example.com", name: str = "Ada") -> User:
        user = User(email=email, name=name, password_hash="x")
        self.users[user.id] = user
        return user

    def add_account(
        self,
        owner: User,
        balance_cents: int = 0,
        kind: AccountKind = AccountKind.CHECKING,
    ) -> Account:
        account = Account(
            owner_id=owner.id,
            kind=kind,
            balance_cents=balance_cents,
            opening_balance_cents=balance_cents,
        )
        self.accounts[account.id] = account
        return account

    def balance(self, account_id: UUID) -> int:
        return self.accounts[account_id].balance_cents


class FakeUnitOfWork:
    """Tracks balance changes made during one request so they can be undone."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self._undo: List[tuple] = []

    def record(self, account_id: UUID, delta_cents: int) -> None:
        self._undo.append((account_id, delta_cents))

    def rollback(self) -> None:
        for account_id, delta_cents in reversed(self._undo):
            self.store.accounts[account_id].balance_cents -= delta_cents
        self._undo.clear()


class FakeUserRepository(UserRepository):

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, user: User) -> User:
        await asyncio.sleep(0)
        if any(u.email == user.email for u in self._store.users.values()):
            raise EmailAlreadyInUseException(user.email)
        self._store.users[user.id] = user
        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        await asyncio.sleep(0)
        return self._store.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        await asyncio.sleep(0)
        for user in self._store.users.values():
            if user.email == email:
                return user
        return None

    async def list_all(self) -> List[User]:
        await asyncio.sleep(0)
        return sorted(self._store.users.values(), key=lambda u: u.created_at, reverse=True)


class FakeAccountRepository(AccountRepository):
    """Guarded increment with no suspension point between check and write."""

    def __init__(self, store: InMemoryStore, uow: FakeUnitOfWork):
        self._store = store
        self._uow = uow

    async def create(self, account: Account) -> Account:
        await asyncio.sleep(0)
        self._store.calls.append("account.create")
        self._store.accounts[account.id] = replace(account)
        return account

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        await asyncio.sleep(0)
        self._store.calls.append("account.get_by_id")
        account = self._store.accounts.get(account_id)
        return replace(account) if account else None

    async def get_by_owner(self, owner_id: UUID) -> List[Account]:
        await asyncio.sleep(0)
        owned = [replace(a) for a in self._store.accounts.values() if a.owner_id == owner_id]
        return sorted(owned, key=lambda a: a.created_at, reverse=True)

    async def adjust_balance(self, account_id: UUID, delta_cents: int) -> Optional[int]:
        await asyncio.sleep(0)
        self._store.calls.append("account.adjust_balance")
        account = self._store.accounts.get(account_id)
        if account is None or account.balance_cents + delta_cents < 0:
            return None
        account.balance_cents += delta_cents
        self._uow.record(account_id, delta_cents)
        return account.balance_cents


class FakeTransactionRepository(TransactionRepository):

    def __init__(self, store: InMemoryStore, uow: FakeUnitOfWork):
        self._store = store
        self._uow = uow

    async def append(self, transaction: Transaction) -> Transaction:
        await asyncio.sleep(0)
        self._store.calls.append("transactions.append")
        if self._store.fail_next_append is not None:
            error, self._store.fail_next_append = self._store.fail_next_append, None
            raise error
        key = transaction.idempotency_key
        if key and any(t.idempotency_key == key for t in self._store.transactions):
            self._uow.rollback()
            raise DuplicateIdempotencyKeyException(key)
        self._store.transactions.append(transaction)
        return transaction

    async def get_by_id(self, transaction_id: UUID) -> Optional[Transaction]:
        await asyncio.sleep(0)
        for t in self._store.transactions:
            if t.id == transaction_id:
                return t
        return None

    async def find_by_idempotency_key(self, key: str) -> Optional[Transaction]:
        await asyncio.sleep(0)
        self._store.calls.append("transactions.find_by_idempotency_key")
        for t in self._store.transactions:
            if t.idempotency_key == key:
                return t
        return None

    async def list_by_account(
        self,
        account_id: UUID,
        newest_first: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Transaction]:
        await asyncio.sleep(0)
        entries = [t for t in self._store.transactions if t.account_id == account_id]
        if newest_first:
            entries.reverse()
        entries = entries[offset:]
        return entries[:limit] if limit is not None else entries


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store() -> InMemoryStore:
    """Create an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def owner(store: InMemoryStore) -> User:
    """A registered user who owns the test accounts."""
    return store.add_user()


@pytest.fixture
def stranger(store: InMemoryStore) -> User:
    """A registered user who owns nothing."""
    return store.add_user(email="eve@example.com", name="Eve")


@pytest.fixture
def make_transaction_service(store: InMemoryStore):
    """Build a TransactionService bound to its own unit of work, per request."""

    def _make() -> TransactionService:
        uow = FakeUnitOfWork(store)
        return TransactionService(
            account_repository=FakeAccountRepository(store, uow),
            transaction_repository=FakeTransactionRepository(store, uow),
        )

    return _make


@pytest.fixture
def transaction_service(make_transaction_service) -> TransactionService:
    return make_transaction_service()


@pytest.fixture
def account_service(store: InMemoryStore) -> AccountService:
    uow = FakeUnitOfWork(store)
    return AccountService(
        account_repository=FakeAccountRepository(store, uow),
        user_repository=FakeUserRepository(store),
    )


@pytest.fixture
def user_repository(store: InMemoryStore) -> FakeUserRepository:
    return FakeUserRepository(store)


@pytest.fixture
def missing_id() -> UUID:
    return uuid4()
