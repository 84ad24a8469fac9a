"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from odysseus.domain.entities import Account, Transaction, User


class UserRepository(ABC):
    """
    Abstract repository for User persistence.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def save(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            EmailAlreadyInUseException: If the email is already registered
        """
        ...

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Retrieve a user by ID, or None."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (lower-cased) email, or None."""
        ...

    @abstractmethod
    async def list_all(self) -> List[User]:
        """Retrieve all users, newest first."""
        ...


class AccountRepository(ABC):
    """
    Abstract repository for Account persistence.

    The balance column is only mutated through ``adjust_balance``. Callers
    never read a balance and write it back.
    """

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """
        Persist a newly opened account.

        Args:
            account: The account to save; its opening balance must be >= 0

        Returns:
            The saved account
        """
        ...

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """
        Retrieve an account by ID.

        Args:
            account_id: The account's unique identifier

        Returns:
            The account if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_owner(self, owner_id: UUID) -> List[Account]:
        """
        Retrieve all accounts of a user.

        Returns:
            List of accounts, ordered by created_at descending
        """
        ...

    @abstractmethod
    async def adjust_balance(self, account_id: UUID, delta_cents: int) -> Optional[int]:
        """
        Atomically add ``delta_cents`` to the balance if it stays >= 0.

        The guard ``balance + delta >= 0`` is evaluated in the same atomic
        step as the increment, so no concurrent call can observe or act on
        an intermediate state.

        Args:
            account_id: The account to adjust
            delta_cents: Signed change in cents

        Returns:
            The balance after the increment, or None if the guard failed or
            the account does not exist
        """
        ...


class TransactionRepository(ABC):
    """
    Abstract repository for the append-only transaction log.

    The log doubles as the idempotency ledger: ``idempotency_key`` is
    unique across all entries.
    """

    @abstractmethod
    async def append(self, transaction: Transaction) -> Transaction:
        """
        Append a transaction to the log.

        Args:
            transaction: The transaction to record

        Returns:
            The recorded transaction

        Raises:
            DuplicateIdempotencyKeyException: If the idempotency key
                collides with an existing entry
        """
        ...

    @abstractmethod
    async def get_by_id(self, transaction_id: UUID) -> Optional[Transaction]:
        """Retrieve a transaction by ID, or None."""
        ...

    @abstractmethod
    async def find_by_idempotency_key(self, key: str) -> Optional[Transaction]:
        """
        Retrieve the transaction recorded under an idempotency key.

        Args:
            key: Client-supplied idempotency key

        Returns:
            The transaction if found, None otherwise
        """
        ...

    @abstractmethod
    async def list_by_account(
        self,
        account_id: UUID,
        newest_first: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Transaction]:
        """
        Retrieve the transactions of an account.

        Args:
            account_id: The account's identifier
            newest_first: Order by creation descending when True,
                ascending (replay order) otherwise
            limit: Maximum number of transactions to return, None for all
            offset: Number of transactions to skip

        Returns:
            List of transactions in the requested order
        """
        ...
