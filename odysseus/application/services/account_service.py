"""Account service - opening accounts and reading balances."""

from uuid import UUID

import structlog

from odysseus.core.metrics import record_account_opened
from odysseus.domain.entities import Account
from odysseus.domain.exceptions import (
    AccountNotFoundException,
    ForbiddenException,
    InvalidInputException,
    UserNotFoundException,
)
from odysseus.domain.interfaces import AccountRepository, UserRepository
from odysseus.application.dto import AccountResponse, OpenAccountRequest

logger = structlog.get_logger(__name__)


class AccountService:
    """
    Application service for account use cases.

    Accounts are only ever opened here; their balance changes exclusively
    through TransactionService.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        user_repository: UserRepository,
    ):
        self._account_repo = account_repository
        self._user_repo = user_repository

    async def open_account(
        self,
        request: OpenAccountRequest,
        caller_id: UUID,
    ) -> AccountResponse:
        """
        Open an account for the caller.

        Args:
            request: Owner, kind and opening balance
            caller_id: Authenticated user making the request

        Raises:
            InvalidInputException: If the request validation fails
            ForbiddenException: If the caller opens an account for someone else
            UserNotFoundException: If the owner does not exist
        """
        errors = request.validate()
        if errors:
            raise InvalidInputException("; ".join(errors))

        if request.owner_id != caller_id:
            raise ForbiddenException()

        owner = await self._user_repo.get_by_id(request.owner_id)
        if owner is None:
            raise UserNotFoundException(str(request.owner_id))

        account = Account(
            owner_id=owner.id,
            kind=request.kind,
            balance_cents=request.opening_balance_cents,
            opening_balance_cents=request.opening_balance_cents,
        )
        await self._account_repo.create(account)

        logger.info(
            "account_opened",
            account_id=str(account.id),
            owner_id=str(owner.id),
            kind=account.kind.value,
            opening_balance_cents=account.opening_balance_cents,
        )
        record_account_opened(account.kind.value)

        return AccountResponse.from_entity(account)

    async def get_account(self, account_id: UUID, caller_id: UUID) -> AccountResponse:
        """
        Get an account owned by the caller.

        Raises:
            AccountNotFoundException: If the account does not exist
            ForbiddenException: If the caller does not own it
        """
        account = await self._account_repo.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundException(str(account_id))
        if not account.is_owned_by(caller_id):
            raise ForbiddenException()

        return AccountResponse.from_entity(account)

    async def list_accounts(self, user_id: UUID, caller_id: UUID) -> list[AccountResponse]:
        """
        List a user's accounts, newest first.

        Raises:
            ForbiddenException: If the caller lists someone else's accounts
        """
        if user_id != caller_id:
            raise ForbiddenException()

        accounts = await self._account_repo.get_by_owner(user_id)
        return [AccountResponse.from_entity(account) for account in accounts]
