"""Auth service - registration, login and token refresh."""

import asyncio
from uuid import UUID

import structlog

from odysseus.core.security import (
    REFRESH_TOKEN_TYPE,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from odysseus.domain.entities import User
from odysseus.domain.exceptions import (
    InvalidCredentialsException,
    InvalidInputException,
    UserNotFoundException,
)
from odysseus.domain.interfaces import UserRepository
from odysseus.application.dto import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)

logger = structlog.get_logger(__name__)


class AuthService:
    """
    Application service for user identity use cases.

    Issues access/refresh token pairs; the rest of the service only sees
    the verified user id carried by the access token.
    """

    def __init__(self, user_repository: UserRepository):
        self._user_repo = user_repository

    async def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Register a new user and sign them in.

        Raises:
            InvalidInputException: If the request validation fails
            EmailAlreadyInUseException: If the email is already registered
        """
        errors = request.validate()
        if errors:
            raise InvalidInputException("; ".join(errors))

        user = User(
            email=request.email.strip().lower(),
            name=request.name.strip(),
            password_hash=await asyncio.to_thread(hash_password, request.password),
        )
        await self._user_repo.save(user)

        logger.info("user_registered", user_id=str(user.id))
        return self._issue_tokens(user)

    async def login(self, request: LoginRequest) -> AuthResponse:
        """
        Authenticate with email and password.

        Raises:
            InvalidCredentialsException: If the email is unknown or the
                password does not match
        """
        errors = request.validate()
        if errors:
            raise InvalidInputException("; ".join(errors))

        user = await self._user_repo.get_by_email(request.email.strip().lower())
        if user is None or not user.password_hash:
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentialsException()

        if not await asyncio.to_thread(verify_password, request.password, user.password_hash):
            logger.info("login_failed", reason="bad_password", user_id=str(user.id))
            raise InvalidCredentialsException()

        logger.info("user_logged_in", user_id=str(user.id))
        return self._issue_tokens(user)

    async def refresh(self, refresh_token: str) -> AuthResponse:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationException: If the token is invalid or not a refresh token
            UserNotFoundException: If the user no longer exists
        """
        user_id = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(str(user_id))

        return self._issue_tokens(user)

    async def get_user(self, user_id: UUID) -> UserResponse:
        """
        Get a user by ID.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(str(user_id))
        return UserResponse.from_entity(user)

    async def list_users(self) -> list[UserResponse]:
        """List all users, newest first."""
        users = await self._user_repo.list_all()
        return [UserResponse.from_entity(user) for user in users]

    def _issue_tokens(self, user: User) -> AuthResponse:
        access_token, access_ttl = issue_token(user.id)
        refresh_token, refresh_ttl = issue_token(user.id, REFRESH_TOKEN_TYPE)
        return AuthResponse(
            access_token=access_token,
            access_expires_in=access_ttl,
            refresh_token=refresh_token,
            refresh_expires_in=refresh_ttl,
            user=UserResponse.from_entity(user),
        )
