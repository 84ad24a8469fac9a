"""Password hashing and JWT helpers."""

import time
from typing import Any
from uuid import UUID

import bcrypt
import jwt

from odysseus.core.config import settings
from odysseus.domain.exceptions import AuthenticationException

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """Hash plain text password using bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _secret_for(token_type: str) -> str:
    if token_type == REFRESH_TOKEN_TYPE:
        return settings.jwt_refresh_secret
    return settings.jwt_secret


def _ttl_for(token_type: str) -> int:
    if token_type == REFRESH_TOKEN_TYPE:
        return settings.jwt_refresh_ttl_seconds
    return settings.jwt_access_ttl_seconds


def issue_token(user_id: UUID, token_type: str = ACCESS_TOKEN_TYPE) -> tuple[str, int]:
    """
    Create a signed JWT for a user.

    Returns:
        The encoded token and its TTL in seconds
    """
    now = int(time.time())
    expires_in = _ttl_for(token_type)
    payload: dict[str, Any] = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "typ": token_type,
        "iat": now,
        "exp": now + expires_in,
    }

    token = jwt.encode(payload, _secret_for(token_type), algorithm=_ALGORITHM)
    return token, expires_in


def decode_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> UUID:
    """
    Verify a JWT of the expected type and return the user id it carries.

    Raises:
        AuthenticationException: If the token is invalid, expired, of the
            wrong type or carries a malformed subject
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[_ALGORITHM],
            issuer=settings.jwt_issuer,
        )
    except jwt.PyJWTError as exc:
        raise AuthenticationException("Invalid or expired token") from exc

    if payload.get("typ") != token_type:
        raise AuthenticationException("Invalid token type")

    try:
        return UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise AuthenticationException("Invalid token subject") from exc
