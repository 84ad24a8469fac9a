"""Data transfer objects for registration and authentication."""

import re
from dataclasses import dataclass
from typing import List

from odysseus.domain.entities.timestamps import isoformat_utc

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class RegisterRequest:
    """Input data for registering a user."""

    email: str
    name: str
    password: str

    def validate(self) -> List[str]:
        errors = []

        if not EMAIL_PATTERN.match(self.email or ""):
            errors.append("email: invalid email address")

        if len((self.name or "").strip()) < MIN_NAME_LENGTH:
            errors.append(f"name: must be at least {MIN_NAME_LENGTH} characters long")

        if len(self.password or "") < MIN_PASSWORD_LENGTH:
            errors.append(f"password: must be at least {MIN_PASSWORD_LENGTH} characters long")

        return errors


@dataclass(frozen=True)
class LoginRequest:
    """Input data for logging in."""

    email: str
    password: str

    def validate(self) -> List[str]:
        errors = []

        if not EMAIL_PATTERN.match(self.email or ""):
            errors.append("email: invalid email address")

        if len(self.password or "") < MIN_PASSWORD_LENGTH:
            errors.append(f"password: must be at least {MIN_PASSWORD_LENGTH} characters long")

        return errors


@dataclass(frozen=True)
class UserResponse:
    """Public view of a user."""

    id: str
    email: str
    name: str
    created_at: str

    @classmethod
    def from_entity(cls, user) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            created_at=isoformat_utc(user.created_at),
        )


@dataclass(frozen=True)
class AuthResponse:
    """Access/refresh token pair returned with the authenticated user."""

    access_token: str
    access_expires_in: int
    refresh_token: str
    refresh_expires_in: int
    user: UserResponse
