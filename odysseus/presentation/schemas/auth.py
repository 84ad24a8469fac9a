"""Registration and authentication Pydantic schemas."""

from pydantic import BaseModel, Field, field_validator


class RegisterRequestSchema(BaseModel):
    """Schema for POST /v1/auth/register request body."""

    email: str = Field(
        ...,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Email address, stored lower-cased",
        examples=["ada@example.com"],
    )
    name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Display name",
        examples=["Ada Lovelace"],
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Plain text password, hashed before storage",
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequestSchema(BaseModel):
    """Schema for POST /v1/auth/login request body."""

    email: str = Field(
        ...,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        examples=["ada@example.com"],
    )
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequestSchema(BaseModel):
    """Schema for POST /v1/auth/refresh request body."""

    refresh_token: str = Field(..., min_length=1)


class UserSchema(BaseModel):
    """Public representation of a user."""

    id: str = Field(..., description="UUID of the user")
    email: str
    name: str
    created_at: str = Field(..., description="ISO 8601 timestamp")


class AuthResponseSchema(BaseModel):
    """Token pair returned by register, login and refresh."""

    access_token: str
    access_expires_in: int = Field(..., description="Access token TTL in seconds")
    refresh_token: str
    refresh_expires_in: int = Field(..., description="Refresh token TTL in seconds")
    token_type: str = "bearer"
    user: UserSchema
