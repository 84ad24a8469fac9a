"""Registration, login and token refresh endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from odysseus.application.dto import AuthResponse, LoginRequest, RegisterRequest
from odysseus.application.services import AuthService
from odysseus.core.dependencies import get_auth_service
from odysseus.presentation.schemas import (
    AuthResponseSchema,
    ErrorResponseSchema,
    LoginRequestSchema,
    RefreshRequestSchema,
    RegisterRequestSchema,
    UserSchema,
)

auth_router = APIRouter(
    prefix="/auth",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        401: {"model": ErrorResponseSchema, "description": "Invalid credentials"},
    },
)


def _to_schema(response: AuthResponse) -> AuthResponseSchema:
    return AuthResponseSchema(
        access_token=response.access_token,
        access_expires_in=response.access_expires_in,
        refresh_token=response.refresh_token,
        refresh_expires_in=response.refresh_expires_in,
        user=UserSchema(
            id=response.user.id,
            email=response.user.email,
            name=response.user.name,
            created_at=response.user.created_at,
        ),
    )


@auth_router.post(
    "/register",
    response_model=AuthResponseSchema,
    status_code=201,
    summary="Register User",
    responses={409: {"model": ErrorResponseSchema, "description": "Email already in use"}},
)
async def register(
    request: RegisterRequestSchema,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponseSchema:
    """Create a user and return an access/refresh token pair."""
    response = await auth_service.register(
        RegisterRequest(
            email=request.email,
            name=request.name,
            password=request.password,
        )
    )
    return _to_schema(response)


@auth_router.post(
    "/login",
    response_model=AuthResponseSchema,
    summary="Log In",
)
async def login(
    request: LoginRequestSchema,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponseSchema:
    response = await auth_service.login(
        LoginRequest(email=request.email, password=request.password)
    )
    return _to_schema(response)


@auth_router.post(
    "/refresh",
    response_model=AuthResponseSchema,
    summary="Refresh Tokens",
)
async def refresh(
    request: RefreshRequestSchema,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponseSchema:
    response = await auth_service.refresh(request.refresh_token)
    return _to_schema(response)
