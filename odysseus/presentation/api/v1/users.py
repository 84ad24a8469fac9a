"""User lookup endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from odysseus.application.services import AuthService
from odysseus.core.dependencies import get_auth_service, get_current_user_id
from odysseus.presentation.schemas import ErrorResponseSchema, UserSchema

users_router = APIRouter(
    prefix="/users",
    responses={401: {"model": ErrorResponseSchema, "description": "Unauthenticated"}},
)


@users_router.get(
    "/me",
    response_model=UserSchema,
    summary="Current User",
)
async def get_me(
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserSchema:
    user = await auth_service.get_user(caller_id)
    return UserSchema(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
    )


@users_router.get(
    "",
    response_model=list[UserSchema],
    summary="List Users",
    description="List all users, newest first.",
)
async def list_users(
    caller_id: Annotated[UUID, Depends(get_current_user_id)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> list[UserSchema]:
    users = await auth_service.list_users()
    return [
        UserSchema(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
        )
        for user in users
    ]
