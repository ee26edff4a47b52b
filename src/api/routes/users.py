"""
User endpoints
==============

GET    /api/v1/users        -- list / search users
GET    /api/v1/users/{id}   -- fetch one user
POST   /api/v1/users        -- register a user
PATCH  /api/v1/users/{id}   -- partial update
DELETE /api/v1/users/{id}   -- delete, returns the removed record
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import Page, get_db
from src.api.errors import conflict, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from src.domain.enums import UserRole
from src.infrastructure.models import UserModel
from src.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse], summary="List users")
@limiter.limit(RATE_LIMIT)
async def list_users(
    request: Request,
    search: Optional[str] = Query(
        None, max_length=100, description="Matches name, email or phone."
    ),
    role: Optional[UserRole] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await UserRepository(db).find(
        search=search, role=role, limit=page.limit, offset=page.offset
    )


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
@limiter.limit(RATE_LIMIT)
async def get_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(UserRepository(db), user_id, "User")


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    summary="Create a user",
    responses={409: {"description": "Email already registered."}},
)
@limiter.limit(RATE_LIMIT)
async def create_user(
    request: Request,
    body: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    if await repo.get_by_email(body.email):
        raise conflict("A user with this email already exists")

    user = await repo.create(UserModel(**body.model_dump()))
    logger.info("Created user %s with role %s", user.id, user.role.value)
    return user


@router.patch("/{user_id}", response_model=UserResponse, summary="Update a user")
@limiter.limit(RATE_LIMIT)
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    user = await get_or_404(repo, user_id, "User")
    changes = body.changes()

    if "email" in changes:
        existing = await repo.get_by_email(changes["email"])
        if existing and existing.id != user.id:
            raise conflict("A user with this email already exists")

    return await repo.update(user, changes)


@router.delete(
    "/{user_id}",
    response_model=DeleteResponse[UserResponse],
    summary="Delete a user",
)
@limiter.limit(RATE_LIMIT)
async def delete_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    user = await get_or_404(repo, user_id, "User")
    deleted = UserResponse.model_validate(user)
    await repo.delete(user)
    logger.info("Deleted user %s", user_id)
    return DeleteResponse[UserResponse](
        message="User deleted successfully", deleted=deleted
    )
