from __future__ import annotations

from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.deps import get_current_user
from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.db.session import get_async_session
from marketplace_api.schemas.common import IdResponse, Page
from marketplace_api.schemas.users import (
    ChangePasswordRequest,
    UserCreate,
    UserCreated,
    UserRead,
    UserUpdate,
)
from marketplace_api.services.users import UsersService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Union[Page[UserRead], List[UserRead]],
    summary="List users",
    description=(
        "List users. Pass both page_number and page_size to get a page envelope; "
        "otherwise a plain list is returned."
    ),
)
async def list_users(
    session: AsyncSession = Depends(get_async_session),
    page_number: Optional[int] = Query(None, ge=1, description="Page to return (1-based)"),
    page_size: Optional[int] = Query(None, ge=1, description="Records per page"),
    search: Optional[str] = Query(None, pattern=":", description="field:substring, fields name|email"),
    sort: Optional[str] = Query(None, pattern=":", description="field:asc|desc, fields name|email"),
):
    service = UsersService(session)
    return await service.list_users(
        page_number=page_number, page_size=page_size, search=search, sort=sort
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserCreated,
    summary="Create user",
)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_async_session),
) -> UserCreated:
    service = UsersService(session)
    user = await service.create_user(
        payload.name, payload.email, payload.password, payload.password_confirm
    )
    return UserCreated(name=user.name, email=user.email)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get user",
)
async def get_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    user = await UsersService(session).get_user(user_id)
    if user is None:
        raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Unknown user")
    return user


# PUBLIC_INTERFACE
@router.put(
    "/{user_id}",
    response_model=IdResponse,
    summary="Update user",
    description="Change a user's name and email. The email must not belong to another user.",
)
async def update_user(
    payload: UserUpdate,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> IdResponse:
    await UsersService(session).update_user(user_id, payload.name, payload.email)
    return IdResponse(id=user_id)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    response_model=IdResponse,
    summary="Delete user",
)
async def delete_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> IdResponse:
    await UsersService(session).delete_user(user_id)
    return IdResponse(id=user_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}/change-password",
    response_model=IdResponse,
    summary="Change password",
    description="Replace a user's password after verifying the old one.",
)
async def change_password(
    payload: ChangePasswordRequest,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> IdResponse:
    await UsersService(session).change_password(
        user_id, payload.password_old, payload.password_new, payload.password_confirm
    )
    return IdResponse(id=user_id)
