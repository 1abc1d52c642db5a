from __future__ import annotations

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.core.security import get_password_hash, verify_password
from marketplace_api.repositories.users import UsersRepository
from marketplace_api.schemas.common import Page
from marketplace_api.schemas.users import UserRead
from marketplace_api.services.base import BaseService

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email is already registered"
USER_LIST_FIELDS = frozenset({"name", "email"})


class UsersService(BaseService):
    """User administration rules: unique emails, password confirmation, password changes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UsersRepository(session)

    # PUBLIC_INTERFACE
    async def list_users(
        self,
        *,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Union[Page[UserRead], List[UserRead]]:
        return await self._listing(
            self.repo,
            UserRead.model_validate,
            fields=USER_LIST_FIELDS,
            page_number=page_number,
            page_size=page_size,
            search=search,
            sort=sort,
        )

    # PUBLIC_INTERFACE
    async def get_user(self, user_id: UUID) -> Optional[UserRead]:
        user = await self.repo.get_user(user_id)
        if user is None:
            return None
        return UserRead.model_validate(user)

    # PUBLIC_INTERFACE
    async def email_is_registered(self, email: str, *, exclude_id: Optional[UUID] = None) -> bool:
        """True when another user (other than `exclude_id`) already has this email."""
        user = await self.repo.get_user_by_email(email)
        return user is not None and user.id != exclude_id

    # PUBLIC_INTERFACE
    async def create_user(self, name: str, email: str, password: str, password_confirm: str) -> UserRead:
        if await self.email_is_registered(email):
            raise ApiError(ErrorType.EMAIL_ALREADY_TAKEN, EMAIL_TAKEN_MESSAGE)
        if password != password_confirm:
            raise ApiError(ErrorType.INVALID_PASSWORD, "Password confirmation mismatched")

        try:
            user = await self.repo.create_user(
                name=name, email=email, hashed_password=get_password_hash(password)
            )
        except IntegrityError:
            # Another request registered the email after the check above.
            await self.session.rollback()
            raise ApiError(ErrorType.EMAIL_ALREADY_TAKEN, EMAIL_TAKEN_MESSAGE)
        logger.info("Created user %s", user.id)
        return UserRead.model_validate(user)

    # PUBLIC_INTERFACE
    async def update_user(self, user_id: UUID, name: str, email: str) -> None:
        if await self.email_is_registered(email, exclude_id=user_id):
            raise ApiError(ErrorType.EMAIL_ALREADY_TAKEN, EMAIL_TAKEN_MESSAGE)
        try:
            updated = await self.repo.update_user(user_id, name=name, email=email)
        except IntegrityError:
            await self.session.rollback()
            raise ApiError(ErrorType.EMAIL_ALREADY_TAKEN, EMAIL_TAKEN_MESSAGE)
        if not updated:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Failed to update user")

    # PUBLIC_INTERFACE
    async def delete_user(self, user_id: UUID) -> None:
        if not await self.repo.delete_user(user_id):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Failed to delete user")
        logger.info("Deleted user %s", user_id)

    # PUBLIC_INTERFACE
    async def change_password(
        self, user_id: UUID, password_old: str, password_new: str, password_confirm: str
    ) -> None:
        if password_new != password_confirm:
            raise ApiError(ErrorType.INVALID_PASSWORD, "Password confirmation mismatched")

        user = await self.repo.get_user(user_id)
        if user is None:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Unknown user")
        if not verify_password(password_old, user.hashed_password):
            raise ApiError(ErrorType.INVALID_PASSWORD, "Wrong password")

        if not await self.repo.change_password(user_id, get_password_hash(password_new)):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Failed to change password")
