from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select, update

from marketplace_api.db.models.users import User
from .base import BaseRepository


class UsersRepository(BaseRepository):
    """Repository for users."""

    model = User
    text_fields = frozenset({"name", "email"})

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return await self.scalar_one_or_none(stmt)

    async def create_user(self, *, name: str, email: str, hashed_password: str) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password)
        await self.add(user)
        await self.commit()
        return user

    async def update_user(self, user_id: UUID, *, name: str, email: str) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(name=name, email=email)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def change_password(self, user_id: UUID, hashed_password: str) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(hashed_password=hashed_password)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def delete_user(self, user_id: UUID) -> bool:
        result = await self.execute(delete(User).where(User.id == user_id))
        await self.commit()
        return result.rowcount > 0
