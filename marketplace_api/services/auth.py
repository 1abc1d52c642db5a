from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.security import create_access_token, get_password_hash, verify_password
from marketplace_api.repositories.users import UsersRepository
from marketplace_api.schemas.auth import LoginResult
from marketplace_api.services.base import BaseService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _placeholder_hash() -> str:
    # Verified against for unknown emails so both paths pay the bcrypt cost.
    return get_password_hash("placeholder-password-for-unknown-users")


class AuthService(BaseService):
    """Credential checks for the login endpoint."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UsersRepository(session)

    # PUBLIC_INTERFACE
    async def check_login_credentials(self, email: str, password: str) -> Optional[LoginResult]:
        """
        Return the login result with a fresh access token, or None when the
        email is unknown or the password does not match.
        """
        user = await self.users.get_user_by_email(email)
        hashed = user.hashed_password if user else _placeholder_hash()
        matched = verify_password(password, hashed)
        if user is None or not matched:
            logger.info("Failed login for %s", email)
            return None

        return LoginResult(
            email=user.email,
            name=user.name,
            user_id=user.id,
            token=create_access_token(subject=str(user.id), email=user.email),
        )
