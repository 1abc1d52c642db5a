from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.core.security import decode_token
from marketplace_api.db.models.users import User
from marketplace_api.db.session import get_async_session
from marketplace_api.repositories.users import UsersRepository
from marketplace_api.services.lockout import LoginAttemptTracker

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/authentication/login", auto_error=False)


# PUBLIC_INTERFACE
async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Resolve and return the current user from the Authorization bearer token.

    Raises:
        ApiError: 401 when the token is missing, invalid, expired, or names an unknown user.
    """
    if not token:
        raise ApiError(ErrorType.UNAUTHORIZED, "Not authenticated")
    try:
        payload = decode_token(token)
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise ApiError(ErrorType.UNAUTHORIZED, "Invalid token")

    user_id = payload.get("sub")
    if payload.get("type") != "access" or not user_id:
        raise ApiError(ErrorType.UNAUTHORIZED, "Invalid token")
    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise ApiError(ErrorType.UNAUTHORIZED, "Invalid token")

    user = await UsersRepository(session).get_user(user_uuid)
    if user is None:
        raise ApiError(ErrorType.UNAUTHORIZED, "User not found")
    return user


# PUBLIC_INTERFACE
def get_login_tracker(request: Request) -> LoginAttemptTracker:
    """Return the application's login lockout tracker."""
    return request.app.state.login_tracker
