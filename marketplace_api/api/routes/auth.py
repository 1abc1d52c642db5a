from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.deps import get_current_user, get_login_tracker
from marketplace_api.db.session import get_async_session
from marketplace_api.schemas.auth import LoginRequest, LoginResult
from marketplace_api.schemas.common import ErrorResponse
from marketplace_api.schemas.users import UserRead
from marketplace_api.services.auth import AuthService
from marketplace_api.services.lockout import LoginAttemptTracker

router = APIRouter(prefix="/authentication", tags=["Authentication"])


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=LoginResult,
    summary="Login",
    description=(
        "Authenticate with email and password and receive a bearer token. "
        "After repeated failures the email is locked out for a fixed period and "
        "every attempt is rejected with 403 'Too many failed login attempts'."
    ),
    responses={403: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_async_session),
    tracker: LoginAttemptTracker = Depends(get_login_tracker),
) -> LoginResult:
    """Check credentials through the lockout tracker and issue a token."""
    service = AuthService(session)
    return await tracker.attempt(
        payload.email,
        lambda: service.check_login_credentials(payload.email, payload.password),
    )


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the user the bearer token belongs to.",
)
async def read_current_user(user=Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)
