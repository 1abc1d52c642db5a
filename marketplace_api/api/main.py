from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace_api.core.errors import ApiError
from marketplace_api.core.logging import configure_logging, correlation_id_var
from marketplace_api.core.settings import AppSettings, get_app_settings
from marketplace_api.db.run_migrations import main as run_alembic
from marketplace_api.db.seed import seed_all
from marketplace_api.db.session import reset_engine
from marketplace_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse
from marketplace_api.services.lockout import LoginAttemptTracker

# Routers
from marketplace_api.api.routes.auth import router as auth_router
from marketplace_api.api.routes.marketplace import router as marketplace_router
from marketplace_api.api.routes.users import router as users_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Authentication", "description": "Login with per-email lockout and current user."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Marketplace", "description": "Products, purchases and restocking."},
]


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


async def api_error_handler(request: Request, exc: ApiError):
    """Render an ApiError with its own error code."""
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.error_type.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


async def request_context_middleware(request: Request, call_next):
    """
    Set the correlation id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)

    response.headers["X-Correlation-ID"] = corr
    return response


# PUBLIC_INTERFACE
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


def _build_api_router() -> APIRouter:
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.add_api_route(
        "/health",
        health_check,
        methods=["GET"],
        response_model=MessageResponse,
        summary="Health Check",
        tags=["Health"],
    )
    api_v1.include_router(auth_router)
    api_v1.include_router(users_router)
    api_v1.include_router(marketplace_router)
    return api_v1


# PUBLIC_INTERFACE
def create_app(settings: AppSettings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    The login lockout tracker is created here and kept on app.state so each
    application instance has its own lockout state.
    """
    settings = settings or get_app_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.login_tracker = LoginAttemptTracker(
        max_failed_attempts=settings.LOGIN_MAX_FAILED_ATTEMPTS,
        lockout_seconds=settings.login_lockout_seconds,
    )

    # CORS - avoid wildcard with credentials
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
        logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def on_startup() -> None:
        """
        Run migrations and optional seeding on service startup.

        Seeding is opt-in via settings.
        """
        if settings.RUN_MIGRATIONS_ON_STARTUP:
            try:
                logger.info("Running Alembic migrations: upgrade head")
                # env.py drives its own event loop, so it runs off this one.
                await asyncio.to_thread(run_alembic, ["upgrade", "head"])
                logger.info("Migrations completed.")
            except Exception as exc:
                logger.exception("Migration step failed: %s", exc)

        if settings.AUTO_SEED:
            try:
                logger.info("Running database seeding...")
                await seed_all(settings)
                logger.info("Seeding completed.")
            except Exception as exc:
                logger.exception("Seeding step failed: %s", exc)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        app.state.login_tracker.close()
        await reset_engine()

    app.include_router(_build_api_router())
    return app


# Configure structured logging once at import
configure_logging()

app = create_app()
