from __future__ import annotations

import json
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from marketplace_api.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Marketplace API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a marketplace product catalog and its users. "
            "Provides CRUD, search, sorting, pagination, purchases and restocking."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, create the default user and product after migrations.",
    )

    # Tokens
    JWT_SECRET_KEY: str = Field(default="change-me", description="HMAC secret for access tokens")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, ge=1)

    # Login lockout
    LOGIN_MAX_FAILED_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="Consecutive failed logins after which an email is locked out.",
    )
    LOGIN_LOCKOUT_MINUTES: float = Field(
        default=30,
        gt=0,
        description="How long a locked out email stays locked.",
    )

    # Seed data
    DEFAULT_USER_NAME: str = Field(default="Administrator")
    DEFAULT_USER_EMAIL: str = Field(default="admin@example.com")
    DEFAULT_USER_PASSWORD: str = Field(default="123456")
    DEFAULT_PRODUCT_NAME: str = Field(default="car")
    DEFAULT_PRODUCT_COMPANY: str = Field(default="carmaker")
    DEFAULT_PRODUCT_COUNTRY: str = Field(default="countrycar")
    DEFAULT_PRODUCT_PRICE: str = Field(default="$1000")
    DEFAULT_PRODUCT_QUANTITY: int = Field(default=20, ge=0)

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str) and v.strip().startswith("["):
            v = json.loads(v)
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]

    @property
    def login_lockout_seconds(self) -> float:
        return self.LOGIN_LOCKOUT_MINUTES * 60


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      A new instance is built on every call so tests can change the environment
      between cases without a cache to clear.
    """
    return AppSettings()
