"""
Database seeding for a fresh deployment.

Seeds:
- A default user (DEFAULT_USER_* settings) so the API can be logged into
- A default product (DEFAULT_PRODUCT_* settings)

Existing rows with the same email or product name are left untouched.

Usage:
  python -m marketplace_api.db.run_migrations upgrade head
  python -m marketplace_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.security import get_password_hash
from marketplace_api.core.settings import AppSettings, get_app_settings
from marketplace_api.repositories.marketplace import ProductRepository
from marketplace_api.repositories.users import UsersRepository
from marketplace_api.db.session import get_sessionmaker

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
async def seed_all(settings: AppSettings | None = None) -> None:
    """Create the default user and product when they are missing."""
    settings = settings or get_app_settings()
    async with get_sessionmaker()() as session:
        await _seed_default_user(session, settings)
        await _seed_default_product(session, settings)


async def _seed_default_user(session: AsyncSession, settings: AppSettings) -> None:
    repo = UsersRepository(session)
    if await repo.get_user_by_email(settings.DEFAULT_USER_EMAIL) is not None:
        return
    await repo.create_user(
        name=settings.DEFAULT_USER_NAME,
        email=settings.DEFAULT_USER_EMAIL,
        hashed_password=get_password_hash(settings.DEFAULT_USER_PASSWORD),
    )
    logger.info("Seeded default user %s", settings.DEFAULT_USER_EMAIL)


async def _seed_default_product(session: AsyncSession, settings: AppSettings) -> None:
    repo = ProductRepository(session)
    if await repo.get_product_by_name(settings.DEFAULT_PRODUCT_NAME) is not None:
        return
    await repo.create_product(
        product_name=settings.DEFAULT_PRODUCT_NAME,
        company_name=settings.DEFAULT_PRODUCT_COMPANY,
        country=settings.DEFAULT_PRODUCT_COUNTRY,
        price=settings.DEFAULT_PRODUCT_PRICE,
        quantity=settings.DEFAULT_PRODUCT_QUANTITY,
    )
    logger.info("Seeded default product %s", settings.DEFAULT_PRODUCT_NAME)


if __name__ == "__main__":
    asyncio.run(seed_all())
