"""Helpers shared by the API tests for creating rows directly through the repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from marketplace_api.core.security import get_password_hash
from marketplace_api.db.session import get_sessionmaker
from marketplace_api.repositories.marketplace import ProductRepository
from marketplace_api.repositories.users import UsersRepository


@dataclass(frozen=True)
class SeededUser:
    id: UUID
    name: str
    email: str
    password: str


async def create_user(name: str, email: str, password: str) -> SeededUser:
    async with get_sessionmaker()() as session:
        user = await UsersRepository(session).create_user(
            name=name, email=email, hashed_password=get_password_hash(password)
        )
        return SeededUser(id=user.id, name=name, email=email, password=password)


async def create_product(**overrides: Any) -> UUID:
    values = {
        "product_name": "car",
        "company_name": "carmaker",
        "country": "countrycar",
        "price": "$1000",
        "quantity": 20,
    }
    values.update(overrides)
    async with get_sessionmaker()() as session:
        row = await ProductRepository(session).create_product(**values)
        return row.id
