"""Migrations, seeding and OpenAPI export."""

from __future__ import annotations

import json

import pytest
from sqlalchemy import create_engine, inspect

from marketplace_api.api import generate_openapi
from marketplace_api.core.security import verify_password
from marketplace_api.db.config import get_settings
from marketplace_api.db.run_migrations import main as run_alembic
from marketplace_api.db.seed import seed_all
from marketplace_api.db.session import get_sessionmaker
from marketplace_api.repositories.marketplace import ProductRepository
from marketplace_api.repositories.users import UsersRepository


def test_migrations_upgrade_and_downgrade() -> None:
    run_alembic(["upgrade", "head"])

    engine = create_engine(get_settings().sync_database_url)
    try:
        inspector = inspect(engine)
        assert {"users", "products"} <= set(inspector.get_table_names())
        assert {c["name"] for c in inspector.get_columns("products")} >= {
            "id",
            "product_name",
            "company_name",
            "country",
            "price",
            "quantity",
        }

        run_alembic(["downgrade", "base"])
        inspector = inspect(engine)
        assert "products" not in inspector.get_table_names()
    finally:
        engine.dispose()


def test_migrations_reject_unknown_command() -> None:
    with pytest.raises(SystemExit):
        run_alembic(["explode"])


@pytest.mark.asyncio
async def test_seed_is_idempotent(database) -> None:
    await seed_all()
    await seed_all()

    async with get_sessionmaker()() as session:
        users = await UsersRepository(session).list_rows()
        products = await ProductRepository(session).list_rows()

    assert [u.email for u in users] == ["admin@example.com"]
    assert verify_password("123456", users[0].hashed_password)
    assert [(p.product_name, p.company_name, p.country, p.price, p.quantity) for p in products] == [
        ("car", "carmaker", "countrycar", "$1000", 20)
    ]


def test_generate_openapi(tmp_path) -> None:
    path = generate_openapi.main(str(tmp_path / "interfaces"))

    with open(path) as f:
        schema = json.load(f)
    assert "/api/v1/authentication/login" in schema["paths"]
    assert "/api/v1/marketplace/buy/{product_id}" in schema["paths"]
    assert "/api/v1/users/{user_id}/change-password" in schema["paths"]
