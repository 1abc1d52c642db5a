from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select, update

from marketplace_api.db.models.marketplace import Product
from .base import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for marketplace products."""

    model = Product
    # price is stored as text ("$1000") so it searches and sorts as text
    text_fields = frozenset({"product_name", "company_name", "country", "price"})

    async def get_product(self, product_id: UUID) -> Optional[Product]:
        return await self.get(product_id)

    async def get_product_by_name(self, product_name: str) -> Optional[Product]:
        stmt = select(Product).where(Product.product_name == product_name)
        return await self.scalar_one_or_none(stmt)

    async def create_product(
        self,
        *,
        product_name: str,
        company_name: str,
        country: str,
        price: str,
        quantity: int,
    ) -> Product:
        row = Product(
            product_name=product_name,
            company_name=company_name,
            country=country,
            price=price,
            quantity=quantity,
        )
        await self.add(row)
        await self.commit()
        return row

    async def update_product(
        self,
        product_id: UUID,
        *,
        product_name: str,
        company_name: str,
        country: str,
        price: str,
        quantity: Optional[int] = None,
    ) -> bool:
        values = dict(
            product_name=product_name,
            company_name=company_name,
            country=country,
            price=price,
        )
        if quantity is not None:
            values["quantity"] = quantity
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def delete_product(self, product_id: UUID) -> bool:
        result = await self.execute(delete(Product).where(Product.id == product_id))
        await self.commit()
        return result.rowcount > 0

    async def take_stock(self, product_id: UUID, quantity: int) -> bool:
        """Decrement stock by `quantity` only if at least that much is left."""
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def add_stock(self, product_id: UUID, stock: int) -> bool:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + stock)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0
