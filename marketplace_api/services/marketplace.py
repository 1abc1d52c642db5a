from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.repositories.marketplace import ProductRepository
from marketplace_api.schemas.common import Page
from marketplace_api.schemas.marketplace import (
    ProductRead,
    ProductUpdate,
    ProductWrite,
    Receipt,
    RestockResult,
)
from marketplace_api.services.base import BaseService

logger = logging.getLogger(__name__)

NAME_TAKEN_MESSAGE = "product name is already registered"
PRODUCT_LIST_FIELDS = frozenset({"product_name", "company_name", "country", "price", "quantity"})
CURRENCY_SIGN = "$"


# PUBLIC_INTERFACE
def format_money(amount: Decimal) -> str:
    """Render an amount as a '$' string without trailing zeros: 1000 -> '$1000', 12.50 -> '$12.5'."""
    return f"{CURRENCY_SIGN}{amount.normalize():f}"


# PUBLIC_INTERFACE
def parse_price(price: str) -> Decimal:
    """Inverse of format_money for stored prices."""
    try:
        return Decimal(price.replace(CURRENCY_SIGN, "", 1).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Stored price is not a number: {price!r}") from exc


class MarketService(BaseService):
    """Product catalog rules: unique names, stock checks, purchases and restocking."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ProductRepository(session)

    # PUBLIC_INTERFACE
    async def list_products(
        self,
        *,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Union[Page[ProductRead], List[ProductRead]]:
        return await self._listing(
            self.repo,
            ProductRead.model_validate,
            fields=PRODUCT_LIST_FIELDS,
            page_number=page_number,
            page_size=page_size,
            search=search,
            sort=sort,
        )

    # PUBLIC_INTERFACE
    async def get_product(self, product_id: UUID) -> Optional[ProductRead]:
        row = await self.repo.get_product(product_id)
        if row is None:
            return None
        return ProductRead.model_validate(row)

    # PUBLIC_INTERFACE
    async def is_name_taken(self, product_name: str, *, exclude_id: Optional[UUID] = None) -> bool:
        row = await self.repo.get_product_by_name(product_name)
        return row is not None and row.id != exclude_id

    # PUBLIC_INTERFACE
    async def create_product(self, payload: ProductWrite) -> ProductRead:
        if await self.is_name_taken(payload.product_name):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, NAME_TAKEN_MESSAGE)

        try:
            row = await self.repo.create_product(
                product_name=payload.product_name,
                company_name=payload.company_name,
                country=payload.country,
                price=format_money(payload.price),
                quantity=payload.quantity,
            )
        except IntegrityError:
            # Another request took the name after the check above.
            await self.session.rollback()
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, NAME_TAKEN_MESSAGE)
        logger.info("Created product %s (%s)", row.id, row.product_name)
        return ProductRead.model_validate(row)

    # PUBLIC_INTERFACE
    async def update_product(self, product_id: UUID, payload: ProductUpdate) -> None:
        if await self.is_name_taken(payload.product_name, exclude_id=product_id):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "product name is taken")

        try:
            updated = await self.repo.update_product(
                product_id,
                product_name=payload.product_name,
                company_name=payload.company_name,
                country=payload.country,
                price=format_money(payload.price),
                quantity=payload.quantity,
            )
        except IntegrityError:
            await self.session.rollback()
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "product name is taken")
        if not updated:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Failed to update product")

    # PUBLIC_INTERFACE
    async def delete_product(self, product_id: UUID) -> None:
        if not await self.repo.delete_product(product_id):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Failed to delete product")
        logger.info("Deleted product %s", product_id)

    # PUBLIC_INTERFACE
    async def buy_product(self, product_id: UUID, quantity: int, payment: Decimal) -> Receipt:
        """
        Sell `quantity` units for `payment` and return the receipt.

        Checks run in order: product exists, stock is not empty, stock covers
        the quantity, payment covers price * quantity.
        """
        product = await self.get_product(product_id)
        if product is None:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "unknown product")

        total_price = parse_price(product.price) * quantity
        if product.quantity == 0:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "out of stock")
        if product.quantity < quantity:
            raise ApiError(
                ErrorType.UNPROCESSABLE_ENTITY,
                f"not enough stock available try buying less current stock is {product.quantity}",
            )
        if payment < total_price:
            raise ApiError(
                ErrorType.UNPROCESSABLE_ENTITY,
                f"insufficient payment at least {total_price.normalize():f} is required",
            )

        # Conditional decrement; fails if stock was taken since the read above.
        if not await self.repo.take_stock(product_id, quantity):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "failed to buy product")

        logger.info("Sold %d x %s", quantity, product.product_name)
        return Receipt(
            product_name=product.product_name,
            company_name=product.company_name,
            price=product.price,
            quantity_bought=quantity,
            total_price=format_money(total_price),
            payment=format_money(payment),
            change=format_money(payment - total_price),
        )

    # PUBLIC_INTERFACE
    async def restock_product(self, product_id: UUID, stock: int) -> RestockResult:
        product = await self.get_product(product_id)
        if product is None:
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "unknown product")

        if not await self.repo.add_stock(product_id, stock):
            raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "failed restocking")

        return RestockResult(
            product_name=product.product_name,
            quantity_before=product.quantity,
            quantity_after=product.quantity + stock,
        )
