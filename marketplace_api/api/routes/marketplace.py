from __future__ import annotations

from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.deps import get_current_user
from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.db.session import get_async_session
from marketplace_api.schemas.common import IdResponse, Page
from marketplace_api.schemas.marketplace import (
    BuyRequest,
    ProductRead,
    ProductUpdate,
    ProductWrite,
    Receipt,
    RestockRequest,
    RestockResult,
)
from marketplace_api.services.marketplace import MarketService

# Only authenticated users may change the catalog.
router = APIRouter(
    prefix="/marketplace",
    tags=["Marketplace"],
    dependencies=[Depends(get_current_user)],
)

_FIELDS_HELP = "product_name|company_name|country|price|quantity"


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Union[Page[ProductRead], List[ProductRead]],
    summary="List products",
    description=(
        "List products. Search, sort and pagination are applied in that order. "
        "Pass both page_number and page_size to get a page envelope."
    ),
)
async def list_products(
    session: AsyncSession = Depends(get_async_session),
    page_number: Optional[int] = Query(None, ge=1, description="Page to return (1-based)"),
    page_size: Optional[int] = Query(None, ge=1, description="Records per page"),
    search: Optional[str] = Query(None, pattern=":", description=f"field:substring, fields {_FIELDS_HELP}"),
    sort: Optional[str] = Query(None, pattern=":", description=f"field:asc|desc, fields {_FIELDS_HELP}"),
):
    return await MarketService(session).list_products(
        page_number=page_number, page_size=page_size, search=search, sort=sort
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ProductRead,
    summary="Create product",
    description="Create a product. The price is stored with a '$' prefix.",
)
async def create_product(
    payload: ProductWrite,
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    return await MarketService(session).create_product(payload)


# PUBLIC_INTERFACE
@router.get(
    "/{product_id}",
    response_model=ProductRead,
    summary="Get product",
)
async def get_product(
    product_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    product = await MarketService(session).get_product(product_id)
    if product is None:
        raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "Unknown product")
    return product


# PUBLIC_INTERFACE
@router.put(
    "/{product_id}",
    response_model=IdResponse,
    summary="Update product",
    description="Replace a product's fields. Stock is kept when quantity is omitted.",
)
async def update_product(
    payload: ProductUpdate,
    product_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> IdResponse:
    await MarketService(session).update_product(product_id, payload)
    return IdResponse(id=product_id)


# PUBLIC_INTERFACE
@router.delete(
    "/{product_id}",
    response_model=IdResponse,
    summary="Delete product",
)
async def delete_product(
    product_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> IdResponse:
    await MarketService(session).delete_product(product_id)
    return IdResponse(id=product_id)


# PUBLIC_INTERFACE
@router.patch(
    "/buy/{product_id}",
    response_model=Receipt,
    summary="Buy product",
    description="Buy units of a product and receive a receipt with the change.",
)
async def buy_product(
    payload: BuyRequest,
    product_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> Receipt:
    return await MarketService(session).buy_product(product_id, payload.quantity, payload.payment)


# PUBLIC_INTERFACE
@router.patch(
    "/restock/{product_id}",
    response_model=RestockResult,
    summary="Restock product",
)
async def restock_product(
    payload: RestockRequest,
    product_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> RestockResult:
    return await MarketService(session).restock_product(product_id, payload.stock)
