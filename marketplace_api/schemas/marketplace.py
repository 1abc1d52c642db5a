from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProductRead(BaseModel):
    """Product read model."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name")
    company_name: str = Field(..., description="Company that owns the product")
    country: str = Field(..., description="Country of origin")
    price: str = Field(..., description="USD price, e.g. '$1000'")
    quantity: int = Field(..., description="Units in stock")


class ProductWrite(BaseModel):
    """Create product payload. Price is a plain USD amount."""
    product_name: str = Field(..., min_length=1, max_length=100)
    company_name: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=1, description="USD amount without currency sign")
    quantity: int = Field(0, ge=0, description="Units in stock")


class ProductUpdate(BaseModel):
    """Update product payload. Stock is left unchanged when quantity is omitted."""
    product_name: str = Field(..., min_length=1, max_length=100)
    company_name: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=1, description="USD amount without currency sign")
    quantity: Optional[int] = Field(None, ge=0, description="Units in stock")


class BuyRequest(BaseModel):
    quantity: int = Field(..., ge=1, description="Units to buy")
    payment: Decimal = Field(..., ge=0, description="USD amount paid")


class Receipt(BaseModel):
    """Purchase receipt; money fields are '$' strings."""
    product_name: str
    company_name: str
    price: str
    quantity_bought: int
    total_price: str
    payment: str
    change: str


class RestockRequest(BaseModel):
    stock: int = Field(..., ge=1, description="Units to add")


class RestockResult(BaseModel):
    product_name: str
    quantity_before: int
    quantity_after: int
