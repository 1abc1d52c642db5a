from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

T = TypeVar("T")


class IdResponse(BaseModel):
    """Identifier of the record a write operation touched."""
    id: UUID = Field(..., description="Unique identifier")


class Page(BaseModel, Generic[T]):
    """One page of a listing plus navigation metadata."""
    page_number: int = Field(..., description="Requested page (1-based)")
    page_size: int = Field(..., description="Requested page size")
    count: int = Field(..., description="Number of records in this page")
    total_pages: int = Field(..., description="Pages available for the current search")
    has_previous_page: bool = Field(...)
    has_next_page: bool = Field(...)
    data: List[T] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Standard message response."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    """Structured error description."""
    type: str = Field(..., description="Machine-readable error type code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Optional error details (e.g., validation issues)")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Standardized API error envelope returned by exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")
