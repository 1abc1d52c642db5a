"""
Typed API errors.

Routes and services raise ApiError with an ErrorType; the exception handlers in
marketplace_api.api.main turn every error into the standard ErrorResponse envelope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status


class ErrorType(Enum):
    """Error kinds with their HTTP status and machine-readable code."""

    BAD_REQUEST = (status.HTTP_400_BAD_REQUEST, "bad_request")
    UNAUTHORIZED = (status.HTTP_401_UNAUTHORIZED, "unauthorized")
    FORBIDDEN = (status.HTTP_403_FORBIDDEN, "forbidden")
    INVALID_CREDENTIALS = (status.HTTP_403_FORBIDDEN, "invalid_credentials")
    INVALID_PASSWORD = (status.HTTP_403_FORBIDDEN, "invalid_password")
    NOT_FOUND = (status.HTTP_404_NOT_FOUND, "not_found")
    UNPROCESSABLE_ENTITY = (status.HTTP_422_UNPROCESSABLE_ENTITY, "unprocessable_entity")
    EMAIL_ALREADY_TAKEN = (status.HTTP_422_UNPROCESSABLE_ENTITY, "email_already_taken")
    SERVER = (status.HTTP_500_INTERNAL_SERVER_ERROR, "server_error")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def code(self) -> str:
        return self.value[1]


# PUBLIC_INTERFACE
class ApiError(HTTPException):
    """HTTPException carrying an ErrorType so the error envelope can name its kind."""

    def __init__(self, error_type: ErrorType, message: str, details: Optional[Any] = None) -> None:
        super().__init__(status_code=error_type.status_code, detail=message)
        self.error_type = error_type
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError({self.error_type.name}, {self.message!r})"


TOO_MANY_ATTEMPTS_MESSAGE = "Too many failed login attempts"
WRONG_CREDENTIALS_MESSAGE = "Wrong email or password"
