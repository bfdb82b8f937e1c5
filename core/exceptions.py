"""
Application error hierarchy.

Every error knows its HTTP status and how to render itself, so routers and
services raise domain errors and the handlers registered in main.py turn
them into responses.
"""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from utils.logger import get_logger

logger = get_logger(__name__)


class MarketplaceError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "detail": self.message}


class ValidationError(MarketplaceError):
    """One or more fields failed validation. Carries every violation found."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation errors"

    def __init__(self, errors: list[dict[str, Any]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str, value: Any = None) -> "ValidationError":
        return cls([{"field": field, "message": message, "value": value}], message=message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message, "errors": self.errors}


class Unauthorized(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, please login again"


class Forbidden(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class CredentialError(MarketplaceError):
    """Hashing or verification failed. The message never says which part."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class ExternalServiceError(MarketplaceError):
    """Mail or storage collaborator failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "External service unavailable"


async def marketplace_exception_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic body errors in the same collect-all shape as rule chains."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        message = message.removeprefix("Value error, ")
        errors.append({
            "field": ".".join(loc),
            "message": message,
            "value": error.get("input") if not isinstance(error.get("input"), dict) else None,
        })

    body = ValidationError(errors).to_dict()
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)
