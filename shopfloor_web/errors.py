"""Error taxonomy shared by the barrel registry and the HTTP layer."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ShopfloorError(Exception):
    """Base class for errors raised by shop floor operations."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(ShopfloorError):
    """Unknown barrel type, unit or other record."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgument(ShopfloorError):
    """Request value outside the accepted domain."""

    status_code = status.HTTP_400_BAD_REQUEST


class StorageFailure(ShopfloorError):
    """The underlying database read or write failed."""


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def shopfloor_error_handler(request: Request, exc: ShopfloorError) -> JSONResponse:
    if isinstance(exc, StorageFailure):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await shopfloor_error_handler(
        request, InvalidArgument(_describe_validation_error(exc))
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error responses used by every router."""

    app.add_exception_handler(ShopfloorError, shopfloor_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
