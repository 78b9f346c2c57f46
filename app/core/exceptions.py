"""
Global exception handling for the application.
Standardizes error responses as {"error": {code, message, details, path}}.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class BadRequestException(AppError):
    """Malformed request body or upload."""
    def __init__(self, message: str = "Bad request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class ForbiddenException(AppError):
    """Authorization failure error (e.g. shared secret mismatch)."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class SpreadsheetParseError(AppError):
    """A spreadsheet could not be decoded. Nothing from it is kept."""
    def __init__(self, message: str = "Spreadsheet could not be read", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class StoreError(Exception):
    """Raised by product/slot store implementations when the backend fails."""


class ProductWriteError(AppError):
    """A single-record write failed."""
    def __init__(self, message: str = "Product write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)


class BatchWriteError(ProductWriteError):
    """A batch of the bulk upsert failed. Batches before `offset` stay committed."""
    def __init__(self, offset: int, reason: str, written: int = 0):
        self.offset = offset
        self.written = written
        super().__init__(
            f"Error subiendo lote {offset}: {reason}",
            details={"offset": offset, "written": written},
        )


class ProductDeleteError(ProductWriteError):
    """Clearing the product table failed; the replace was aborted before writing."""
    def __init__(self, reason: str):
        super().__init__(
            f"Error borrando productos existentes: {reason}",
            details={"stage": "delete"},
        )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.__class__.__name__,
                    "message": exc.message,
                    "details": exc.details,
                    "path": request.url.path,
                }
            },
        )

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": "Ocurrió un error inesperado. Intentá nuevamente más tarde.",
                "path": request.url.path,
            }
        },
    )
