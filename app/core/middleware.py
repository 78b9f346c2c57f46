"""
Middleware configuration for the application.
Includes Correlation ID setup, request logging and CORS.
"""

import time
from typing import Callable

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings

logger = structlog.get_logger(__name__)

# Probes hit these constantly; they are not worth a log line each
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its timing and cart session, if any."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        fields = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        cart_session = request.headers.get("X-Cart-Session")
        if cart_session:
            fields["cart_session"] = cart_session

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
                **fields,
            )
            raise

        logger.info(
            "Request completed",
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            **fields,
        )
        return response


def setup_middleware(app):
    """Setup all middleware for the application.

    Starlette runs middleware in reverse order of addition, so CORS is added
    last to wrap everything else.
    """
    settings = get_settings()

    app.add_middleware(RequestLoggingMiddleware)

    # Correlation ID must wrap the logger so the id is bound when it logs
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
