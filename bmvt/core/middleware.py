"""
HTTP middleware: access logging and response security headers.
"""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("bmvt.api")

# Long-lived or noisy paths logged at DEBUG only
QUIET_PATHS = ("/api/health", "/api/chat/stream", "/uploads/")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(f"{request.method} {path} failed after {elapsed:.3f}s: {e}", exc_info=True)
            raise

        elapsed = time.perf_counter() - started
        if response.status_code >= 500:
            level = logging.WARNING
        elif path.startswith(QUIET_PATHS):
            level = logging.DEBUG
        else:
            level = logging.INFO
        client = request.client.host if request.client else "-"
        logger.log(level, f"{client} {request.method} {path} {response.status_code} {elapsed:.3f}s")
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Uploaded photos are displayed by the admin frontend from another origin,
    so the resource policy is ``cross-origin``.
    """

    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cross-Origin-Resource-Policy": "cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(self.headers)
        return response
