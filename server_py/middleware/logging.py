"""Logging middleware for HTTP requests."""
from datetime import datetime
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from core.logging import log_request

LOGGED_PREFIXES = ("/api", "/webhook")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log API and webhook requests."""

    async def dispatch(self, request: Request, call_next):
        start_time = datetime.now()

        response = await call_next(request)

        duration = (datetime.now() - start_time).total_seconds() * 1000

        if request.url.path.startswith(LOGGED_PREFIXES):
            log_request(
                request.method,
                request.url.path,
                response.status_code,
                duration
            )

        return response
