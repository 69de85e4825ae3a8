"""
Access Logging Middleware

Logs every API request (method, path, status, duration) through the semantic
logger and tags the response with a request ID for correlation.
Request bodies and credentials are never logged.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from stackteam.logging import get_logger

logger = get_logger("stackteam.access")

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log API access.

    Captures:
    - Request details (method, path, client IP)
    - User context (user_id, when authenticated)
    - Performance (duration; requests over the threshold are logged as slow)
    - Request tracking (request_id, echoed in X-Request-ID)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = 1.0):
        """
        Args:
            app: FastAPI application
            enabled: Whether logging is enabled
            slow_threshold: Seconds above which a request is logged as slow
        """
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.enabled or request.url.path in SKIPPED_PATHS:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = round(time.perf_counter() - start_time, 4)

        context = {
            "request_id": request_id,
            "ip": self._get_client_ip(request),
            "user_id": getattr(request.state, "user_id", None),
        }
        logger.request(
            "API request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            **context
        )
        if duration > self.slow_threshold:
            logger.slow(
                "Slow request",
                duration=duration,
                threshold=self.slow_threshold,
                method=request.method,
                path=request.url.path,
                request_id=request_id,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        X-Forwarded-For first (proxied requests), then the direct client.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"
