"""Logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from linkvault.common.logging_config import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    def __init__(self, app, logger: logging.Logger = None):
        """Initialize logging middleware."""
        super().__init__(app)
        self.logger = logger or get_logger("linkvault.web")

    async def dispatch(self, request: Request, call_next: Callable):
        """Log one line per request with status and duration."""
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        client_id = getattr(request.state, "client_id", "unknown")
        self.logger.info(
            f"{request.method} {request.url.path} from {client_id} - "
            f"{response.status_code} in {duration_ms:.2f}ms"
        )

        return response
