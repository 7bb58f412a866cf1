"""FastAPI middleware for request logging, correlation and caller binding."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from feed_subscriptions.logging_config import bind_context, clear_context, get_logger
from feed_subscriptions.services.access_control import bind_caller, clear_caller

logger = get_logger(__name__)

CALLER_ADDRESS_HEADER = "X-Caller-Address"
CALLER_KEY_HEADER = "X-Caller-Key"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs HTTP requests and responses with correlation IDs.

    Every request gets a request_id bound to the logging context and echoed
    back in the ``X-Request-ID`` response header.
    """

    def __init__(self, app: ASGIApp, include_request_details: bool = True):
        """Initialize middleware.

        Args:
            app: ASGI application
            include_request_details: If True, log query params, client host and user agent
        """
        super().__init__(app)
        self.include_request_details = include_request_details

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        bind_context(request_id=request_id)

        if self.include_request_details:
            logger.info(
                "request_started",
                method=request.method,
                path=request.url.path,
                query_params=str(request.query_params) if request.query_params else None,
                client_host=request.client.host if request.client else "unknown",
                user_agent=request.headers.get("user-agent"),
            )
        else:
            logger.info("request_started", method=request.method, path=request.url.path)

        start_time = time.time()

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            raise

        finally:
            clear_context()


class ContextMiddleware(BaseHTTPMiddleware):
    """Binds request-scoped business context.

    - subscription_id from ``/subscriptions/{id}`` paths, for logging
    - caller credentials from the ``X-Caller-Address`` / ``X-Caller-Key``
      headers, for authorization checks
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        parts = request.url.path.split("/")
        if "subscriptions" in parts:
            sub_index = parts.index("subscriptions")
            if len(parts) > sub_index + 1 and parts[sub_index + 1].isdigit():
                bind_context(subscription_id=int(parts[sub_index + 1]))

        caller = request.headers.get(CALLER_ADDRESS_HEADER)
        if caller:
            bind_caller(caller, api_key=request.headers.get(CALLER_KEY_HEADER))
            bind_context(caller=caller)

        try:
            return await call_next(request)
        finally:
            clear_caller()
