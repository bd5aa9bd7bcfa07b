"""HTTP middleware for request logging, correlation and deadlines.

Provide middleware that binds a request ID to the structlog context, writes
one log line per completed request, and bounds how long a request may take.
"""

import asyncio
import uuid

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from pinger.core.logging_config import (
    SERVER_LOGGER,
    bind_contextvars,
    clear_contextvars,
    get_logger,
)

logger = get_logger(SERVER_LOGGER)


def _remote_address(request: Request) -> str:
    if request.client is None:
        return "-"
    return f"{request.client.host}:{request.client.port}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request after it completes.

    Each request gets an ``X-Request-ID`` (taken from upstream or generated)
    bound to the logging context and echoed back in the response headers.
    """

    async def dispatch(self, request: Request, call_next):
        """Process the request, then log host, remote address, protocol, method and path.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or route handler in the chain.

        Returns:
            The HTTP response with the `X-Request-ID` header attached.
        """
        # Clear residual context from a previous request on this task.
        clear_contextvars()

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_contextvars(request_id=request_id)

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        protocol = f"HTTP/{request.scope.get('http_version', '1.1')}".upper()
        logger.info(
            f"< {request.headers.get('host', '-')} <- {_remote_address(request)} "
            f"| {protocol} {request.method} {request.url.path}",
            status_code=response.status_code,
        )
        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answer 503 when a request is not handled within ``timeout`` seconds."""

    def __init__(self, app: ASGIApp, timeout: float) -> None:
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Request timed out",
                method=request.method,
                path=request.url.path,
                timeout=self.timeout,
            )
            return PlainTextResponse(
                "request timeout", status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )
