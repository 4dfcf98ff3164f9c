"""
Request correlation middleware.

Reuses the caller's X-Request-ID or mints one, binds it to the log context
for the lifetime of the request and echoes it on the response.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.logging_config import bind_log_context, get_logger, reset_log_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 500


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request, and its log lines, with a request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = bind_log_context(request_id=request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            reset_log_context(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                "Slow request %s %s",
                request.method,
                request.url.path,
                extra={"request_id": request_id, "duration_ms": round(elapsed_ms, 1)},
            )
        return response
