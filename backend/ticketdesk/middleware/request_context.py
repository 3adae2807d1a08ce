"""
Request context middleware.

WHAT: Middleware that gives every request an id, makes it available through
a ContextVar for the duration of the request and logs one access line.

WHY: Error handlers and services log from deep inside a request; the
request id lets those lines be correlated with the access log entry and
with the X-Request-ID header the client received.

HOW: Honors an incoming X-Request-ID header (so a proxy can assign ids) or
generates a UUID4, stores it in a ContextVar, times the request and echoes
the id back on the response.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# WHY: ContextVar ensures each async request gets its own isolated id,
# preventing leaks between concurrent requests
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Return the id of the request being handled, or None outside a request."""
    return _request_id.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and writes the access log."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = _request_id.set(request_id)
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 1),
            },
        )
        return response
