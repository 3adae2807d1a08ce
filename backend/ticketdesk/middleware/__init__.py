"""
Middleware package.

WHY: Middleware provides cross-cutting concerns (request ids, access
logging) that apply to all requests.
"""

from ticketdesk.middleware.request_context import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    get_request_id,
)

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContextMiddleware",
    "get_request_id",
]
