"""
FastAPI exception handlers for custom exceptions.

WHY: Exception handlers convert our custom exceptions into properly
formatted JSON responses with correct HTTP status codes, ensuring
every error body has the same {"error": ..., "code": ..., "details": ...}
shape.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketdesk.core.exceptions import AppException, DatabaseError
from ticketdesk.middleware.request_context import get_request_id


logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException and its subclasses.

    Args:
        request: The FastAPI request object
        exc: The custom exception instance

    Returns:
        JSONResponse with error details
    """
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            exc.__class__.__name__,
            request.method,
            request.url.path,
            exc.message,
            extra={"request_id": get_request_id()},
        )
    else:
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.__class__.__name__,
            exc.message,
            extra={"request_id": get_request_id()},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    WHY: Missing or malformed body fields, bad path ids and unknown enum
    values all surface here and must share the 400 error shape.

    Args:
        request: The FastAPI request object
        exc: The Pydantic validation error

    Returns:
        JSONResponse with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    return JSONResponse(
        status_code=400,
        content={
            "error": "Request validation failed",
            "code": "ValidationError",
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions.

    WHY: Some HTTP exceptions (404, 405) are raised by Starlette/FastAPI
    before reaching our routes. This handler ensures they match our error format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": str(exc.detail),
            "code": "HTTPException",
            "details": None,
        },
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Convert store failures into a generic 500.

    WHY: The SQL error text may contain table names or values; it goes to
    the log with the traceback and the client only sees a safe message.
    """
    logger.exception(
        "Database failure on %s %s",
        request.method,
        request.url.path,
        extra={"request_id": get_request_id()},
    )
    return JSONResponse(status_code=500, content=DatabaseError().to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    WHY: Log the full traceback but return a generic error to avoid leaking
    implementation details.
    """
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra={"request_id": get_request_id()},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "InternalServerError",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every handler in this module to the app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
