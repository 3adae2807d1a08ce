"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. No sensitive data leaks in error messages

Domain rule violations (state, permission, validation) are raised before
any mutation happens, so a raised AppException never leaves a half-written
ticket behind.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to the API error body.

        Returns:
            {"error": message, "code": class name, "details": filtered context}
        """
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.message,
            "code": self.__class__.__name__,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when authentication fails (missing token, bad credentials).

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class TokenInvalidError(AuthenticationError):
    """
    Raised when a JWT token is malformed or has an invalid signature.

    WHY: A token that was presented but cannot be trusted is answered with
    403, distinct from the 401 for a request that carries no token at all.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Token is invalid"


class TokenExpiredError(TokenInvalidError):
    """
    Raised when a JWT token has expired.

    HTTP Status: 403 Forbidden
    """

    default_message = "Token has expired"


class AuthorizationError(AppException):
    """
    Raised when user lacks permissions for an action.

    WHY: Covers both role checks (only MANAGER/ADMIN may approve transfers)
    and ownership checks (only the assignee may comment).

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class TicketNotFoundError(ResourceNotFoundError):
    default_message = "Ticket not found"


class UserNotFoundError(ResourceNotFoundError):
    default_message = "User not found"


class AreaNotFoundError(ResourceNotFoundError):
    default_message = "Area not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    WHY: 409 Conflict indicates the request can't be completed due to
    conflicting state (e.g., email already registered, area name taken).

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class ResourceInUseError(AppException):
    """
    Raised when deleting a resource that other records still reference.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource is still referenced"


# ============================================================================
# Business Logic Exceptions
# ============================================================================


class InvalidStateTransitionError(AppException):
    """
    Raised when an invalid state transition is attempted.

    WHY: The ticket status machine and the transfer protocol both have
    a fixed set of legal moves. Anything else fails with a message that
    names the rejected move.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Invalid state transition"


class TicketAlreadyClosedError(InvalidStateTransitionError):
    default_message = "Ticket is already closed"


class TransferNotAllowedError(InvalidStateTransitionError):
    """Raised when a transfer request is made from a status that forbids it."""

    default_message = "Ticket cannot be transferred in its current state"


class NoPendingTransferError(InvalidStateTransitionError):
    default_message = "Ticket has no pending transfer"


class TransferDataError(AppException):
    """
    Raised when a pending transfer has no target user recorded.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Pending transfer has no target user"


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(AppException):
    """
    Raised when database operations fail.

    WHY: Store failures are converted to a safe 500 response; the
    underlying SQLAlchemy error is logged, never returned to the client.

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Database error"
