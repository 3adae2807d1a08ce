"""
FastAPI dependencies for authentication and authorization.

WHY: Dependencies provide reusable authentication and authorization logic
that can be injected into route handlers, ensuring consistent security
across the API.
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.auth import TokenService
from ticketdesk.core.exceptions import AuthenticationError, AuthorizationError
from ticketdesk.dao.user import UserDAO
from ticketdesk.db.session import get_db
from ticketdesk.models.user import User, UserRole
from ticketdesk.services.ticket_workflow import TicketWorkflowService


# HTTP Bearer token security scheme
# WHY: auto_error=False so a missing header becomes our own 401 instead of
# Starlette's 403
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """TokenService created by the app factory."""
    return request.app.state.token_service


def get_bearer_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract the raw token from the Authorization header.

    WHAT: Accepts "Bearer <token>" and a bare "<token>". Any other scheme,
    or a header with no token, counts as missing.

    Raises:
        AuthenticationError: If no token was sent
    """
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    header = request.headers.get("Authorization", "").strip()
    if header and " " not in header and header.lower() != "bearer":
        return header

    raise AuthenticationError(message="Authentication required")


def get_token_payload(
    token: str = Depends(get_bearer_token),
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """
    Verified token claims, without touching the database.

    Raises:
        TokenInvalidError: If the token is malformed or tampered
        TokenExpiredError: If the token has expired
    """
    return token_service.verify_token(token)


async def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    WHY: This dependency:
    1. Extracts token from Authorization header (missing -> 401)
    2. Verifies token signature and expiration (invalid/expired -> 403)
    3. Fetches user from database (vanished user -> 401)

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}

    Raises:
        AuthenticationError: If the header is missing or the user is gone
        TokenInvalidError: If the token is malformed, tampered or expired
    """
    # WHY: User data in token might be stale; always fetch current data
    user_id: int = payload["userId"]
    user = await UserDAO(db).get_by_id(user_id)
    if user is None:
        raise AuthenticationError(message="User not found", user_id=user_id)

    return user


def require_roles(*roles: UserRole):
    """
    Factory function to create a role requirement dependency.

    Usage:
        @router.get("/areas")
        async def list_areas(user: User = Depends(require_roles(UserRole.SUPERADMIN))):
            ...

    Args:
        roles: Roles allowed through

    Returns:
        Dependency function that checks the caller's role
    """
    allowed = frozenset(roles)

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                message=f"{' or '.join(sorted(r.value for r in allowed))} access required",
                user_id=current_user.id,
                user_role=current_user.role.value,
            )
        return current_user

    return role_checker


def get_workflow_service(db: AsyncSession = Depends(get_db)) -> TicketWorkflowService:
    """Ticket workflow engine bound to the request's session."""
    return TicketWorkflowService(db)
