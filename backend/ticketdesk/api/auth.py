"""
Authentication API endpoints.

WHY: These endpoints provide the authentication flow:
1. Register - Create an account with a role and optional area/manager
2. Login - Authenticate user and return JWT token
3. Me - Get current user information

Security:
- Passwords are compared using constant-time comparison (bcrypt)
- Generic error messages prevent user enumeration attacks
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.auth import TokenService, hash_password, verify_password
from ticketdesk.core.deps import get_token_payload, get_token_service
from ticketdesk.core.exceptions import AuthenticationError, UserNotFoundError, ValidationError
from ticketdesk.dao.area import AreaDAO
from ticketdesk.dao.user import UserDAO
from ticketdesk.db.session import get_db
from ticketdesk.models.user import User
from ticketdesk.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse


logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create a new account",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Register a new user.

    WHY: Area and manager are weak references, but they must point at rows
    that exist when the account is created.

    Raises:
        ValidationError (400): If areaId or managerId names nothing
        ResourceAlreadyExistsError (409): If the email is taken
    """
    if data.area_id is not None and await AreaDAO(db).get_by_id(data.area_id) is None:
        raise ValidationError(message=f"Area {data.area_id} does not exist", area_id=data.area_id)

    user_dao = UserDAO(db)
    if data.manager_id is not None and await user_dao.get_by_id(data.manager_id) is None:
        raise ValidationError(
            message=f"Manager {data.manager_id} does not exist",
            manager_id=data.manager_id,
        )

    user = await user_dao.create_user(
        email=data.email,
        hashed_password=hash_password(data.password),
        name=data.name,
        role=data.role,
        area_id=data.area_id,
        manager_id=data.manager_id,
    )
    logger.info("User %s registered with role %s", user.id, user.role.value)
    return user


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Login",
    description="Authenticate with email and password to receive JWT token",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """
    Authenticate user and return JWT access token.

    Security:
    - Unknown email and wrong password produce the same 401 message

    Raises:
        AuthenticationError (401): If credentials are invalid
    """
    user = await UserDAO(db).get_by_email(credentials.email)

    # WHY: Use generic error message to prevent user enumeration
    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.info("Failed login attempt")
        raise AuthenticationError(message="Invalid email or password")

    token = token_service.create_access_token(user_id=user.id, role=user.role.value)
    logger.info("User %s logged in", user.id)

    return TokenResponse(
        token=token,
        token_type="bearer",
        expires_in=token_service.expires_in_seconds,
    )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get information about the currently authenticated user",
)
async def get_me(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user information.

    WHY: Only the token is checked up front, so an account deleted after
    the token was issued reads as a missing resource rather than a failed
    login.

    Raises:
        UserNotFoundError (404): If the account row is gone
    """
    user = await UserDAO(db).get_by_id(payload["userId"])
    if user is None:
        raise UserNotFoundError(message="User not found", user_id=payload["userId"])
    return user
