"""
Pydantic schemas for authentication endpoints.

WHY: Schemas define request/response contracts, providing:
1. Automatic validation of request data
2. API documentation (OpenAPI/Swagger)
3. Clear separation between API and database models
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ticketdesk.models.user import UserRole
from ticketdesk.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    """
    User registration request schema.

    WHY: Validates registration data:
    1. Email format validation
    2. Non-blank name
    3. Password length (min 8 chars)
    4. Optional role, area and manager references (checked against the
       database by the handler)
    """

    name: str = Field(..., min_length=1, max_length=255, description="User's full name")
    email: EmailStr = Field(..., description="User's email address (must be unique)")
    password: str = Field(..., min_length=8, max_length=100, description="Password")
    role: UserRole = Field(default=UserRole.USER, description="Account role")
    area_id: Optional[int] = Field(default=None, description="Area the user belongs to")
    manager_id: Optional[int] = Field(default=None, description="Manager of the user")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ana Perez",
                "email": "ana@example.com",
                "password": "SecurePassword123!",
                "role": "USER",
                "areaId": 1,
                "managerId": 2,
            }
        }
    )


class LoginRequest(CamelModel):
    """
    Login request schema.

    WHY: Any non-empty password is accepted here so that a short wrong
    password gets the same 401 as a long wrong one.
    """

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, max_length=100, description="User's password")


class TokenResponse(CamelModel):
    """JWT token response with client-side expiry metadata."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class UserResponse(CamelModel):
    """
    Public user profile.

    WHY: Returns user data without the password hash.
    """

    id: int
    name: str
    email: str
    role: UserRole
    area_id: Optional[int] = None
    manager_id: Optional[int] = None
    created_at: Optional[datetime] = None
