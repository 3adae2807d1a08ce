"""
User directory endpoints.

WHY: A USER asking to hand a ticket over needs to pick a colleague; this
listing backs that picker.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_user
from ticketdesk.dao.user import UserDAO
from ticketdesk.db.session import get_db
from ticketdesk.models.user import User, UserRole
from ticketdesk.schemas.auth import UserResponse


router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=List[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List transfer targets",
    description="Every USER-role account except the caller, ordered by name",
)
async def list_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[User]:
    return await UserDAO(db).list_by_role_excluding(UserRole.USER, current_user.id)
