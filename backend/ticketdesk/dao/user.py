"""
User Data Access Object.

WHY: UserDAO provides database operations for User model, following
the DAO pattern for separation of concerns and testability.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import ResourceAlreadyExistsError
from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.user import User, UserRole


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Case-insensitive comparison prevents duplicate accounts with
        different casing (user@example.com vs USER@EXAMPLE.COM).

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if email already exists in database."""
        result = await self.session.execute(
            select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        name: str,
        role: UserRole = UserRole.USER,
        area_id: Optional[int] = None,
        manager_id: Optional[int] = None,
    ) -> User:
        """
        Create a new user.

        Args:
            email: User's email address
            hashed_password: Already hashed password (use hash_password())
            name: User's full name
            role: User role
            area_id: Optional area the user belongs to
            manager_id: Optional manager of the user

        Returns:
            Created User instance

        Raises:
            ResourceAlreadyExistsError: If email already exists
        """
        # WHY: Prevent duplicate accounts before attempting insert
        if await self.email_exists(email):
            raise ResourceAlreadyExistsError(
                message="User with this email already exists",
                resource_type="User",
            )

        return await self.create(
            email=email,
            hashed_password=hashed_password,
            name=name,
            role=role,
            area_id=area_id,
            manager_id=manager_id,
        )

    async def get_subordinate_ids(self, manager_id: int) -> List[int]:
        """Ids of users whose manager_id points at the given user."""
        result = await self.session.execute(
            select(User.id).where(User.manager_id == manager_id).order_by(User.id)
        )
        return list(result.scalars().all())

    async def list_by_role_excluding(self, role: UserRole, exclude_user_id: int) -> List[User]:
        """
        List users with a role, leaving one user out.

        WHY: Backs the transfer-target picker: every USER account other
        than the caller.
        """
        result = await self.session.execute(
            select(User)
            .where(User.role == role, User.id != exclude_user_id)
            .order_by(User.name, User.id)
        )
        return list(result.scalars().all())
