"""
Area Data Access Object.
"""

from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.area import Area
from ticketdesk.models.ticket import Ticket
from ticketdesk.models.user import User


class AreaDAO(BaseDAO[Area]):
    """Data Access Object for Area model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Area, session)

    async def get_by_name(self, name: str) -> Optional[Area]:
        """Retrieve an area by exact name."""
        result = await self.session.execute(select(Area).where(Area.name == name))
        return result.scalar_one_or_none()

    async def count_references(self, area_id: int) -> int:
        """
        Count users and tickets that point at an area.

        WHY: An area may only be deleted once nothing references it, either
        as a user's area or as a ticket's origin or target area.
        """
        users = await self.session.execute(
            select(func.count()).select_from(User).where(User.area_id == area_id)
        )
        tickets = await self.session.execute(
            select(func.count())
            .select_from(Ticket)
            .where(or_(Ticket.area_id == area_id, Ticket.target_area_id == area_id))
        )
        return users.scalar_one() + tickets.scalar_one()
