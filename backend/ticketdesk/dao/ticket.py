"""
Ticket Data Access Object.

WHAT: DAOs for tickets, ticket comments and ticket history.

WHY: Encapsulates all ticket database operations with:
1. Listing through a TicketFilter produced by the access policy
2. Append-only comment and history writes
3. Stable ordering (newest tickets first, oldest comments/history first)

HOW: Uses SQLAlchemy 2.0 async with proper session management. No workflow
rules live here; the workflow engine validates before it calls these.
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.base import utcnow
from ticketdesk.models.ticket import (
    Ticket,
    TicketComment,
    TicketHistory,
    TicketStatus,
)


@dataclass(frozen=True)
class TicketFilter:
    """
    Query predicate for listing tickets.

    WHAT: Each field narrows the listing when set:
    - assigned_to_ids: assignee must be one of these ids
    - area_id: origin area must equal this id
    - status: status must match exactly
    - match_nothing: short-circuit to an empty result

    All fields unset means every ticket.
    """

    assigned_to_ids: Optional[FrozenSet[int]] = None
    area_id: Optional[int] = None
    status: Optional[TicketStatus] = None
    match_nothing: bool = False

    @classmethod
    def nothing(cls) -> "TicketFilter":
        return cls(match_nothing=True)


class TicketDAO(BaseDAO[Ticket]):
    """
    Data Access Object for Ticket operations.

    WHAT: Creation, key lookups and filtered listing.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Ticket, session)

    async def create_ticket(
        self,
        title: str,
        description: str,
        assigned_to_id: int,
        area_id: Optional[int] = None,
        target_area_id: Optional[int] = None,
    ) -> Ticket:
        """
        Create a new ticket in OPEN status.

        Args:
            title: Ticket title
            description: Detailed description
            assigned_to_id: Initial owner (the creator)
            area_id: Origin area (the creator's area)
            target_area_id: Destination area

        Returns:
            Created Ticket instance
        """
        now = utcnow()
        return await self.create(
            title=title,
            description=description,
            status=TicketStatus.OPEN,
            assigned_to_id=assigned_to_id,
            area_id=area_id,
            target_area_id=target_area_id,
            transfer_to_id=None,
            transfer_status=None,
            created_at=now,
            last_activity_at=now,
        )

    async def list(
        self,
        ticket_filter: TicketFilter,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Ticket]:
        """
        List tickets matching a filter, newest first, with assignees loaded.

        Args:
            ticket_filter: Predicate built by the access policy
            skip: Number of records to skip
            limit: Maximum records to return (None for all)

        Returns:
            Matching tickets
        """
        if ticket_filter.match_nothing:
            return []

        query = select(Ticket).options(selectinload(Ticket.assigned_to))

        if ticket_filter.assigned_to_ids is not None:
            query = query.where(Ticket.assigned_to_id.in_(sorted(ticket_filter.assigned_to_ids)))

        if ticket_filter.area_id is not None:
            query = query.where(Ticket.area_id == ticket_filter.area_id)

        if ticket_filter.status is not None:
            query = query.where(Ticket.status == ticket_filter.status)

        query = query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())


class TicketCommentDAO(BaseDAO[TicketComment]):
    """Data Access Object for TicketComment operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(TicketComment, session)

    async def add(self, ticket_id: int, user_id: int, content: str) -> TicketComment:
        return await self.create(
            ticket_id=ticket_id,
            user_id=user_id,
            content=content,
            created_at=utcnow(),
        )

    async def list_for_ticket(self, ticket_id: int) -> List[TicketComment]:
        """Comments of a ticket, oldest first."""
        result = await self.session.execute(
            select(TicketComment)
            .where(TicketComment.ticket_id == ticket_id)
            .order_by(TicketComment.created_at, TicketComment.id)
        )
        return list(result.scalars().all())


class TicketHistoryDAO(BaseDAO[TicketHistory]):
    """
    Data Access Object for the ticket audit log.

    WHY: History is append-only; there is deliberately no update path here.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(TicketHistory, session)

    async def record(
        self,
        ticket_id: int,
        action: str,
        from_id: Optional[int] = None,
        to_id: Optional[int] = None,
    ) -> TicketHistory:
        """Append one history record."""
        return await self.create(
            ticket_id=ticket_id,
            action=action,
            from_id=from_id,
            to_id=to_id,
            created_at=utcnow(),
        )

    async def list_for_ticket(self, ticket_id: int) -> List[TicketHistory]:
        """History of a ticket, oldest first."""
        result = await self.session.execute(
            select(TicketHistory)
            .where(TicketHistory.ticket_id == ticket_id)
            .order_by(TicketHistory.created_at, TicketHistory.id)
        )
        return list(result.scalars().all())
