"""
Ticket models.

WHAT: SQLAlchemy models for tickets, comments and the ticket history log.

WHY: Provides the entities the workflow engine governs:
1. Status lifecycle (OPEN → IN_PROGRESS → CLOSED)
2. Transfer requests awaiting MANAGER/ADMIN approval
3. Append-only comments
4. Append-only audit history, one record per workflow event

HOW: Uses SQLAlchemy 2.0 typed mappings with:
- Enums for status and transfer status
- Foreign keys to users and areas
- Indexes for the visibility filter columns
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ticketdesk.models.base import Base, utcnow

if TYPE_CHECKING:
    from ticketdesk.models.user import User


# ============================================================================
# Enums
# ============================================================================


class TicketStatus(str, Enum):
    """
    Ticket status values.

    WHAT: Tracks the lifecycle of a ticket.

    - OPEN: New ticket, nobody working it yet
    - IN_PROGRESS: Being worked on; the only state a transfer can start from
    - CLOSED: Finished; only an ADMIN can reopen it
    """

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class TransferStatus(str, Enum):
    """
    Outcome of the latest transfer request on a ticket.

    A ticket with no request ever made has transfer_status NULL. APPROVED and
    REJECTED are kept after resolution so the last decision stays visible.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# ============================================================================
# Ticket Model
# ============================================================================


class Ticket(Base):
    """
    A unit of work owned by one user at a time.

    Invariant: transfer_to_id is set exactly while transfer_status is PENDING.
    """

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[TicketStatus] = mapped_column(
        SQLEnum(TicketStatus, name="ticketstatus"),
        default=TicketStatus.OPEN,
        nullable=False,
    )

    # Area routing
    area_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("areas.id"), nullable=True
    )
    target_area_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("areas.id"), nullable=True
    )

    # Ownership and transfer
    assigned_to_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    transfer_to_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    transfer_status: Mapped[Optional[TransferStatus]] = mapped_column(
        SQLEnum(TransferStatus, name="transferstatus"),
        nullable=True,
    )

    # WHY: Loaded explicitly (selectinload or refresh) so responses can embed
    # the owner; async sessions cannot lazy-load on attribute access
    assigned_to: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assigned_to_id]
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_tickets_status", "status"),
        Index("ix_tickets_assigned_to", "assigned_to_id"),
        Index("ix_tickets_area_id", "area_id"),
        Index("ix_tickets_target_area_id", "target_area_id"),
    )

    def touch(self) -> None:
        """Record activity on the ticket."""
        self.last_activity_at = utcnow()

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, status={self.status}, assigned_to={self.assigned_to_id})>"


# ============================================================================
# Comment Model
# ============================================================================


class TicketComment(Base):
    """Append-only comment left by a ticket's assignee."""

    __tablename__ = "ticket_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<TicketComment(id={self.id}, ticket_id={self.ticket_id})>"


# ============================================================================
# History Model
# ============================================================================


class TicketHistory(Base):
    """
    Audit-log entry for one workflow event on a ticket.

    WHY: from_id/to_id are user references whose meaning depends on the
    event: actor for status changes, old and new owner for an approved
    transfer, requester and target for a transfer request.
    """

    __tablename__ = "ticket_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    to_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<TicketHistory(id={self.id}, ticket_id={self.ticket_id}, action={self.action!r})>"
