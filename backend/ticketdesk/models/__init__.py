"""
Database models package.

WHY: Centralizing model imports ensures Alembic and create_all can discover
all models, and makes it easier to import models elsewhere.
"""

from ticketdesk.models.base import Base, CreatedAtMixin, PrimaryKeyMixin, utcnow
from ticketdesk.models.area import Area
from ticketdesk.models.user import User, UserRole
from ticketdesk.models.ticket import (
    Ticket,
    TicketComment,
    TicketHistory,
    TicketStatus,
    TransferStatus,
)

__all__ = [
    "Base",
    "CreatedAtMixin",
    "PrimaryKeyMixin",
    "utcnow",
    "Area",
    "User",
    "UserRole",
    "Ticket",
    "TicketComment",
    "TicketHistory",
    "TicketStatus",
    "TransferStatus",
]
