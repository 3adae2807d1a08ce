"""
Data Access Objects package.

WHY: DAOs keep query construction out of the workflow engine and routers.
"""

from ticketdesk.dao.base import BaseDAO
from ticketdesk.dao.user import UserDAO
from ticketdesk.dao.area import AreaDAO
from ticketdesk.dao.ticket import (
    TicketCommentDAO,
    TicketDAO,
    TicketFilter,
    TicketHistoryDAO,
)

__all__ = [
    "BaseDAO",
    "UserDAO",
    "AreaDAO",
    "TicketDAO",
    "TicketCommentDAO",
    "TicketHistoryDAO",
    "TicketFilter",
]
