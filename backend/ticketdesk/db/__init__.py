"""Database package"""

from ticketdesk.db.session import create_session_factory, create_tables, get_db
from ticketdesk.models.base import Base

__all__ = ["Base", "create_session_factory", "create_tables", "get_db"]
