"""
HTTP routers.
"""

from ticketdesk.api import areas, auth, tickets, users

__all__ = ["areas", "auth", "tickets", "users"]
