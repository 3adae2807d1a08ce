"""
Domain services: ticket access policy and the ticket workflow engine.
"""

from ticketdesk.services.ticket_policy import TicketAction, can, visibility_filter
from ticketdesk.services.ticket_workflow import (
    VALID_STATUS_TRANSITIONS,
    TicketWorkflowService,
    check_status_transition,
)

__all__ = [
    "TicketAction",
    "TicketWorkflowService",
    "VALID_STATUS_TRANSITIONS",
    "can",
    "check_status_transition",
    "visibility_filter",
]
