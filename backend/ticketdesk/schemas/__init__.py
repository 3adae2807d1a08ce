"""
Request/response schemas.
"""

from ticketdesk.schemas.area import AreaCreate, AreaResponse, AreaUpdate
from ticketdesk.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from ticketdesk.schemas.base import CamelModel
from ticketdesk.schemas.ticket import (
    AssigneeSummary,
    CommentCreate,
    CommentResponse,
    HistoryResponse,
    TicketCreate,
    TicketResponse,
    TicketUpdate,
    TransferDecision,
    TransferRequest,
)

__all__ = [
    "AreaCreate",
    "AreaResponse",
    "AreaUpdate",
    "AssigneeSummary",
    "CamelModel",
    "CommentCreate",
    "CommentResponse",
    "HistoryResponse",
    "LoginRequest",
    "RegisterRequest",
    "TicketCreate",
    "TicketResponse",
    "TicketUpdate",
    "TokenResponse",
    "TransferDecision",
    "TransferRequest",
    "UserResponse",
]
