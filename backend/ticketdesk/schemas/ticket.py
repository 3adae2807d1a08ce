"""
Pydantic schemas for ticket endpoints.

WHAT: Request/response schemas for tickets, comments, history and the
transfer protocol.

HOW: Uses Pydantic v2 with Field validators and ORM mode for SQLAlchemy
integration. Wire names are camelCase (see CamelModel).
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from ticketdesk.models.ticket import TicketStatus, TransferStatus
from ticketdesk.schemas.base import CamelModel


def _not_blank(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{field} cannot be blank")
    return value


# ============================================================================
# Ticket Schemas
# ============================================================================


class TicketCreate(CamelModel):
    """
    Ticket creation request.

    WHAT: Title and description are required; targetAreaId is optional and
    must name an existing area.
    """

    title: str = Field(..., min_length=1, max_length=255, description="Ticket title")
    description: str = Field(..., min_length=1, description="Detailed description")
    target_area_id: Optional[int] = Field(default=None, description="Destination area")

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str, info: ValidationInfo) -> str:
        return _not_blank(v, info.field_name)


class TicketUpdate(CamelModel):
    """
    Ticket update request.

    WHAT: Every field is optional; only provided fields are applied. A
    status change is checked against the transition table.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[TicketStatus] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _not_blank(v, info.field_name)


class AssigneeSummary(CamelModel):
    """Owner embedded in ticket responses."""

    id: int
    name: str
    email: str


class TicketResponse(CamelModel):
    """
    Ticket as returned by the API.

    WHAT: assignedTo embeds the current owner; null when nobody owns it.
    """

    id: int
    title: str
    description: str
    status: TicketStatus
    area_id: Optional[int] = None
    target_area_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    assigned_to: Optional[AssigneeSummary] = None
    transfer_to_id: Optional[int] = None
    transfer_status: Optional[TransferStatus] = None
    created_at: datetime
    last_activity_at: datetime


# ============================================================================
# Transfer Schemas
# ============================================================================


class TransferRequest(CamelModel):
    """Ask to hand a ticket over to another user."""

    target_user_id: int = Field(..., description="User who should take the ticket")


class TransferDecision(CamelModel):
    """Approve (true) or reject (false) the pending transfer."""

    approve: bool


# ============================================================================
# Comment / History Schemas
# ============================================================================


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=10000, description="Comment text")

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _not_blank(v, "content")


class CommentResponse(CamelModel):
    id: int
    ticket_id: int
    user_id: int
    content: str
    created_at: datetime


class HistoryResponse(CamelModel):
    """One audit entry. fromId/toId are null where the action has no actor pair."""

    id: int
    ticket_id: int
    from_id: Optional[int] = None
    to_id: Optional[int] = None
    action: str
    created_at: datetime
