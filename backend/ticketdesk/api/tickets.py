"""
Ticket management API endpoints.

WHAT: RESTful API for tickets, their comments and history, and the
transfer/approval protocol.

HOW: Thin FastAPI handlers. Every rule (visibility, per-ticket permissions,
status transitions, transfer checks) lives in TicketWorkflowService; the
handlers only parse the body, call the service and shape the response.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ticketdesk.core.deps import get_current_user, get_workflow_service
from ticketdesk.models.ticket import Ticket, TicketComment, TicketHistory, TicketStatus
from ticketdesk.models.user import User
from ticketdesk.schemas.ticket import (
    CommentCreate,
    CommentResponse,
    HistoryResponse,
    TicketCreate,
    TicketResponse,
    TicketUpdate,
    TransferDecision,
    TransferRequest,
)
from ticketdesk.services.ticket_workflow import TicketWorkflowService


router = APIRouter(prefix="/tickets", tags=["tickets"])


# ============================================================================
# Ticket CRUD Endpoints
# ============================================================================


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create ticket",
    description="Create a ticket owned by the caller",
)
async def create_ticket(
    data: TicketCreate,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    """
    Create a new ticket.

    WHAT: The ticket starts OPEN, assigned to the caller, with the caller's
    area as origin.

    Raises:
        ValidationError (400): If targetAreaId names no area
    """
    return await service.create_ticket(
        user=current_user,
        title=data.title,
        description=data.description,
        target_area_id=data.target_area_id,
    )


@router.get(
    "",
    response_model=List[TicketResponse],
    status_code=status.HTTP_200_OK,
    summary="List tickets",
    description="Tickets visible to the caller, newest first",
)
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(
        default=None,
        alias="status",
        description="Only tickets with this status",
    ),
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> List[Ticket]:
    """
    List tickets the caller may see.

    WHY: Visibility depends on role: USER sees own tickets, MANAGER sees
    own and subordinates', ADMIN sees its area, SUPERADMIN sees all.
    """
    return await service.list_tickets(current_user, status_filter)


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Get ticket",
)
async def get_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    """
    Raises:
        TicketNotFoundError (404): If ticket doesn't exist
        AuthorizationError (403): If the caller may not read it
    """
    return await service.get_ticket(current_user, ticket_id)


@router.put(
    "/{ticket_id}",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Update ticket",
    description="Update title, description and/or status",
)
async def update_ticket(
    ticket_id: int,
    data: TicketUpdate,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    """
    Update a ticket.

    Raises:
        TicketNotFoundError (404): If ticket doesn't exist
        AuthorizationError (403): If the caller is not assignee/MANAGER/ADMIN
        InvalidStateTransitionError (400): If the status move is not allowed
    """
    return await service.update_ticket(
        user=current_user,
        ticket_id=ticket_id,
        title=data.title,
        description=data.description,
        status=data.status,
    )


@router.post(
    "/{ticket_id}/close",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Close ticket",
)
async def close_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    """
    Raises:
        AuthorizationError (403): If the caller is not assignee/MANAGER/ADMIN
        TicketAlreadyClosedError (400): If the ticket is already CLOSED
    """
    return await service.close_ticket(current_user, ticket_id)


# ============================================================================
# Transfer Endpoints
# ============================================================================


@router.post(
    "/{ticket_id}/transfer",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Request transfer",
    description="Ask a MANAGER or ADMIN to hand the ticket to another user",
)
async def request_transfer(
    ticket_id: int,
    data: TransferRequest,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    return await service.request_transfer(current_user, ticket_id, data.target_user_id)


@router.post(
    "/{ticket_id}/approve-transfer",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve transfer",
    description="Approve or reject the pending transfer",
)
async def resolve_transfer(
    ticket_id: int,
    data: TransferDecision,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> Ticket:
    return await service.resolve_transfer(current_user, ticket_id, data.approve)


# ============================================================================
# Comment / History Endpoints
# ============================================================================


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add comment",
)
async def add_comment(
    ticket_id: int,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> TicketComment:
    return await service.add_comment(current_user, ticket_id, data.content)


@router.get(
    "/{ticket_id}/comments",
    response_model=List[CommentResponse],
    status_code=status.HTTP_200_OK,
    summary="List comments",
)
async def list_comments(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> List[TicketComment]:
    return await service.list_comments(current_user, ticket_id)


@router.get(
    "/{ticket_id}/history",
    response_model=List[HistoryResponse],
    status_code=status.HTTP_200_OK,
    summary="Ticket history",
)
async def list_history(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: TicketWorkflowService = Depends(get_workflow_service),
) -> List[TicketHistory]:
    return await service.list_history(current_user, ticket_id)
