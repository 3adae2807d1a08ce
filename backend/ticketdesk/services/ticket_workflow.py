"""
Ticket workflow engine.

WHAT: Service that owns every ticket mutation: creation, field and status
updates, closing, comments and the transfer/approval protocol.

WHY: The rules that govern a ticket's life live in one place:
1. Status transitions follow a fixed table (ADMIN may reopen CLOSED)
2. Only the USER who owns an IN_PROGRESS ticket can ask to hand it over
3. A MANAGER or ADMIN approves or rejects the hand-over
4. Every status change and transfer event appends one history record

HOW: Each operation loads the ticket, runs all permission and state checks,
and only then mutates the ticket and appends history through the request's
session. A failed check raises before anything is written, so a rejected
request leaves the ticket untouched.
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import (
    AuthorizationError,
    InvalidStateTransitionError,
    NoPendingTransferError,
    TicketAlreadyClosedError,
    TicketNotFoundError,
    TransferDataError,
    TransferNotAllowedError,
    UserNotFoundError,
    ValidationError,
)
from ticketdesk.dao.area import AreaDAO
from ticketdesk.dao.ticket import TicketCommentDAO, TicketDAO, TicketHistoryDAO
from ticketdesk.dao.user import UserDAO
from ticketdesk.models.ticket import (
    Ticket,
    TicketComment,
    TicketHistory,
    TicketStatus,
    TransferStatus,
)
from ticketdesk.models.user import User, UserRole
from ticketdesk.services.ticket_policy import TicketAction, can, visibility_filter


logger = logging.getLogger(__name__)


# ============================================================================
# Status state machine
# ============================================================================


VALID_STATUS_TRANSITIONS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
    TicketStatus.OPEN: frozenset({TicketStatus.IN_PROGRESS}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset(),
}

# Roles allowed to move a ticket out of CLOSED despite the table
REOPEN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})


def check_status_transition(
    current: TicketStatus,
    requested: TicketStatus,
    role: UserRole,
) -> bool:
    """
    Validate a status change.

    Args:
        current: The ticket's status now
        requested: The status asked for
        role: The caller's role

    Returns:
        True if the status changes, False if requested equals current

    Raises:
        InvalidStateTransitionError: If the move is not in the table and not
            an ADMIN reopening a CLOSED ticket
    """
    if requested == current:
        return False
    if requested in VALID_STATUS_TRANSITIONS[current]:
        return True
    if current == TicketStatus.CLOSED and role in REOPEN_ROLES:
        return True
    raise InvalidStateTransitionError(
        message=f"Invalid status transition: {current.value} -> {requested.value}",
        current_status=current.value,
        requested_status=requested.value,
        valid_transitions=sorted(s.value for s in VALID_STATUS_TRANSITIONS[current]),
    )


def status_change_action(old: TicketStatus, new: TicketStatus) -> str:
    return f"status changed from {old.value} to {new.value}"


# ============================================================================
# Workflow service
# ============================================================================


class TicketWorkflowService:
    """
    Ticket workflow operations for one request.

    WHAT: Wraps the ticket, comment, history, user and area DAOs around a
    single AsyncSession.

    Example:
        service = TicketWorkflowService(db)
        ticket = await service.request_transfer(current_user, ticket_id, target_id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.tickets = TicketDAO(session)
        self.comments = TicketCommentDAO(session)
        self.history = TicketHistoryDAO(session)
        self.users = UserDAO(session)
        self.areas = AreaDAO(session)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_ticket(self, ticket_id: int) -> Ticket:
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(
                message=f"Ticket with id {ticket_id} not found",
                ticket_id=ticket_id,
            )
        return ticket

    async def _with_assignee(self, ticket: Ticket) -> Ticket:
        """
        Load the ticket's current owner for the response.

        WHY: Ownership may have just moved (transfer approval); refreshing
        after the flush reads the owner the row now points at.
        """
        await self.session.refresh(ticket, attribute_names=["assigned_to"])
        return ticket

    @staticmethod
    def _require(user: User, action: TicketAction, ticket: Ticket, message: str) -> None:
        if not can(user, action, ticket):
            raise AuthorizationError(
                message=message,
                action=action.value,
                ticket_id=ticket.id,
                user_id=user.id,
                user_role=UserRole(user.role).value,
            )

    def _log(self, message: str, user: User, ticket: Ticket, *args: object) -> None:
        logger.info(message, *args, extra={"user_id": user.id, "ticket_id": ticket.id})

    # =========================================================================
    # Create / read
    # =========================================================================

    async def create_ticket(
        self,
        user: User,
        title: str,
        description: str,
        target_area_id: Optional[int] = None,
    ) -> Ticket:
        """
        Create a ticket owned by its creator.

        WHAT: The new ticket starts OPEN, assigned to the creator, with the
        creator's area as its origin area.

        Raises:
            ValidationError: If target_area_id names no existing area
        """
        if target_area_id is not None and await self.areas.get_by_id(target_area_id) is None:
            raise ValidationError(
                message=f"Target area {target_area_id} does not exist",
                target_area_id=target_area_id,
            )

        ticket = await self.tickets.create_ticket(
            title=title,
            description=description,
            assigned_to_id=user.id,
            area_id=user.area_id,
            target_area_id=target_area_id,
        )
        self._log("Ticket %s created", user, ticket, ticket.id)
        return await self._with_assignee(ticket)

    async def list_tickets(
        self,
        user: User,
        status: Optional[TicketStatus] = None,
    ) -> List[Ticket]:
        """
        List the tickets a user may see.

        WHY: The visibility filter is rebuilt on every call; MANAGER team
        membership is read fresh from the users table.
        """
        subordinate_ids: List[int] = []
        if UserRole(user.role) == UserRole.MANAGER:
            subordinate_ids = await self.users.get_subordinate_ids(user.id)
        return await self.tickets.list(visibility_filter(user, subordinate_ids, status))

    async def get_ticket(self, user: User, ticket_id: int) -> Ticket:
        ticket = await self._get_ticket(ticket_id)
        self._require(user, TicketAction.READ, ticket, "You are not allowed to view this ticket")
        return await self._with_assignee(ticket)

    # =========================================================================
    # Update / close
    # =========================================================================

    async def update_ticket(
        self,
        user: User,
        ticket_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TicketStatus] = None,
    ) -> Ticket:
        """
        Update title, description and/or status.

        WHAT: The status change is validated against the transition table
        before any field is written; an illegal move rejects the whole update.
        A real status change appends "status changed from X to Y".

        Raises:
            TicketNotFoundError: If the ticket doesn't exist
            AuthorizationError: If the caller is not the assignee, MANAGER or ADMIN
            InvalidStateTransitionError: If the status move is not allowed
        """
        ticket = await self._get_ticket(ticket_id)
        self._require(user, TicketAction.UPDATE, ticket, "You are not allowed to update this ticket")

        old_status = ticket.status
        status_changes = False
        if status is not None:
            status_changes = check_status_transition(old_status, status, UserRole(user.role))

        if title is not None:
            ticket.title = title
        if description is not None:
            ticket.description = description
        if status_changes:
            ticket.status = status
        ticket.touch()
        await self.tickets.save(ticket)

        if status_changes:
            await self.history.record(
                ticket_id=ticket.id,
                action=status_change_action(old_status, status),
                from_id=user.id,
            )
            self._log(
                "Ticket %s status %s -> %s", user, ticket, ticket.id, old_status.value, status.value
            )

        return await self._with_assignee(ticket)

    async def close_ticket(self, user: User, ticket_id: int) -> Ticket:
        """
        Close a ticket from OPEN or IN_PROGRESS.

        WHAT: Records one history entry naming the old status, the acting
        role and the acting user.

        Raises:
            TicketNotFoundError: If the ticket doesn't exist
            AuthorizationError: If the caller is not the assignee, MANAGER or ADMIN
            TicketAlreadyClosedError: If the ticket is already CLOSED
        """
        ticket = await self._get_ticket(ticket_id)
        self._require(user, TicketAction.CLOSE, ticket, "You are not allowed to close this ticket")

        if ticket.status == TicketStatus.CLOSED:
            raise TicketAlreadyClosedError(
                message=f"Ticket {ticket.id} is already closed",
                ticket_id=ticket.id,
            )

        old_status = ticket.status
        role = UserRole(user.role)
        ticket.status = TicketStatus.CLOSED
        ticket.touch()
        await self.tickets.save(ticket)

        await self.history.record(
            ticket_id=ticket.id,
            action=(
                f"{status_change_action(old_status, TicketStatus.CLOSED)} "
                f"(closed by {role.value} user {user.id})"
            ),
            from_id=user.id,
        )
        self._log("Ticket %s closed by %s", user, ticket, ticket.id, role.value)
        return await self._with_assignee(ticket)

    # =========================================================================
    # Comments / history
    # =========================================================================

    async def add_comment(self, user: User, ticket_id: int, content: str) -> TicketComment:
        """
        Append a comment from the ticket's assignee.

        Raises:
            AuthorizationError: If the caller is not the assignee
            ValidationError: If the content is blank
        """
        ticket = await self._get_ticket(ticket_id)
        self._require(
            user, TicketAction.COMMENT, ticket, "Only the ticket's assignee can comment on it"
        )

        content = content.strip()
        if not content:
            raise ValidationError(message="Comment content cannot be empty")

        comment = await self.comments.add(ticket_id=ticket.id, user_id=user.id, content=content)
        ticket.touch()
        await self.tickets.save(ticket)
        return comment

    async def list_comments(self, user: User, ticket_id: int) -> List[TicketComment]:
        ticket = await self._get_ticket(ticket_id)
        self._require(
            user, TicketAction.VIEW_COMMENTS, ticket, "You are not allowed to view these comments"
        )
        return await self.comments.list_for_ticket(ticket.id)

    async def list_history(self, user: User, ticket_id: int) -> List[TicketHistory]:
        ticket = await self._get_ticket(ticket_id)
        self._require(
            user, TicketAction.VIEW_HISTORY, ticket, "You are not allowed to view this history"
        )
        return await self.history.list_for_ticket(ticket.id)

    # =========================================================================
    # Transfer protocol
    # =========================================================================

    async def request_transfer(self, user: User, ticket_id: int, target_user_id: int) -> Ticket:
        """
        Ask to hand a ticket over to another user.

        WHAT: Checks, in order: caller is a USER, caller owns the ticket,
        ticket is IN_PROGRESS, no transfer is already pending, target exists
        and is someone else. On success the ticket holds the target in
        transfer_to_id with transfer_status PENDING.

        Raises:
            AuthorizationError: If the caller is not a USER or not the assignee
            TransferNotAllowedError: If the ticket is not IN_PROGRESS or
                already has a pending transfer
            UserNotFoundError: If the target user doesn't exist
            ValidationError: If the target is the caller
        """
        ticket = await self._get_ticket(ticket_id)

        if UserRole(user.role) != UserRole.USER:
            raise AuthorizationError(
                message="Only USER accounts can request a ticket transfer",
                ticket_id=ticket.id,
                user_role=UserRole(user.role).value,
            )
        self._require(
            user,
            TicketAction.REQUEST_TRANSFER,
            ticket,
            "Only the ticket's assignee can request a transfer",
        )

        if ticket.status != TicketStatus.IN_PROGRESS:
            raise TransferNotAllowedError(
                message=(
                    f"Ticket must be {TicketStatus.IN_PROGRESS.value} to be transferred "
                    f"(current status: {ticket.status.value})"
                ),
                ticket_id=ticket.id,
                current_status=ticket.status.value,
            )

        if ticket.transfer_status == TransferStatus.PENDING:
            raise TransferNotAllowedError(
                message="Ticket already has a pending transfer",
                ticket_id=ticket.id,
                transfer_to_id=ticket.transfer_to_id,
            )

        if target_user_id == user.id:
            raise ValidationError(message="Cannot transfer a ticket to yourself")

        target = await self.users.get_by_id(target_user_id)
        if target is None:
            raise UserNotFoundError(
                message=f"User with id {target_user_id} not found",
                user_id=target_user_id,
            )

        ticket.transfer_to_id = target.id
        ticket.transfer_status = TransferStatus.PENDING
        ticket.touch()
        await self.tickets.save(ticket)

        await self.history.record(
            ticket_id=ticket.id,
            action="transfer requested, pending approval",
            from_id=user.id,
            to_id=target.id,
        )
        self._log("Ticket %s transfer to user %s requested", user, ticket, ticket.id, target.id)
        return await self._with_assignee(ticket)

    async def resolve_transfer(self, user: User, ticket_id: int, approve: bool) -> Ticket:
        """
        Approve or reject the pending transfer on a ticket.

        WHAT:
        - approve: ownership moves to transfer_to_id, transfer_status becomes
          APPROVED, transfer_to_id is cleared
        - reject: transfer_to_id is cleared, transfer_status becomes REJECTED,
          ownership is unchanged

        Raises:
            AuthorizationError: If the caller is not MANAGER or ADMIN
            NoPendingTransferError: If transfer_status is not PENDING
            TransferDataError: If approving a pending transfer with no target
        """
        ticket = await self._get_ticket(ticket_id)
        self._require(
            user,
            TicketAction.RESOLVE_TRANSFER,
            ticket,
            "Only a MANAGER or ADMIN can resolve a transfer",
        )

        if ticket.transfer_status != TransferStatus.PENDING:
            raise NoPendingTransferError(
                message=f"Ticket {ticket.id} has no pending transfer",
                ticket_id=ticket.id,
                transfer_status=ticket.transfer_status.value if ticket.transfer_status else None,
            )

        if approve:
            if ticket.transfer_to_id is None:
                raise TransferDataError(
                    message=f"Pending transfer on ticket {ticket.id} has no target user",
                    ticket_id=ticket.id,
                )
            previous_owner = ticket.assigned_to_id
            new_owner = ticket.transfer_to_id
            ticket.assigned_to_id = new_owner
            ticket.transfer_status = TransferStatus.APPROVED
            ticket.transfer_to_id = None
            ticket.touch()
            await self.tickets.save(ticket)

            await self.history.record(
                ticket_id=ticket.id,
                action=f"transfer approved by manager {user.id}",
                from_id=previous_owner,
                to_id=new_owner,
            )
            self._log(
                "Ticket %s transfer approved: %s -> %s",
                user,
                ticket,
                ticket.id,
                previous_owner,
                new_owner,
            )
        else:
            ticket.transfer_to_id = None
            ticket.transfer_status = TransferStatus.REJECTED
            ticket.touch()
            await self.tickets.save(ticket)

            await self.history.record(
                ticket_id=ticket.id,
                action=f"transfer rejected by manager {user.id}",
            )
            self._log("Ticket %s transfer rejected", user, ticket, ticket.id)

        return await self._with_assignee(ticket)
