"""
Ticket access policy.

WHAT: Pure functions deciding which tickets a user can list and which
actions a user may take on a single ticket.

WHY: Listing and per-ticket actions use different gates:
- Listing goes through the visibility filter (the only gate for GET /tickets)
- Reads, updates, comments, history and transfers each have a narrower
  ownership-or-role rule

HOW: Every rule is a dispatch table keyed by UserRole. The tables are
checked against the enum at import time, so a new role cannot ship without
deciding what it may see and do.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, Mapping, Optional

from ticketdesk.dao.ticket import TicketFilter
from ticketdesk.models.ticket import Ticket, TicketStatus
from ticketdesk.models.user import User, UserRole


# ============================================================================
# Visibility filter
# ============================================================================


VisibilityRule = Callable[[User, Iterable[int]], TicketFilter]


def _own_tickets(user: User, subordinate_ids: Iterable[int]) -> TicketFilter:
    return TicketFilter(assigned_to_ids=frozenset({user.id}))


def _team_tickets(user: User, subordinate_ids: Iterable[int]) -> TicketFilter:
    return TicketFilter(assigned_to_ids=frozenset(subordinate_ids) | {user.id})


def _area_tickets(user: User, subordinate_ids: Iterable[int]) -> TicketFilter:
    # An ADMIN without an area has nothing to administer
    if user.area_id is None:
        return TicketFilter.nothing()
    return TicketFilter(area_id=user.area_id)


def _all_tickets(user: User, subordinate_ids: Iterable[int]) -> TicketFilter:
    return TicketFilter()


VISIBILITY_RULES: Dict[UserRole, VisibilityRule] = {
    UserRole.USER: _own_tickets,
    UserRole.MANAGER: _team_tickets,
    UserRole.ADMIN: _area_tickets,
    UserRole.SUPERADMIN: _all_tickets,
}


def visibility_filter(
    user: User,
    subordinate_ids: Iterable[int] = (),
    status: Optional[TicketStatus] = None,
) -> TicketFilter:
    """
    Build the listing filter for a user.

    Args:
        user: The caller
        subordinate_ids: Ids of users managed by the caller (used for MANAGER)
        status: Optional exact status to narrow the listing

    Returns:
        TicketFilter to hand to TicketDAO.list
    """
    base = VISIBILITY_RULES[UserRole(user.role)](user, subordinate_ids)
    if status is None or base.match_nothing:
        return base
    return TicketFilter(
        assigned_to_ids=base.assigned_to_ids,
        area_id=base.area_id,
        status=status,
    )


# ============================================================================
# Per-ticket actions
# ============================================================================


class TicketAction(str, Enum):
    """Actions gated by a per-ticket permission check."""

    READ = "read"
    UPDATE = "update"
    CLOSE = "close"
    COMMENT = "comment"
    VIEW_COMMENTS = "view_comments"
    VIEW_HISTORY = "view_history"
    REQUEST_TRANSFER = "request_transfer"
    RESOLVE_TRANSFER = "resolve_transfer"


# Who may act regardless of ownership, per action. The assignee column says
# whether the ticket's current owner may act, and for which roles.
_ANY = frozenset(UserRole)
_SUPERVISORS = frozenset({UserRole.MANAGER, UserRole.ADMIN})

ROLE_GRANTS: Mapping[TicketAction, frozenset] = {
    TicketAction.READ: _SUPERVISORS | {UserRole.SUPERADMIN},
    TicketAction.UPDATE: _SUPERVISORS,
    TicketAction.CLOSE: _SUPERVISORS,
    TicketAction.COMMENT: frozenset(),
    TicketAction.VIEW_COMMENTS: _SUPERVISORS,
    TicketAction.VIEW_HISTORY: _SUPERVISORS,
    TicketAction.REQUEST_TRANSFER: frozenset(),
    TicketAction.RESOLVE_TRANSFER: _SUPERVISORS,
}

ASSIGNEE_GRANTS: Mapping[TicketAction, frozenset] = {
    TicketAction.READ: _ANY,
    TicketAction.UPDATE: _ANY,
    TicketAction.CLOSE: _ANY,
    TicketAction.COMMENT: _ANY,
    TicketAction.VIEW_COMMENTS: _ANY,
    TicketAction.VIEW_HISTORY: _ANY,
    TicketAction.REQUEST_TRANSFER: frozenset({UserRole.USER}),
    TicketAction.RESOLVE_TRANSFER: frozenset(),
}


def is_assignee(user: User, ticket: Ticket) -> bool:
    return ticket.assigned_to_id is not None and ticket.assigned_to_id == user.id


def can(user: User, action: TicketAction, ticket: Ticket) -> bool:
    """
    Decide whether a user may perform an action on a ticket.

    Args:
        user: The caller
        action: The action being attempted
        ticket: The ticket it targets

    Returns:
        True when either the caller's role grants the action outright, or
        the caller owns the ticket and owners with that role may act
    """
    role = UserRole(user.role)
    if role in ROLE_GRANTS[action]:
        return True
    return is_assignee(user, ticket) and role in ASSIGNEE_GRANTS[action]


def _check_exhaustive() -> None:
    missing_roles = set(UserRole) - set(VISIBILITY_RULES)
    if missing_roles:
        raise RuntimeError(f"Visibility rules missing for roles: {sorted(missing_roles)}")
    for table_name, table in (("ROLE_GRANTS", ROLE_GRANTS), ("ASSIGNEE_GRANTS", ASSIGNEE_GRANTS)):
        missing_actions = set(TicketAction) - set(table)
        if missing_actions:
            raise RuntimeError(f"{table_name} missing actions: {sorted(missing_actions)}")


_check_exhaustive()
