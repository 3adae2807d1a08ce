"""
User model.

WHY: Users represent the people who own and work tickets. The role decides
which tickets they can see and which workflow steps they may take; the
manager and area references feed the visibility rules.
"""

import enum
from typing import Optional

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ticketdesk.models.base import Base, CreatedAtMixin, PrimaryKeyMixin


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    WHY: Enum ensures only valid roles can be assigned. Permission and
    visibility rules are dispatch tables keyed by these members, so adding
    a role fails loudly until every table covers it.
    """

    USER = "USER"  # Owns and works their own tickets
    MANAGER = "MANAGER"  # Sees their team's tickets, approves transfers
    ADMIN = "ADMIN"  # Sees one area's tickets, approves transfers, may reopen
    SUPERADMIN = "SUPERADMIN"  # Sees everything, manages areas


class User(Base, PrimaryKeyMixin, CreatedAtMixin):
    """
    User model.

    WHY: manager_id and area_id are weak references: nothing checks manager
    cycles, and users are not re-validated when their area changes.
    """

    __tablename__ = "users"

    # User identification
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # Authentication
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Authorization
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="userrole"),
        nullable=False,
        default=UserRole.USER,
    )

    # Organization
    area_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("areas.id"), nullable=True, index=True
    )
    manager_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
