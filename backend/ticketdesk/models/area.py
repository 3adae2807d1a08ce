"""
Area model.

WHY: Areas are the organizational units that partition tickets. An ADMIN
only sees tickets originating in their own area, and a ticket can name the
area it is destined for.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ticketdesk.models.base import Base, CreatedAtMixin, PrimaryKeyMixin


class Area(Base, PrimaryKeyMixin, CreatedAtMixin):
    """Organizational scope for users and tickets. Managed by SUPERADMIN."""

    __tablename__ = "areas"

    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Area(id={self.id}, name={self.name})>"
