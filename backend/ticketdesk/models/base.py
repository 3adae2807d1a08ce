"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID) in a base class
ensures consistency across all models and reduces code duplication.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    WHY: Columns are timezone-naive UTC; SQLite drops tzinfo on the way
    back, so storing naive values keeps comparisons consistent.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass


class PrimaryKeyMixin:
    """Mixin to add an auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)


class CreatedAtMixin:
    """
    Mixin to add a created_at timestamp.

    WHY: Every record in this system is append-only or changes through
    explicit workflow fields, so only the creation time is tracked here.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
