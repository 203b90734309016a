"""
Base model classes and mixins.

- TimestampMixin: created_at, updated_at
- SoftDeleteMixin: deleted_at (rows are hidden, never removed)
- UUIDMixin: UUID primary key
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID as PyUUID, uuid4
from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    # All datetimes are timezone-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    All timestamps are stored in UTC (timezone-aware).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """
    Mixin for soft delete functionality.

    Repositories built on SoftDeleteRepository filter these rows out of
    every read.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class UUIDMixin:
    """UUID v4 primary key."""

    id: Mapped[PyUUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )


class EntityMixin(UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Standard mixin for owned entities (Role, Permission).

    Provides:
        - id: UUID primary key
        - created_at, updated_at: Timestamps (UTC)
        - deleted_at: Soft delete marker
    """
    pass
