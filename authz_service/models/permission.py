"""
Permission model.
"""

from uuid import UUID
from sqlalchemy import Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, EntityMixin


class Permission(Base, EntityMixin):
    """
    An action string (e.g. "user:create") scoped to one service.

    Examples:
        Permission(action="user:create", service_id=portal_id)
        Permission(action="report:export", description="Export reports", service_id=reports_id)
    """

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("service_id", "action", name="uq_permission_service_action"),
        Index("ix_permissions_action", "action"),
        Index("ix_permissions_service_id", "service_id"),
    )

    action: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)

    def __repr__(self) -> str:
        return f"<Permission {self.action}>"
