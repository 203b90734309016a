"""
Role model.
"""

from uuid import UUID
from sqlalchemy import Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, EntityMixin

DEFAULT_ROLE_PRIORITY = 5


class Role(Base, EntityMixin):
    """
    A named role owned by exactly one service.

    Ownership (service_id) is independent of visibility: which services a role
    applies to is recorded separately in service_visible_roles.
    """

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("name", "service_id", name="uq_role_name_service"),
        Index("ix_roles_service_id", "service_id"),
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Lower is more privileged: 1 = highest
    priority: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_ROLE_PRIORITY,
        server_default=str(DEFAULT_ROLE_PRIORITY),
        nullable=False,
    )

    # References a service in the portal service; no FK across services
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"
