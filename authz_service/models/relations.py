"""
Join relations.

Each table records one many-to-many link keyed by the id pair. Rows carry no
payload and are only written through the relation stores (assign, revoke,
replace); nothing cascades into them.

    UserRole(user_id, role_id)                 user holds role
    RolePermission(role_id, permission_id)     role grants permission
    ServiceVisibleRole(service_id, role_id)    role applies within service
"""

from datetime import datetime
from uuid import UUID
from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RelationMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class UserRole(Base, RelationMixin):
    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)
    role_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)

    def __repr__(self) -> str:
        return f"<UserRole {self.user_id}:{self.role_id}>"


class RolePermission(Base, RelationMixin):
    __tablename__ = "role_permissions"

    role_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)
    permission_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)

    def __repr__(self) -> str:
        return f"<RolePermission {self.role_id}:{self.permission_id}>"


class ServiceVisibleRole(Base, RelationMixin):
    __tablename__ = "service_visible_roles"

    service_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)
    role_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)

    def __repr__(self) -> str:
        return f"<ServiceVisibleRole {self.service_id}:{self.role_id}>"
