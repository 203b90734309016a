"""
Database models.
"""

from .base import (
    Base,
    TimestampMixin,
    SoftDeleteMixin,
    UUIDMixin,
    EntityMixin,
)
from .role import Role, DEFAULT_ROLE_PRIORITY
from .permission import Permission
from .relations import UserRole, RolePermission, ServiceVisibleRole

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "UUIDMixin",
    "EntityMixin",
    # Entities
    "Role",
    "DEFAULT_ROLE_PRIORITY",
    "Permission",
    # Relations
    "UserRole",
    "RolePermission",
    "ServiceVisibleRole",
]
