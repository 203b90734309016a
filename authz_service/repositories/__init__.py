"""
Repository pattern for data access.
"""

from authz_service.repositories.base import SoftDeleteRepository
from authz_service.repositories.relation import (
    RelationRepository,
    UserRoleRepository,
    RolePermissionRepository,
    ServiceVisibleRoleRepository,
)
from authz_service.repositories.role import RoleRepository
from authz_service.repositories.permission import PermissionRepository

__all__ = [
    "SoftDeleteRepository",
    "RelationRepository",
    "UserRoleRepository",
    "RolePermissionRepository",
    "ServiceVisibleRoleRepository",
    "RoleRepository",
    "PermissionRepository",
]
