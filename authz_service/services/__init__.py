"""
Business logic services.
"""

from authz_service.services.relation import (
    RelationService,
    UserRoleService,
    RolePermissionService,
    ServiceVisibleRoleService,
)
from authz_service.services.role import RoleService
from authz_service.services.permission import PermissionService
from authz_service.services.authorization import AuthorizationService

__all__ = [
    "RelationService",
    "UserRoleService",
    "RolePermissionService",
    "ServiceVisibleRoleService",
    "RoleService",
    "PermissionService",
    "AuthorizationService",
]
