"""
Permission repository.
"""

from sqlalchemy import Select, select
from uuid import UUID

from authz_service.models.permission import Permission
from authz_service.models.role import Role
from authz_service.models.relations import RolePermission, ServiceVisibleRole, UserRole
from authz_service.schemas.permission import PermissionSearchQuery, PermissionSortField
from authz_service.utils.pagination import PageInfo, paginate

from .base import SoftDeleteRepository


class PermissionRepository(SoftDeleteRepository[Permission]):
    model = Permission

    async def search(self, query: PermissionSearchQuery) -> tuple[list[Permission], PageInfo]:
        """Action/description substring and exact service filter, sorted and paginated."""
        stmt = self._base_query()

        if query.service_id:
            stmt = stmt.where(Permission.service_id == query.service_id)
        if query.action:
            stmt = stmt.where(Permission.action.ilike(f"%{query.action}%"))
        if query.description:
            stmt = stmt.where(Permission.description.ilike(f"%{query.description}%"))

        order_column = {
            PermissionSortField.CREATED_AT: Permission.created_at,
            PermissionSortField.ACTION: Permission.action,
        }[query.sort_by]

        return await paginate(
            self.db, stmt, query, order_column=order_column, id_column=Permission.id
        )

    def _granted_in_service_query(self, user_id: UUID, action: str, service_id: UUID) -> Select:
        return (
            select(Permission.id)
            .select_from(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .join(ServiceVisibleRole, ServiceVisibleRole.role_id == UserRole.role_id)
            .join(RolePermission, RolePermission.role_id == UserRole.role_id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(
                UserRole.user_id == user_id,
                ServiceVisibleRole.service_id == service_id,
                Role.deleted_at.is_(None),
                Permission.action == action,
                Permission.service_id == service_id,
                Permission.deleted_at.is_(None),
            )
            .limit(1)
        )

    async def is_granted_in_service(self, user_id: UUID, action: str, service_id: UUID) -> bool:
        """
        Single joined query: user_roles -> roles -> service_visible_roles -> role_permissions -> permissions.

        Equivalent to intersecting the user's live roles with the service's
        visible roles and matching the granted permissions on action and service.
        """
        result = await self.db.execute(self._granted_in_service_query(user_id, action, service_id))
        return result.first() is not None
