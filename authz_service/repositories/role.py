"""
Role repository.
"""

from authz_service.models.role import Role
from authz_service.schemas.role import RoleSearchQuery, RoleSortField
from authz_service.utils.pagination import PageInfo, paginate

from .base import SoftDeleteRepository


class RoleRepository(SoftDeleteRepository[Role]):
    model = Role

    async def search(self, query: RoleSearchQuery) -> tuple[list[Role], PageInfo]:
        """Name substring and exact service filter, sorted and paginated."""
        stmt = self._base_query()

        if query.service_id:
            stmt = stmt.where(Role.service_id == query.service_id)
        if query.name:
            stmt = stmt.where(Role.name.ilike(f"%{query.name}%"))

        order_column = {
            RoleSortField.CREATED_AT: Role.created_at,
            RoleSortField.NAME: Role.name,
            RoleSortField.PRIORITY: Role.priority,
        }[query.sort_by]

        return await paginate(self.db, stmt, query, order_column=order_column, id_column=Role.id)
