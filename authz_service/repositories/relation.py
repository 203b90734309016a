"""
Generic repository for id-pair join tables.

A relation links a "left" id to a "right" id (user -> role, role -> permission,
service -> role). All lookups select only id columns; batch lookups use one
IN query and group rows client-side.
"""

from collections import defaultdict
from typing import Generic, Sequence, Type, TypeVar
from uuid import UUID
from sqlalchemy import Select, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.models.base import Base
from authz_service.models.relations import RolePermission, ServiceVisibleRole, UserRole

RelationT = TypeVar("RelationT", bound=Base)


class RelationRepository(Generic[RelationT]):
    """
    Usage:
        class UserRoleRepository(RelationRepository[UserRole]):
            model = UserRole
            left = "user_id"
            right = "role_id"
    """

    model: Type[RelationT]
    left: str
    right: str

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def left_col(self):
        return getattr(self.model, self.left)

    @property
    def right_col(self):
        return getattr(self.model, self.right)

    def _pair(self, left_id: UUID, right_id: UUID) -> Select:
        return select(self.model).where(self.left_col == left_id, self.right_col == right_id)

    # ============================================================
    # READS
    # ============================================================

    async def right_ids_for(self, left_id: UUID) -> list[UUID]:
        result = await self.db.execute(select(self.right_col).where(self.left_col == left_id))
        return list(result.scalars().all())

    async def left_ids_for(self, right_id: UUID) -> list[UUID]:
        result = await self.db.execute(select(self.left_col).where(self.right_col == right_id))
        return list(result.scalars().all())

    async def right_ids_for_many(self, left_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        if not left_ids:
            return {}
        stmt = select(self.left_col, self.right_col).where(self.left_col.in_(list(left_ids)))
        return await self._grouped(stmt)

    async def left_ids_for_many(self, right_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        if not right_ids:
            return {}
        stmt = select(self.right_col, self.left_col).where(self.right_col.in_(list(right_ids)))
        return await self._grouped(stmt)

    async def count_left_for_many(self, right_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not right_ids:
            return {}
        stmt = (
            select(self.right_col, func.count())
            .where(self.right_col.in_(list(right_ids)))
            .group_by(self.right_col)
        )
        result = await self.db.execute(stmt)
        return {key: count for key, count in result.all()}

    async def exists(self, left_id: UUID, right_id: UUID) -> bool:
        result = await self.db.execute(self._pair(left_id, right_id).limit(1))
        return result.first() is not None

    async def any_for_right(self, right_id: UUID) -> bool:
        stmt = select(self.left_col).where(self.right_col == right_id).limit(1)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def _grouped(self, stmt: Select) -> dict[UUID, list[UUID]]:
        result = await self.db.execute(stmt)
        grouped: dict[UUID, list[UUID]] = defaultdict(list)
        for key, value in result.all():
            grouped[key].append(value)
        return dict(grouped)

    # ============================================================
    # WRITES
    # ============================================================

    async def insert(self, left_id: UUID, right_id: UUID) -> None:
        await self.db.execute(insert(self.model), [{self.left: left_id, self.right: right_id}])

    async def insert_many(self, left_id: UUID, right_ids: Sequence[UUID]) -> None:
        if not right_ids:
            return
        rows = [{self.left: left_id, self.right: rid} for rid in right_ids]
        await self.db.execute(insert(self.model), rows)

    async def delete_pair(self, left_id: UUID, right_id: UUID) -> int:
        stmt = delete(self.model).where(self.left_col == left_id, self.right_col == right_id)
        result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_many(self, left_id: UUID, right_ids: Sequence[UUID]) -> int:
        if not right_ids:
            return 0
        stmt = delete(self.model).where(
            self.left_col == left_id,
            self.right_col.in_(list(right_ids)),
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_all_for(self, left_id: UUID) -> int:
        result = await self.db.execute(delete(self.model).where(self.left_col == left_id))
        return result.rowcount


class UserRoleRepository(RelationRepository[UserRole]):
    model = UserRole
    left = "user_id"
    right = "role_id"


class RolePermissionRepository(RelationRepository[RolePermission]):
    model = RolePermission
    left = "role_id"
    right = "permission_id"


class ServiceVisibleRoleRepository(RelationRepository[ServiceVisibleRole]):
    model = ServiceVisibleRole
    left = "service_id"
    right = "role_id"
