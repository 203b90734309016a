"""
Base repository for soft-deletable entities.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Sequence, Type, TypeVar
from uuid import UUID
from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class SoftDeleteRepository(Generic[ModelT]):
    """
    Common reads and writes for entities using SoftDeleteMixin.

    Soft-deleted rows are excluded from every query.

    Usage:
        class RoleRepository(SoftDeleteRepository[Role]):
            model = Role

        repo = RoleRepository(db)
        role = await repo.get_by_id(role_id)
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self) -> Select:
        return select(self.model).where(self.model.deleted_at.is_(None))

    def _filtered(self, filters: dict[str, Any], exclude_id: UUID | None = None) -> Select:
        stmt = self._base_query()
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return stmt

    async def get_by_id(self, id: UUID) -> ModelT | None:
        stmt = self._base_query().where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(
        self,
        ids: Sequence[UUID],
        order_by: Any | None = None,
    ) -> list[ModelT]:
        """Single IN query; an empty id list returns [] without touching the database."""
        if not ids:
            return []
        stmt = self._base_query().where(self.model.id.in_(list(ids)))
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def live_ids(self, ids: Sequence[UUID]) -> set[UUID]:
        """The subset of ids that exist and are not soft-deleted."""
        if not ids:
            return set()
        stmt = select(self.model.id).where(
            self.model.id.in_(list(ids)),
            self.model.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def find_one(self, exclude_id: UUID | None = None, **filters: Any) -> ModelT | None:
        stmt = self._filtered(filters, exclude_id).limit(1)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def find_all(self, **filters: Any) -> list[ModelT]:
        """All live rows matching equality filters; None values are ignored."""
        stmt = self._filtered({k: v for k, v in filters.items() if v is not None})
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_in(self, field: str, values: Sequence[Any]) -> list[ModelT]:
        if not values:
            return []
        stmt = self._base_query().where(getattr(self.model, field).in_(list(values)))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, exclude_id: UUID | None = None, **filters: Any) -> bool:
        stmt = select(func.count()).select_from(self._filtered(filters, exclude_id).subquery())
        count = await self.db.scalar(stmt)
        return (count or 0) > 0

    async def create(self, **data: Any) -> ModelT:
        entity = self.model(**data)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity: ModelT, **data: Any) -> ModelT:
        for field, value in data.items():
            if hasattr(entity, field):
                setattr(entity, field, value)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def soft_delete(self, entity: ModelT) -> None:
        entity.deleted_at = datetime.now(timezone.utc)
        await self.db.flush()
