"""
Offset pagination for search endpoints.

Usage:
    GET /api/roles?page=2&limit=15&sort_by=name&sort_order=asc

    page = await paginate(db, select(Role), params, order_column=Role.name)
    page.items, page.page_info.total_pages
"""

from enum import Enum
from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PageParams(BaseModel):
    """Offset pagination parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=15, ge=1, le=100, description="Items per page")
    sort_order: SortOrder = Field(default=SortOrder.DESC)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageInfo(BaseModel):
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def create(cls, total: int, page: int, limit: int) -> "PageInfo":
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(
            page=page,
            limit=limit,
            total_items=total,
            total_pages=pages,
            has_previous_page=page > 1,
            has_next_page=page < pages,
        )


class Page(BaseModel, Generic[T]):
    """Paginated response."""

    items: list[T]
    page_info: PageInfo

    @classmethod
    def create(cls, items: Sequence[T], page_info: PageInfo) -> "Page[T]":
        return cls(items=list(items), page_info=page_info)


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PageParams,
    order_column: Any,
    id_column: Any | None = None,
) -> tuple[list[Any], PageInfo]:
    """
    Run a count and a page query for ``query``.

    Returns the ORM rows (not yet converted to response models) and the page
    info, so callers can enrich the rows before building a Page.
    """
    count_query = select(func.count()).select_from(query.subquery())
    total = await db.scalar(count_query) or 0

    ordering = [order_column.desc() if params.sort_order == SortOrder.DESC else order_column.asc()]
    if id_column is not None:
        # Stable ordering across pages when sort values tie
        ordering.append(id_column.asc())

    result = await db.execute(
        query.order_by(*ordering).offset(params.offset).limit(params.limit)
    )
    items = list(result.scalars().all())

    return items, PageInfo.create(total=total, page=params.page, limit=params.limit)
