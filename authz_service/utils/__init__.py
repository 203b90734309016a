"""Utility functions."""

from authz_service.utils.pagination import (
    SortOrder,
    PageParams,
    PageInfo,
    Page,
    paginate,
)

__all__ = [
    "SortOrder",
    "PageParams",
    "PageInfo",
    "Page",
    "paginate",
]
