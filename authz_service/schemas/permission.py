"""
Permission schemas.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from authz_service.schemas.directory import ServiceSummary
from authz_service.schemas.role import RoleResponse
from authz_service.utils.pagination import PageParams

# "resource:verb", e.g. user:create, report:export-csv
ACTION_PATTERN = r"^[a-z0-9_-]+(:[a-z0-9_*-]+)+$"


class PermissionCreate(BaseModel):
    """Permission creation schema."""
    action: str = Field(min_length=3, max_length=100, pattern=ACTION_PATTERN)
    description: str | None = Field(None, max_length=255)
    service_id: UUID


class PermissionUpdate(BaseModel):
    """Permission update schema."""
    action: str | None = Field(None, min_length=3, max_length=100, pattern=ACTION_PATTERN)
    description: str | None = Field(None, max_length=255)


class PermissionFilter(BaseModel):
    action: str | None = None
    description: str | None = None
    service_id: UUID | None = None


class PermissionSortField(str, Enum):
    CREATED_AT = "created_at"
    ACTION = "action"


class PermissionSearchQuery(PageParams):
    action: str | None = Field(None, max_length=100, description="Substring match")
    description: str | None = Field(None, max_length=255, description="Substring match")
    service_id: UUID | None = None
    sort_by: PermissionSortField = PermissionSortField.CREATED_AT


class PermissionResponse(BaseModel):
    """Permission response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    action: str
    description: str | None = None
    service_id: UUID
    created_at: datetime | None = None


class PermissionSearchResult(BaseModel):
    id: UUID
    action: str
    description: str | None = None
    role_count: int
    service: ServiceSummary


class PermissionDetail(BaseModel):
    id: UUID
    action: str
    description: str | None = None
    service: ServiceSummary
    roles: list[RoleResponse]
