"""
Role schemas.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from authz_service.schemas.directory import ServiceSummary, User
from authz_service.utils.pagination import PageParams


class RoleCreate(BaseModel):
    """Role creation schema."""
    name: str = Field(min_length=2, max_length=50)
    description: str | None = Field(None, max_length=255)
    priority: int = Field(5, ge=1, le=10, description="1 = highest")
    service_id: UUID


class RoleUpdate(BaseModel):
    """Role update schema."""
    name: str | None = Field(None, min_length=2, max_length=50)
    description: str | None = Field(None, max_length=255)
    priority: int | None = Field(None, ge=1, le=10)


class RoleFilter(BaseModel):
    """Exact-match AND filter; unset fields are ignored."""
    name: str | None = None
    description: str | None = None
    priority: int | None = None
    service_id: UUID | None = None


class RoleSortField(str, Enum):
    CREATED_AT = "created_at"
    NAME = "name"
    PRIORITY = "priority"


class RoleSearchQuery(PageParams):
    name: str | None = Field(None, max_length=50, description="Substring match")
    service_id: UUID | None = None
    sort_by: RoleSortField = RoleSortField.CREATED_AT


class RoleResponse(BaseModel):
    """Role response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    priority: int
    service_id: UUID
    created_at: datetime | None = None


class RoleSearchResult(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    priority: int
    user_count: int
    service: ServiceSummary


class RoleDetail(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    priority: int
    service: ServiceSummary
    users: list[User]
