"""
Role routes.
"""

from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from authz_service.api.dependencies.services import get_role_service
from authz_service.schemas.role import (
    RoleCreate,
    RoleDetail,
    RoleResponse,
    RoleSearchQuery,
    RoleSearchResult,
    RoleUpdate,
)
from authz_service.services.role import RoleService
from authz_service.utils.pagination import Page

router = APIRouter()


@router.get("", response_model=Page[RoleSearchResult])
async def search_roles(
    query: Annotated[RoleSearchQuery, Query()],
    role_service: RoleService = Depends(get_role_service),
):
    """Search roles with user counts and owning services."""
    return await role_service.search(query)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    role_service: RoleService = Depends(get_role_service),
):
    """Create a new role."""
    role = await role_service.create(data)
    return RoleResponse.model_validate(role)


@router.get("/{role_id}", response_model=RoleDetail)
async def get_role(
    role_id: UUID,
    role_service: RoleService = Depends(get_role_service),
):
    """Get role with its service and users."""
    return await role_service.get_detail(role_id)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    role_service: RoleService = Depends(get_role_service),
):
    """Update role."""
    role = await role_service.update(role_id, data)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: UUID,
    role_service: RoleService = Depends(get_role_service),
):
    """Delete role. Refused while users hold it."""
    await role_service.delete(role_id)
