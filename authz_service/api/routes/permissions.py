"""
Permission routes.
"""

from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from authz_service.api.dependencies.services import get_permission_service
from authz_service.schemas.permission import (
    PermissionCreate,
    PermissionDetail,
    PermissionResponse,
    PermissionSearchQuery,
    PermissionSearchResult,
    PermissionUpdate,
)
from authz_service.services.permission import PermissionService
from authz_service.utils.pagination import Page

router = APIRouter()


@router.get("", response_model=Page[PermissionSearchResult])
async def search_permissions(
    query: Annotated[PermissionSearchQuery, Query()],
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Search permissions with role counts and owning services."""
    return await permission_service.search(query)


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Create a new permission."""
    permission = await permission_service.create(data)
    return PermissionResponse.model_validate(permission)


@router.get("/{permission_id}", response_model=PermissionDetail)
async def get_permission(
    permission_id: UUID,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Get permission with its service and granting roles."""
    return await permission_service.get_detail(permission_id)


@router.patch("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: UUID,
    data: PermissionUpdate,
    permission_service: PermissionService = Depends(get_permission_service),
):
    permission = await permission_service.update(permission_id, data)
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: UUID,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Delete permission. Refused while roles grant it."""
    await permission_service.delete(permission_id)
