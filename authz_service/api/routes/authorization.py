"""
Authorization decision routes.

Decisions never fail: any internal error is already a denial or an empty
list by the time it reaches here.
"""

from uuid import UUID
from fastapi import APIRouter, Depends

from authz_service.api.dependencies.services import get_authorization_service
from authz_service.schemas.authorization import (
    CheckPermissionRequest,
    CheckPermissionResponse,
    CheckRoleRequest,
    CheckRoleResponse,
    ComplexCheckRequest,
    ComplexCheckResponse,
)
from authz_service.schemas.directory import Service
from authz_service.services.authorization import AuthorizationService

router = APIRouter()


@router.post("/check-permission", response_model=CheckPermissionResponse)
async def check_permission(
    data: CheckPermissionRequest,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Check whether a user may perform an action, optionally within one service."""
    granted = await engine.check_permission(data.user_id, data.action, data.service_id)
    return CheckPermissionResponse(has_permission=granted)


@router.post("/check-role", response_model=CheckRoleResponse)
async def check_role(
    data: CheckRoleRequest,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Check whether a user holds a role by name (case-insensitive)."""
    has_role = await engine.check_role(data.user_id, data.role_name, data.service_id)
    return CheckRoleResponse(has_role=has_role)


@router.post("/check-complex", response_model=ComplexCheckResponse)
async def check_complex(
    data: ComplexCheckRequest,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Combined permission and role check with AND/OR operators."""
    allowed = await engine.check_complex_permission(data)
    return ComplexCheckResponse(allowed=allowed)


@router.get("/users/{user_id}/permissions", response_model=list[UUID])
async def get_user_permissions(
    user_id: UUID,
    service_id: UUID | None = None,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Effective permission ids for a user."""
    return await engine.get_user_permissions(user_id, service_id)


@router.get("/users/{user_id}/permission-actions", response_model=list[str])
async def get_user_permission_actions(
    user_id: UUID,
    service_id: UUID | None = None,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    return await engine.get_user_permission_actions(user_id, service_id)


@router.get("/users/{user_id}/roles", response_model=list[UUID])
async def get_user_roles(
    user_id: UUID,
    service_id: UUID | None = None,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Effective role ids for a user."""
    return await engine.get_user_roles(user_id, service_id)


@router.get("/users/{user_id}/role-names", response_model=list[str])
async def get_user_role_names(
    user_id: UUID,
    service_id: UUID | None = None,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    return await engine.get_user_role_names(user_id, service_id)


@router.get("/users/{user_id}/services", response_model=list[Service])
async def get_available_services(
    user_id: UUID,
    engine: AuthorizationService = Depends(get_authorization_service),
):
    """Services visible to a user. Empty when the portal service is unavailable."""
    return await engine.get_available_services(user_id)
