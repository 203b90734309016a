"""
Relation routes.

All three relations share one layout, e.g. for user roles:

    GET    /users/{left_id}/roles                     role ids of a user
    GET    /roles/{right_id}/users                    user ids holding a role
    GET    /users/{left_id}/roles/{right_id}/exists
    POST   /users/{left_id}/roles/batch               {ids} -> BatchAssignmentResult
    DELETE /users/{left_id}/roles/batch               {ids}
    POST   /users/{left_id}/roles/{right_id}
    DELETE /users/{left_id}/roles/{right_id}
    PUT    /users/{left_id}/roles                     {ids}, replaces the whole set
"""

from typing import Any, Callable
from uuid import UUID
from fastapi import APIRouter, Depends, status

from authz_service.api.dependencies.services import (
    get_role_permission_service,
    get_service_visible_role_service,
    get_user_role_service,
)
from authz_service.schemas.relation import BatchAssignmentResult, ExistsResponse, IdList
from authz_service.services.relation import RelationService


def build_relation_router(
    left: str,
    right: str,
    get_service: Callable[..., Any],
) -> APIRouter:
    """
    Routes for one relation.

    /batch routes are registered before /{right_id} so "batch" is never
    parsed as an id.
    """
    router = APIRouter()
    owned = f"/{left}/{{left_id}}/{right}"

    @router.get(owned, response_model=list[UUID], name=f"list_{right}_of_{left}")
    async def get_right_ids(left_id: UUID, service: RelationService = Depends(get_service)):
        return await service.get_right_ids(left_id)

    @router.get(f"/{right}/{{right_id}}/{left}", response_model=list[UUID], name=f"list_{left}_of_{right}")
    async def get_left_ids(right_id: UUID, service: RelationService = Depends(get_service)):
        return await service.get_left_ids(right_id)

    @router.get(f"{owned}/{{right_id}}/exists", response_model=ExistsResponse, name=f"{left}_{right}_exists")
    async def exists(left_id: UUID, right_id: UUID, service: RelationService = Depends(get_service)):
        return ExistsResponse(exists=await service.exists(left_id, right_id))

    @router.post(f"{owned}/batch", response_model=BatchAssignmentResult, name=f"assign_{right}_batch")
    async def assign_multiple(
        left_id: UUID,
        data: IdList,
        service: RelationService = Depends(get_service),
    ):
        return await service.assign_multiple(left_id, data.ids)

    @router.delete(f"{owned}/batch", status_code=status.HTTP_204_NO_CONTENT, name=f"revoke_{right}_batch")
    async def revoke_multiple(
        left_id: UUID,
        data: IdList,
        service: RelationService = Depends(get_service),
    ):
        await service.revoke_multiple(left_id, data.ids)

    @router.post(f"{owned}/{{right_id}}", status_code=status.HTTP_204_NO_CONTENT, name=f"assign_{right}")
    async def assign(left_id: UUID, right_id: UUID, service: RelationService = Depends(get_service)):
        await service.assign(left_id, right_id)

    @router.delete(f"{owned}/{{right_id}}", status_code=status.HTTP_204_NO_CONTENT, name=f"revoke_{right}")
    async def revoke(left_id: UUID, right_id: UUID, service: RelationService = Depends(get_service)):
        await service.revoke(left_id, right_id)

    @router.put(owned, status_code=status.HTTP_204_NO_CONTENT, name=f"replace_{right}")
    async def replace_all(
        left_id: UUID,
        data: IdList,
        service: RelationService = Depends(get_service),
    ):
        await service.replace_all(left_id, data.ids)

    return router


user_roles_router = build_relation_router("users", "roles", get_user_role_service)
role_permissions_router = build_relation_router("roles", "permissions", get_role_permission_service)
service_visible_roles_router = build_relation_router("services", "roles", get_service_visible_role_service)
