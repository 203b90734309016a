"""
Role and permission lookup patterns.

Entities are returned as their plain response models; these are the lookups
sibling services make, not the enriched admin views.
"""

from authz_service.core.rpc import RpcContext, RpcRegistry
from authz_service.schemas.permission import PermissionResponse
from authz_service.schemas.role import RoleResponse
from authz_service.schemas.rpc import ByServiceIdsPayload, EntityIdPayload, EntityIdsPayload
from authz_service.services.permission import PermissionService
from authz_service.services.role import RoleService


@RpcRegistry.pattern("role.findById", EntityIdPayload)
async def find_role(payload: EntityIdPayload, ctx: RpcContext):
    role = await RoleService(ctx.db).find_by_id_or_fail(payload.id)
    return RoleResponse.model_validate(role)


@RpcRegistry.pattern("role.findByIds", EntityIdsPayload)
async def find_roles(payload: EntityIdsPayload, ctx: RpcContext):
    roles = await RoleService(ctx.db).find_by_ids(payload.ids)
    return [RoleResponse.model_validate(role) for role in roles]


@RpcRegistry.pattern("role.findByServiceIds", ByServiceIdsPayload)
async def find_roles_by_service(payload: ByServiceIdsPayload, ctx: RpcContext):
    roles = await RoleService(ctx.db).find_by_service_ids(payload.service_ids)
    return [RoleResponse.model_validate(role) for role in roles]


@RpcRegistry.pattern("permission.findById", EntityIdPayload)
async def find_permission(payload: EntityIdPayload, ctx: RpcContext):
    permission = await PermissionService(ctx.db).find_by_id_or_fail(payload.id)
    return PermissionResponse.model_validate(permission)


@RpcRegistry.pattern("permission.findByIds", EntityIdsPayload)
async def find_permissions(payload: EntityIdsPayload, ctx: RpcContext):
    permissions = await PermissionService(ctx.db).find_by_ids(payload.ids)
    return [PermissionResponse.model_validate(p) for p in permissions]


@RpcRegistry.pattern("permission.findByServiceIds", ByServiceIdsPayload)
async def find_permissions_by_service(payload: ByServiceIdsPayload, ctx: RpcContext):
    permissions = await PermissionService(ctx.db).find_by_service_ids(payload.service_ids)
    return [PermissionResponse.model_validate(p) for p in permissions]
