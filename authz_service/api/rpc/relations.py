"""
Relation message patterns: id lookups and batch mutations.
"""

from authz_service.core.rpc import RpcContext, RpcRegistry
from authz_service.schemas.rpc import (
    ByServiceIdsPayload,
    PermissionIdPayload,
    PermissionIdsPayload,
    RoleIdPayload,
    RoleIdsPayload,
    RolePermissionPair,
    RolePermissionsPayload,
    ServiceIdPayload,
    ServiceRolePair,
    ServiceRolesPayload,
    UserIdPayload,
    UserIdsPayload,
    UserRolePair,
    UserRolesPayload,
)
from authz_service.services.relation import (
    RolePermissionService,
    ServiceVisibleRoleService,
    UserRoleService,
)


def _keyed(grouped: dict) -> dict[str, list]:
    return {str(key): ids for key, ids in grouped.items()}


# ============================================================
# USER ROLES
# ============================================================

@RpcRegistry.pattern("userRole.findRolesByUser", UserIdPayload)
async def find_roles_by_user(payload: UserIdPayload, ctx: RpcContext):
    return await UserRoleService(ctx.db).get_role_ids(payload.user_id)


@RpcRegistry.pattern("userRole.findUsersByRole", RoleIdPayload)
async def find_users_by_role(payload: RoleIdPayload, ctx: RpcContext):
    return await UserRoleService(ctx.db).get_user_ids(payload.role_id)


@RpcRegistry.pattern("userRole.findRolesByUsers", UserIdsPayload)
async def find_roles_by_users(payload: UserIdsPayload, ctx: RpcContext):
    return _keyed(await UserRoleService(ctx.db).get_role_ids_batch(payload.user_ids))


@RpcRegistry.pattern("userRole.findUsersByRoles", RoleIdsPayload)
async def find_users_by_roles(payload: RoleIdsPayload, ctx: RpcContext):
    return _keyed(await UserRoleService(ctx.db).get_user_ids_batch(payload.role_ids))


@RpcRegistry.pattern("userRole.exists", UserRolePair)
async def user_role_exists(payload: UserRolePair, ctx: RpcContext):
    return await UserRoleService(ctx.db).exists(payload.user_id, payload.role_id)


@RpcRegistry.pattern("userRole.assignMultiple", UserRolesPayload)
async def assign_user_roles(payload: UserRolesPayload, ctx: RpcContext):
    return await UserRoleService(ctx.db).assign_multiple(payload.user_id, payload.role_ids)


@RpcRegistry.pattern("userRole.revokeMultiple", UserRolesPayload)
async def revoke_user_roles(payload: UserRolesPayload, ctx: RpcContext):
    removed = await UserRoleService(ctx.db).revoke_multiple(payload.user_id, payload.role_ids)
    return {"revoked": removed}


@RpcRegistry.pattern("userRole.replaceRoles", UserRolesPayload)
async def replace_user_roles(payload: UserRolesPayload, ctx: RpcContext):
    return await UserRoleService(ctx.db).replace_all(payload.user_id, payload.role_ids)


# ============================================================
# ROLE PERMISSIONS
# ============================================================

@RpcRegistry.pattern("rolePermission.findPermissionsByRole", RoleIdPayload)
async def find_permissions_by_role(payload: RoleIdPayload, ctx: RpcContext):
    return await RolePermissionService(ctx.db).get_permission_ids(payload.role_id)


@RpcRegistry.pattern("rolePermission.findRolesByPermission", PermissionIdPayload)
async def find_roles_by_permission(payload: PermissionIdPayload, ctx: RpcContext):
    return await RolePermissionService(ctx.db).get_role_ids(payload.permission_id)


@RpcRegistry.pattern("rolePermission.findPermissionsByRoles", RoleIdsPayload)
async def find_permissions_by_roles(payload: RoleIdsPayload, ctx: RpcContext):
    return _keyed(await RolePermissionService(ctx.db).get_permission_ids_batch(payload.role_ids))


@RpcRegistry.pattern("rolePermission.findRolesByPermissions", PermissionIdsPayload)
async def find_roles_by_permissions(payload: PermissionIdsPayload, ctx: RpcContext):
    return _keyed(await RolePermissionService(ctx.db).get_role_ids_batch(payload.permission_ids))


@RpcRegistry.pattern("rolePermission.exists", RolePermissionPair)
async def role_permission_exists(payload: RolePermissionPair, ctx: RpcContext):
    return await RolePermissionService(ctx.db).exists(payload.role_id, payload.permission_id)


@RpcRegistry.pattern("rolePermission.assignMultiple", RolePermissionsPayload)
async def assign_role_permissions(payload: RolePermissionsPayload, ctx: RpcContext):
    return await RolePermissionService(ctx.db).assign_multiple(payload.role_id, payload.permission_ids)


@RpcRegistry.pattern("rolePermission.revokeMultiple", RolePermissionsPayload)
async def revoke_role_permissions(payload: RolePermissionsPayload, ctx: RpcContext):
    removed = await RolePermissionService(ctx.db).revoke_multiple(payload.role_id, payload.permission_ids)
    return {"revoked": removed}


@RpcRegistry.pattern("rolePermission.replacePermissions", RolePermissionsPayload)
async def replace_role_permissions(payload: RolePermissionsPayload, ctx: RpcContext):
    return await RolePermissionService(ctx.db).replace_all(payload.role_id, payload.permission_ids)


# ============================================================
# SERVICE VISIBLE ROLES
# ============================================================

@RpcRegistry.pattern("serviceVisibleRole.findRolesByService", ServiceIdPayload)
async def find_roles_by_service(payload: ServiceIdPayload, ctx: RpcContext):
    return await ServiceVisibleRoleService(ctx.db).get_role_ids(payload.service_id)


@RpcRegistry.pattern("serviceVisibleRole.findServicesByRole", RoleIdPayload)
async def find_services_by_role(payload: RoleIdPayload, ctx: RpcContext):
    return await ServiceVisibleRoleService(ctx.db).get_service_ids(payload.role_id)


@RpcRegistry.pattern("serviceVisibleRole.findRolesByServices", ByServiceIdsPayload)
async def find_roles_by_services(payload: ByServiceIdsPayload, ctx: RpcContext):
    return _keyed(await ServiceVisibleRoleService(ctx.db).get_role_ids_batch(payload.service_ids))


@RpcRegistry.pattern("serviceVisibleRole.findServicesByRoles", RoleIdsPayload)
async def find_services_by_roles(payload: RoleIdsPayload, ctx: RpcContext):
    return _keyed(await ServiceVisibleRoleService(ctx.db).get_service_ids_batch(payload.role_ids))


@RpcRegistry.pattern("serviceVisibleRole.findServiceCountsBatch", RoleIdsPayload)
async def find_service_counts(payload: RoleIdsPayload, ctx: RpcContext):
    counts = await ServiceVisibleRoleService(ctx.db).count_left_batch(payload.role_ids)
    return {str(role_id): count for role_id, count in counts.items()}


@RpcRegistry.pattern("serviceVisibleRole.exists", ServiceRolePair)
async def service_role_exists(payload: ServiceRolePair, ctx: RpcContext):
    return await ServiceVisibleRoleService(ctx.db).exists(payload.service_id, payload.role_id)


@RpcRegistry.pattern("serviceVisibleRole.assignMultiple", ServiceRolesPayload)
async def assign_service_roles(payload: ServiceRolesPayload, ctx: RpcContext):
    return await ServiceVisibleRoleService(ctx.db).assign_multiple(payload.service_id, payload.role_ids)


@RpcRegistry.pattern("serviceVisibleRole.revokeMultiple", ServiceRolesPayload)
async def revoke_service_roles(payload: ServiceRolesPayload, ctx: RpcContext):
    removed = await ServiceVisibleRoleService(ctx.db).revoke_multiple(payload.service_id, payload.role_ids)
    return {"revoked": removed}


@RpcRegistry.pattern("serviceVisibleRole.replaceRoles", ServiceRolesPayload)
async def replace_service_roles(payload: ServiceRolesPayload, ctx: RpcContext):
    return await ServiceVisibleRoleService(ctx.db).replace_all(payload.service_id, payload.role_ids)
