"""
Authorization message patterns.
"""

from authz_service.core.rpc import RpcContext, RpcRegistry
from authz_service.schemas.authorization import (
    CheckPermissionRequest,
    CheckRoleRequest,
    ComplexCheckRequest,
    UserRequest,
    UserScopeRequest,
)


@RpcRegistry.pattern("authorization.checkPermission", CheckPermissionRequest)
async def check_permission(payload: CheckPermissionRequest, ctx: RpcContext):
    granted = await ctx.engine.check_permission(payload.user_id, payload.action, payload.service_id)
    return {"has_permission": granted}


@RpcRegistry.pattern("authorization.checkRole", CheckRoleRequest)
async def check_role(payload: CheckRoleRequest, ctx: RpcContext):
    has_role = await ctx.engine.check_role(payload.user_id, payload.role_name, payload.service_id)
    return {"has_role": has_role}


@RpcRegistry.pattern("authorization.checkComplex", ComplexCheckRequest)
async def check_complex(payload: ComplexCheckRequest, ctx: RpcContext):
    return {"allowed": await ctx.engine.check_complex_permission(payload)}


@RpcRegistry.pattern("authorization.getUserPermissions", UserScopeRequest)
async def get_user_permissions(payload: UserScopeRequest, ctx: RpcContext):
    return await ctx.engine.get_user_permissions(payload.user_id, payload.service_id)


@RpcRegistry.pattern("authorization.getUserPermissionActions", UserScopeRequest)
async def get_user_permission_actions(payload: UserScopeRequest, ctx: RpcContext):
    return await ctx.engine.get_user_permission_actions(payload.user_id, payload.service_id)


@RpcRegistry.pattern("authorization.getUserRoles", UserScopeRequest)
async def get_user_roles(payload: UserScopeRequest, ctx: RpcContext):
    return await ctx.engine.get_user_roles(payload.user_id, payload.service_id)


@RpcRegistry.pattern("authorization.getUserRoleNames", UserScopeRequest)
async def get_user_role_names(payload: UserScopeRequest, ctx: RpcContext):
    return await ctx.engine.get_user_role_names(payload.user_id, payload.service_id)


@RpcRegistry.pattern("authorization.getAvailableServices", UserRequest)
async def get_available_services(payload: UserRequest, ctx: RpcContext):
    return await ctx.engine.get_available_services(payload.user_id)
