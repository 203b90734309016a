"""
API routes aggregation.
"""

from fastapi import APIRouter

from .authorization import router as authorization_router
from .roles import router as roles_router
from .permissions import router as permissions_router
from .relations import (
    user_roles_router,
    role_permissions_router,
    service_visible_roles_router,
)
from .rpc import router as rpc_router

router = APIRouter()

router.include_router(authorization_router, prefix="/authorization", tags=["authorization"])
router.include_router(roles_router, prefix="/roles", tags=["roles"])
router.include_router(permissions_router, prefix="/permissions", tags=["permissions"])
router.include_router(user_roles_router, prefix="/user-roles", tags=["user-roles"])
router.include_router(role_permissions_router, prefix="/role-permissions", tags=["role-permissions"])
router.include_router(
    service_visible_roles_router,
    prefix="/service-visible-roles",
    tags=["service-visible-roles"],
)

__all__ = ["router", "rpc_router"]
