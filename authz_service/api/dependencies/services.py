"""
Service dependencies.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .database import get_db, get_session_factory
from authz_service.clients.directory import (
    HttpServiceDirectory,
    HttpUserDirectory,
    RpcClient,
    ServiceDirectory,
    UserDirectory,
)
from authz_service.core.config import settings
from authz_service.services.authorization import AuthorizationService
from authz_service.services.permission import PermissionService
from authz_service.services.relation import (
    RolePermissionService,
    ServiceVisibleRoleService,
    UserRoleService,
)
from authz_service.services.role import RoleService


@lru_cache
def get_service_directory() -> ServiceDirectory:
    """Portal service client, shared for the life of the process."""
    client = RpcClient(
        settings.directory.portal_url,
        target="portal_service",
        timeout=settings.directory.timeout,
    )
    return HttpServiceDirectory(client)


@lru_cache
def get_user_directory() -> UserDirectory:
    """Auth service client, shared for the life of the process."""
    client = RpcClient(
        settings.directory.auth_url,
        target="auth_service",
        timeout=settings.directory.timeout,
    )
    return HttpUserDirectory(client)


async def close_directories() -> None:
    """Close directory clients that were created."""
    for factory in (get_service_directory, get_user_directory):
        if factory.cache_info().currsize:
            await factory().client.aclose()
            factory.cache_clear()


async def get_authorization_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    service_directory: ServiceDirectory = Depends(get_service_directory),
) -> AuthorizationService:
    """Get decision engine instance."""
    return AuthorizationService(
        session_factory,
        service_directory,
        use_joined_query=settings.authz.use_joined_permission_query,
    )


async def get_role_service(
    db: AsyncSession = Depends(get_db),
    service_directory: ServiceDirectory = Depends(get_service_directory),
    user_directory: UserDirectory = Depends(get_user_directory),
) -> RoleService:
    """Get role service instance."""
    return RoleService(db, service_directory, user_directory)


async def get_permission_service(
    db: AsyncSession = Depends(get_db),
    service_directory: ServiceDirectory = Depends(get_service_directory),
) -> PermissionService:
    """Get permission service instance."""
    return PermissionService(db, service_directory)


async def get_user_role_service(db: AsyncSession = Depends(get_db)) -> UserRoleService:
    return UserRoleService(db)


async def get_role_permission_service(db: AsyncSession = Depends(get_db)) -> RolePermissionService:
    return RolePermissionService(db)


async def get_service_visible_role_service(
    db: AsyncSession = Depends(get_db),
) -> ServiceVisibleRoleService:
    return ServiceVisibleRoleService(db)
