"""
Authorization decision engine.

Answers "may this user do X (in service S)?" by walking
user -> roles -> permissions, restricted to the roles visible in S when a
service is given. Every public method fails closed: a store or directory
failure is logged and becomes a denial or an empty list, never an exception.

The engine holds no request state. Each read opens its own short-lived
session from the injected factory so independent reads can run concurrently.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, Sequence, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz_service.clients.directory import ServiceDirectory
from authz_service.core.exceptions import DirectoryError
from authz_service.repositories.permission import PermissionRepository
from authz_service.schemas.authorization import ComplexCheckRequest, Operator
from authz_service.schemas.directory import Service
from authz_service.schemas.permission import PermissionFilter
from authz_service.services.permission import PermissionService
from authz_service.services.relation import (
    RolePermissionService,
    ServiceVisibleRoleService,
    UserRoleService,
)
from authz_service.services.role import RoleService

logger = structlog.get_logger()

T = TypeVar("T")


def _ordered_union(groups: Iterable[Sequence[UUID]]) -> list[UUID]:
    seen: dict[UUID, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return list(seen)


def _uuid_or_none(value: str) -> UUID | None:
    try:
        return UUID(str(value))
    except ValueError:
        return None


class AuthorizationService:
    """
    Stateless RBAC decisions.

    Usage:
        engine = AuthorizationService(async_session_factory, service_directory)
        allowed = await engine.check_permission(user_id, "user:create", service_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        service_directory: ServiceDirectory | None = None,
        use_joined_query: bool = True,
    ):
        self.session_factory = session_factory
        self.service_directory = service_directory
        self.use_joined_query = use_joined_query

    async def _read(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            return await fn(session)

    # ============================================================
    # TRAVERSAL STEPS
    # ============================================================

    async def _user_role_ids(self, user_id: UUID) -> list[UUID]:
        """Roles assigned to the user, minus soft-deleted ones."""

        async def read(session: AsyncSession) -> list[UUID]:
            role_ids = await UserRoleService(session).get_role_ids(user_id)
            live = await RoleService(session).find_live_ids(role_ids)
            return [role_id for role_id in role_ids if role_id in live]

        return await self._read(read)

    async def _visible_role_ids(self, service_id: UUID) -> list[UUID]:
        return await self._read(lambda s: ServiceVisibleRoleService(s).get_role_ids(service_id))

    async def _effective_role_ids(self, user_id: UUID, service_id: UUID | None) -> list[UUID]:
        """
        The user's roles, intersected with the service's visible roles when a
        service is given. Both lookups run concurrently.
        """
        if service_id is None:
            return await self._user_role_ids(user_id)

        user_role_ids, visible_role_ids = await asyncio.gather(
            self._user_role_ids(user_id),
            self._visible_role_ids(service_id),
        )
        if not user_role_ids:
            return []

        visible = set(visible_role_ids)
        effective = [role_id for role_id in user_role_ids if role_id in visible]
        if not effective:
            logger.debug(
                "No visible roles for user in service",
                user_id=str(user_id),
                service_id=str(service_id),
                user_role_count=len(user_role_ids),
            )
        return effective

    async def _permission_ids(self, role_ids: Sequence[UUID]) -> list[UUID]:
        if not role_ids:
            return []
        by_role = await self._read(
            lambda s: RolePermissionService(s).get_permission_ids_batch(role_ids)
        )
        return _ordered_union(by_role.values())

    # ============================================================
    # PERMISSION CHECK
    # ============================================================

    async def check_permission(
        self,
        user_id: UUID,
        action: str,
        service_id: UUID | None = None,
    ) -> bool:
        """Whether the user holds a permission with exactly this action (in the service)."""
        ids = {
            "user_id": str(user_id),
            "action": action,
            "service_id": str(service_id) if service_id else None,
        }
        try:
            granted = await self._check_permission(user_id, action, service_id)
        except Exception as e:
            logger.error("Permission check failed, denying", error=str(e), **ids)
            return False

        logger.debug("Permission granted" if granted else "Permission denied", **ids)
        return granted

    async def _check_permission(self, user_id: UUID, action: str, service_id: UUID | None) -> bool:
        if service_id is not None and self.use_joined_query:
            granted = await self._check_permission_joined(user_id, action, service_id)
            if granted is not None:
                return granted
        return await self._check_permission_stepwise(user_id, action, service_id)

    async def _check_permission_joined(
        self,
        user_id: UUID,
        action: str,
        service_id: UUID,
    ) -> bool | None:
        """One joined query; None means it failed and the stepwise path should run."""
        try:
            return await self._read(
                lambda s: PermissionRepository(s).is_granted_in_service(user_id, action, service_id)
            )
        except SQLAlchemyError as e:
            logger.warning(
                "Joined permission query failed, using stepwise check",
                user_id=str(user_id),
                action=action,
                service_id=str(service_id),
                error=str(e),
            )
            return None

    async def _check_permission_stepwise(
        self,
        user_id: UUID,
        action: str,
        service_id: UUID | None,
    ) -> bool:
        role_ids = await self._effective_role_ids(user_id, service_id)
        if not role_ids:
            return False

        permission_ids = set(await self._permission_ids(role_ids))
        if not permission_ids:
            logger.debug("No permissions for user roles", user_id=str(user_id), role_count=len(role_ids))
            return False

        candidates = await self._read(
            lambda s: PermissionService(s).find_by(
                PermissionFilter(action=action, service_id=service_id)
            )
        )
        # Membership and field match are both required
        return any(
            p.id in permission_ids
            and p.action == action
            and (service_id is None or p.service_id == service_id)
            for p in candidates
        )

    # ============================================================
    # ROLE CHECK
    # ============================================================

    async def check_role(
        self,
        user_id: UUID,
        role_name: str,
        service_id: UUID | None = None,
    ) -> bool:
        """Whether one of the user's effective roles is named role_name (case-insensitive)."""
        ids = {
            "user_id": str(user_id),
            "role_name": role_name,
            "service_id": str(service_id) if service_id else None,
        }
        try:
            role_ids = await self._effective_role_ids(user_id, service_id)
            if not role_ids:
                logger.debug("Role denied, no effective roles", **ids)
                return False
            roles = await self._read(lambda s: RoleService(s).find_by_ids(role_ids))
        except Exception as e:
            logger.error("Role check failed, denying", error=str(e), **ids)
            return False

        wanted = role_name.lower()
        matching = [role for role in roles if role.name.lower() == wanted]
        if matching:
            logger.debug("Role granted", matched=[str(role.id) for role in matching], **ids)
            return True

        logger.debug("Role denied", checked=len(roles), **ids)
        return False

    # ============================================================
    # LISTINGS
    # ============================================================

    async def get_user_permissions(self, user_id: UUID, service_id: UUID | None = None) -> list[UUID]:
        """De-duplicated permission ids granted by the user's effective roles."""
        try:
            role_ids = await self._effective_role_ids(user_id, service_id)
            permission_ids = await self._permission_ids(role_ids)
        except Exception as e:
            logger.error(
                "User permissions lookup failed",
                user_id=str(user_id),
                service_id=str(service_id) if service_id else None,
                error=str(e),
            )
            return []

        logger.debug(
            "User permissions retrieved",
            user_id=str(user_id),
            service_id=str(service_id) if service_id else None,
            role_count=len(role_ids),
            permission_count=len(permission_ids),
        )
        return permission_ids

    async def get_user_roles(self, user_id: UUID, service_id: UUID | None = None) -> list[UUID]:
        """The user's effective role ids."""
        try:
            role_ids = await self._effective_role_ids(user_id, service_id)
        except Exception as e:
            logger.error(
                "User roles lookup failed",
                user_id=str(user_id),
                service_id=str(service_id) if service_id else None,
                error=str(e),
            )
            return []

        logger.debug(
            "User roles retrieved",
            user_id=str(user_id),
            service_id=str(service_id) if service_id else None,
            role_count=len(role_ids),
        )
        return role_ids

    async def get_user_role_names(self, user_id: UUID, service_id: UUID | None = None) -> list[str]:
        role_ids = await self.get_user_roles(user_id, service_id)
        if not role_ids:
            return []
        try:
            roles = await self._read(lambda s: RoleService(s).find_by_ids(role_ids))
        except Exception as e:
            logger.error("User role names lookup failed", user_id=str(user_id), error=str(e))
            return []
        return [role.name for role in roles]

    async def get_user_permission_actions(
        self,
        user_id: UUID,
        service_id: UUID | None = None,
    ) -> list[str]:
        permission_ids = await self.get_user_permissions(user_id, service_id)
        if not permission_ids:
            return []
        try:
            permissions = await self._read(lambda s: PermissionService(s).find_by_ids(permission_ids))
        except Exception as e:
            logger.error("User permission actions lookup failed", user_id=str(user_id), error=str(e))
            return []
        return list(dict.fromkeys(p.action for p in permissions))

    # ============================================================
    # COMBINED CHECKS
    # ============================================================

    async def has_any_permission(
        self,
        user_id: UUID,
        actions: Sequence[str],
        service_id: UUID | None = None,
    ) -> bool:
        if not actions:
            return True
        results = await asyncio.gather(
            *(self.check_permission(user_id, action, service_id) for action in actions)
        )
        return any(results)

    async def has_all_permissions(
        self,
        user_id: UUID,
        actions: Sequence[str],
        service_id: UUID | None = None,
    ) -> bool:
        if not actions:
            return True
        results = await asyncio.gather(
            *(self.check_permission(user_id, action, service_id) for action in actions)
        )
        return all(results)

    async def has_any_role(
        self,
        user_id: UUID,
        role_names: Sequence[str],
        service_id: UUID | None = None,
    ) -> bool:
        if not role_names:
            return True
        results = await asyncio.gather(
            *(self.check_role(user_id, name, service_id) for name in role_names)
        )
        return any(results)

    async def has_all_roles(
        self,
        user_id: UUID,
        role_names: Sequence[str],
        service_id: UUID | None = None,
    ) -> bool:
        if not role_names:
            return True
        results = await asyncio.gather(
            *(self.check_role(user_id, name, service_id) for name in role_names)
        )
        return all(results)

    async def check_complex_permission(self, check: ComplexCheckRequest) -> bool:
        """
        Permission and role requirements combined with AND/OR.

        An empty permission or role list counts as satisfied.
        """
        if check.permission_operator == Operator.OR:
            permission_ok = await self.has_any_permission(check.user_id, check.permissions, check.service_id)
        else:
            permission_ok = await self.has_all_permissions(check.user_id, check.permissions, check.service_id)

        if check.role_operator == Operator.OR:
            role_ok = await self.has_any_role(check.user_id, check.roles, check.service_id)
        else:
            role_ok = await self.has_all_roles(check.user_id, check.roles, check.service_id)

        if check.combination_operator == Operator.OR:
            allowed = permission_ok or role_ok
        else:
            allowed = permission_ok and role_ok

        logger.debug(
            "Complex permission check",
            user_id=str(check.user_id),
            service_id=str(check.service_id) if check.service_id else None,
            permissions=check.permissions,
            roles=check.roles,
            permission_ok=permission_ok,
            role_ok=role_ok,
            allowed=allowed,
        )
        return allowed

    # ============================================================
    # AVAILABLE SERVICES
    # ============================================================

    async def get_available_services(self, user_id: UUID) -> list[Service]:
        """
        Services the user may see.

        Hidden services (is_visible=False) are never returned. Visible services
        without role gating are always returned. Role-gated services are
        returned only when one of the user's roles is among the service's
        visible roles. Any failure returns [].
        """
        try:
            return await self._available_services(user_id)
        except Exception as e:
            logger.error("Available services lookup failed, returning none", user_id=str(user_id), error=str(e))
            return []

    async def _available_services(self, user_id: UUID) -> list[Service]:
        role_ids, services = await asyncio.gather(
            self.get_user_roles(user_id),
            self._all_services(),
        )

        available = [s for s in services if s.is_visible and not s.is_visible_by_role]
        gated = [s for s in services if s.is_visible and s.is_visible_by_role]

        if gated and role_ids:
            available.extend(await self._visible_to_roles(gated, set(role_ids)))

        logger.debug(
            "Available services retrieved",
            user_id=str(user_id),
            role_count=len(role_ids),
            total_services=len(services),
            available_services=len(available),
        )
        return available

    async def _all_services(self) -> list[Service]:
        if self.service_directory is None:
            logger.warning("Service directory not configured, no services available")
            return []
        try:
            return await self.service_directory.find_all()
        except DirectoryError as e:
            logger.error("Service list unavailable", pattern="service.findAll", error=e.message)
            return []

    async def _visible_to_roles(self, gated: list[Service], role_ids: set[UUID]) -> list[Service]:
        """Role-gated services sharing a role with role_ids. Any failure excludes them all."""
        service_ids = {s.id: _uuid_or_none(s.id) for s in gated}
        lookup_ids = [sid for sid in service_ids.values() if sid is not None]
        if not lookup_ids:
            return []

        try:
            visible_by_service = await self._read(
                lambda s: ServiceVisibleRoleService(s).get_role_ids_batch(lookup_ids)
            )
        except Exception as e:
            logger.error(
                "Service visibility lookup failed, hiding role-gated services",
                service_count=len(lookup_ids),
                error=str(e),
            )
            return []

        return [
            s
            for s in gated
            if service_ids[s.id] is not None
            and role_ids.intersection(visible_by_service.get(service_ids[s.id], []))
        ]
