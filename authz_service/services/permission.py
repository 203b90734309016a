"""
Permission service.
"""

import asyncio
from typing import Sequence
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.clients.directory import ServiceDirectory
from authz_service.core.exceptions import (
    AlreadyExistsError,
    AuthzError,
    CreateError,
    DeleteError,
    FetchError,
    NotFoundError,
    UpdateError,
)
from authz_service.models.permission import Permission
from authz_service.models.role import Role
from authz_service.repositories.permission import PermissionRepository
from authz_service.repositories.role import RoleRepository
from authz_service.schemas.permission import (
    PermissionCreate,
    PermissionDetail,
    PermissionFilter,
    PermissionSearchQuery,
    PermissionSearchResult,
    PermissionUpdate,
)
from authz_service.schemas.role import RoleResponse
from authz_service.services.enrichment import pick_service, resolve_service, resolve_services
from authz_service.services.relation import RolePermissionService
from authz_service.utils.pagination import Page

logger = structlog.get_logger()


class PermissionService:
    """Permission management service."""

    def __init__(
        self,
        db: AsyncSession,
        service_directory: ServiceDirectory | None = None,
    ):
        self.db = db
        self.repo = PermissionRepository(db)
        self.roles = RoleRepository(db)
        self.role_permissions = RolePermissionService(db)
        self.service_directory = service_directory

    async def find_by_id(self, permission_id: UUID) -> Permission | None:
        try:
            return await self.repo.get_by_id(permission_id)
        except SQLAlchemyError as e:
            logger.error("Permission fetch failed", permission_id=str(permission_id), error=str(e))
            raise FetchError("permission", permission_id=str(permission_id)) from e

    async def find_by_id_or_fail(self, permission_id: UUID) -> Permission:
        permission = await self.find_by_id(permission_id)
        if not permission:
            raise NotFoundError("permission", permission_id=str(permission_id))
        return permission

    async def find_by_ids(self, permission_ids: Sequence[UUID]) -> list[Permission]:
        """Batch lookup ordered by action. Unknown ids are skipped."""
        try:
            return await self.repo.get_by_ids(permission_ids, order_by=Permission.action.asc())
        except SQLAlchemyError as e:
            logger.error("Permission batch fetch failed", count=len(permission_ids), error=str(e))
            raise FetchError("permission") from e

    async def find_by_service_ids(self, service_ids: Sequence[UUID]) -> list[Permission]:
        try:
            return await self.repo.find_in("service_id", service_ids)
        except SQLAlchemyError as e:
            logger.error("Permission fetch by service failed", count=len(service_ids), error=str(e))
            raise FetchError("permission") from e

    async def find_by(self, filter: PermissionFilter | None = None) -> list[Permission]:
        """Exact-match AND filter on action, description and service_id."""
        filters = filter.model_dump(exclude_none=True) if filter else {}
        try:
            return await self.repo.find_all(**filters)
        except SQLAlchemyError as e:
            logger.error("Permission filter failed", filters=list(filters), error=str(e))
            raise FetchError("permission") from e

    async def search(self, query: PermissionSearchQuery) -> Page[PermissionSearchResult]:
        """Paginated search enriched with role counts and owning services."""
        try:
            permissions, page_info = await self.repo.search(query)
        except SQLAlchemyError as e:
            logger.error("Permission search failed", error=str(e))
            raise FetchError("permission") from e

        if not permissions:
            return Page.create([], page_info)

        counts, services = await asyncio.gather(
            self._role_counts([p.id for p in permissions]),
            resolve_services(self.service_directory, [p.service_id for p in permissions]),
        )

        items = [
            PermissionSearchResult(
                id=p.id,
                action=p.action,
                description=p.description,
                role_count=counts.get(p.id, 0),
                service=pick_service(services, p.service_id),
            )
            for p in permissions
        ]
        return Page.create(items, page_info)

    async def get_detail(self, permission_id: UUID) -> PermissionDetail:
        """Permission with its owning service and the roles granting it."""
        permission = await self.find_by_id_or_fail(permission_id)

        service, roles = await asyncio.gather(
            resolve_service(self.service_directory, permission.service_id),
            self._roles_for_permission(permission_id),
        )

        return PermissionDetail(
            id=permission.id,
            action=permission.action,
            description=permission.description,
            service=service,
            roles=[RoleResponse.model_validate(role) for role in roles],
        )

    async def _role_counts(self, permission_ids: list[UUID]) -> dict[UUID, int]:
        try:
            return await self.role_permissions.get_role_counts_batch(permission_ids)
        except FetchError:
            logger.warning("Role counts unavailable, using 0", count=len(permission_ids))
            return {}

    async def _roles_for_permission(self, permission_id: UUID) -> list[Role]:
        try:
            role_ids = await self.role_permissions.get_role_ids(permission_id)
            return await self.roles.get_by_ids(role_ids, order_by=Role.name.desc())
        except (FetchError, SQLAlchemyError) as e:
            logger.warning("Granting roles unavailable", permission_id=str(permission_id), error=str(e))
            return []

    async def create(self, data: PermissionCreate) -> Permission:
        """Create a permission. (service_id, action) must be unused."""
        ids = {"action": data.action, "service_id": str(data.service_id)}
        try:
            if await self.repo.exists(action=data.action, service_id=data.service_id):
                raise AlreadyExistsError("permission", **ids)
            permission = await self.repo.create(**data.model_dump())
        except AuthzError:
            raise
        except IntegrityError as e:
            raise AlreadyExistsError("permission", **ids) from e
        except SQLAlchemyError as e:
            logger.error("Permission create failed", error=str(e), **ids)
            raise CreateError("permission", **ids) from e

        logger.info("Permission created", permission_id=str(permission.id), **ids)
        return permission

    async def update(self, permission_id: UUID, data: PermissionUpdate) -> Permission:
        permission = await self.find_by_id_or_fail(permission_id)

        changes = data.model_dump(exclude_unset=True)
        if "action" in changes and changes["action"] is None:
            del changes["action"]

        try:
            if "action" in changes and await self.repo.exists(
                exclude_id=permission_id,
                action=changes["action"],
                service_id=permission.service_id,
            ):
                raise AlreadyExistsError(
                    "permission",
                    action=changes["action"],
                    service_id=str(permission.service_id),
                )
            permission = await self.repo.update(permission, **changes)
        except AuthzError:
            raise
        except IntegrityError as e:
            raise AlreadyExistsError("permission", permission_id=str(permission_id)) from e
        except SQLAlchemyError as e:
            logger.error("Permission update failed", permission_id=str(permission_id), error=str(e))
            raise UpdateError("permission", permission_id=str(permission_id)) from e

        logger.info("Permission updated", permission_id=str(permission_id), fields=list(changes))
        return permission

    async def delete(self, permission_id: UUID) -> None:
        """Soft delete. Refused while any role grants the permission."""
        permission = await self.find_by_id_or_fail(permission_id)

        try:
            if await self.role_permissions.has_roles_for_permission(permission_id):
                logger.warning(
                    "Permission delete refused, roles assigned",
                    permission_id=str(permission_id),
                    action=permission.action,
                )
                raise DeleteError(
                    "permission",
                    f"Permission '{permission.action}' is still granted to roles",
                    permission_id=str(permission_id),
                )
            await self.repo.soft_delete(permission)
        except AuthzError:
            raise
        except SQLAlchemyError as e:
            logger.error("Permission delete failed", permission_id=str(permission_id), error=str(e))
            raise DeleteError("permission", permission_id=str(permission_id)) from e

        logger.info(
            "Permission deleted",
            permission_id=str(permission_id),
            action=permission.action,
            service_id=str(permission.service_id),
        )
