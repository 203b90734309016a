"""
Role service.
"""

import asyncio
from typing import Sequence
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.clients.directory import ServiceDirectory, UserDirectory
from authz_service.core.exceptions import (
    AlreadyExistsError,
    AuthzError,
    CreateError,
    DeleteError,
    FetchError,
    NotFoundError,
    UpdateError,
)
from authz_service.models.role import Role
from authz_service.repositories.role import RoleRepository
from authz_service.schemas.role import (
    RoleCreate,
    RoleDetail,
    RoleFilter,
    RoleSearchQuery,
    RoleSearchResult,
    RoleUpdate,
)
from authz_service.services.enrichment import (
    pick_service,
    resolve_service,
    resolve_services,
    resolve_users,
)
from authz_service.services.relation import UserRoleService
from authz_service.utils.pagination import Page

logger = structlog.get_logger()


class RoleService:
    """Role management service."""

    def __init__(
        self,
        db: AsyncSession,
        service_directory: ServiceDirectory | None = None,
        user_directory: UserDirectory | None = None,
    ):
        self.db = db
        self.repo = RoleRepository(db)
        self.user_roles = UserRoleService(db)
        self.service_directory = service_directory
        self.user_directory = user_directory

    # ============================================================
    # LOOKUPS
    # ============================================================

    async def find_by_id(self, role_id: UUID) -> Role | None:
        try:
            return await self.repo.get_by_id(role_id)
        except SQLAlchemyError as e:
            logger.error("Role fetch failed", role_id=str(role_id), error=str(e))
            raise FetchError("role", role_id=str(role_id)) from e

    async def find_by_id_or_fail(self, role_id: UUID) -> Role:
        role = await self.find_by_id(role_id)
        if not role:
            raise NotFoundError("role", role_id=str(role_id))
        return role

    async def find_by_ids(self, role_ids: Sequence[UUID]) -> list[Role]:
        """Batch lookup ordered by name, descending. Unknown ids are skipped."""
        try:
            return await self.repo.get_by_ids(role_ids, order_by=Role.name.desc())
        except SQLAlchemyError as e:
            logger.error("Role batch fetch failed", count=len(role_ids), error=str(e))
            raise FetchError("role") from e

    async def find_live_ids(self, role_ids: Sequence[UUID]) -> set[UUID]:
        """Ids among role_ids that belong to existing, non-deleted roles."""
        try:
            return await self.repo.live_ids(role_ids)
        except SQLAlchemyError as e:
            logger.error("Role liveness check failed", count=len(role_ids), error=str(e))
            raise FetchError("role") from e

    async def find_by_service_ids(self, service_ids: Sequence[UUID]) -> list[Role]:
        try:
            return await self.repo.find_in("service_id", service_ids)
        except SQLAlchemyError as e:
            logger.error("Role fetch by service failed", count=len(service_ids), error=str(e))
            raise FetchError("role") from e

    async def find_by(self, filter: RoleFilter | None = None) -> list[Role]:
        """Exact-match AND filter over the set fields; no filter returns every role."""
        filters = filter.model_dump(exclude_none=True) if filter else {}
        try:
            return await self.repo.find_all(**filters)
        except SQLAlchemyError as e:
            logger.error("Role filter failed", filters=list(filters), error=str(e))
            raise FetchError("role") from e

    # ============================================================
    # SEARCH / DETAIL
    # ============================================================

    async def search(self, query: RoleSearchQuery) -> Page[RoleSearchResult]:
        """
        Paginated search enriched with user counts and owning services.

        Enrichment is best-effort: counts fall back to 0 and services to the
        "Service unavailable" placeholder.
        """
        try:
            roles, page_info = await self.repo.search(query)
        except SQLAlchemyError as e:
            logger.error("Role search failed", error=str(e))
            raise FetchError("role") from e

        if not roles:
            return Page.create([], page_info)

        counts, services = await asyncio.gather(
            self._user_counts([role.id for role in roles]),
            resolve_services(self.service_directory, [role.service_id for role in roles]),
        )

        items = [
            RoleSearchResult(
                id=role.id,
                name=role.name,
                description=role.description,
                priority=role.priority,
                user_count=counts.get(role.id, 0),
                service=pick_service(services, role.service_id),
            )
            for role in roles
        ]
        return Page.create(items, page_info)

    async def get_detail(self, role_id: UUID) -> RoleDetail:
        """Role with its owning service and the users holding it."""
        role = await self.find_by_id_or_fail(role_id)

        service, users = await asyncio.gather(
            resolve_service(self.service_directory, role.service_id),
            self._users_for_role(role_id),
        )

        return RoleDetail(
            id=role.id,
            name=role.name,
            description=role.description,
            priority=role.priority,
            service=service,
            users=users,
        )

    async def _user_counts(self, role_ids: list[UUID]) -> dict[UUID, int]:
        try:
            return await self.user_roles.get_user_counts_batch(role_ids)
        except FetchError:
            logger.warning("User counts unavailable, using 0", count=len(role_ids))
            return {}

    async def _users_for_role(self, role_id: UUID):
        try:
            user_ids = await self.user_roles.get_user_ids(role_id)
        except FetchError:
            return []
        return await resolve_users(self.user_directory, user_ids)

    # ============================================================
    # WRITES
    # ============================================================

    async def create(self, data: RoleCreate) -> Role:
        """Create a role. (name, service_id) must be unused."""
        try:
            if await self.repo.exists(name=data.name, service_id=data.service_id):
                raise AlreadyExistsError(
                    "role", name=data.name, service_id=str(data.service_id)
                )
            role = await self.repo.create(**data.model_dump())
        except AuthzError:
            raise
        except IntegrityError as e:
            raise AlreadyExistsError(
                "role", name=data.name, service_id=str(data.service_id)
            ) from e
        except SQLAlchemyError as e:
            logger.error("Role create failed", name=data.name, error=str(e))
            raise CreateError("role", name=data.name) from e

        logger.info(
            "Role created",
            role_id=str(role.id),
            name=role.name,
            service_id=str(role.service_id),
        )
        return role

    async def update(self, role_id: UUID, data: RoleUpdate) -> Role:
        role = await self.find_by_id_or_fail(role_id)

        changes = data.model_dump(exclude_unset=True)
        # name and priority are not nullable; an explicit null leaves them as-is
        for field in ("name", "priority"):
            if field in changes and changes[field] is None:
                del changes[field]

        try:
            if "name" in changes and await self.repo.exists(
                exclude_id=role_id, name=changes["name"], service_id=role.service_id
            ):
                raise AlreadyExistsError(
                    "role", name=changes["name"], service_id=str(role.service_id)
                )
            role = await self.repo.update(role, **changes)
        except AuthzError:
            raise
        except IntegrityError as e:
            raise AlreadyExistsError("role", role_id=str(role_id)) from e
        except SQLAlchemyError as e:
            logger.error("Role update failed", role_id=str(role_id), error=str(e))
            raise UpdateError("role", role_id=str(role_id)) from e

        logger.info("Role updated", role_id=str(role_id), fields=list(changes))
        return role

    async def delete(self, role_id: UUID) -> None:
        """Soft delete. Refused while any user holds the role."""
        role = await self.find_by_id_or_fail(role_id)

        try:
            if await self.user_roles.has_users_for_role(role_id):
                logger.warning("Role delete refused, users assigned", role_id=str(role_id), name=role.name)
                raise DeleteError(
                    "role",
                    f"Role '{role.name}' is still assigned to users",
                    role_id=str(role_id),
                )
            await self.repo.soft_delete(role)
        except AuthzError:
            raise
        except SQLAlchemyError as e:
            logger.error("Role delete failed", role_id=str(role_id), error=str(e))
            raise DeleteError("role", role_id=str(role_id)) from e

        logger.info("Role deleted", role_id=str(role_id), name=role.name, service_id=str(role.service_id))
