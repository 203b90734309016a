"""
Relation stores: user -> role, role -> permission, service -> role.

One generic service wraps a RelationRepository and maps store failures onto
the error taxonomy, using the relation's resource name as the code prefix
(user_role_fetch_error, role_permission_already_exists, ...). The three
concrete stores add names for each direction.
"""

from typing import Generic, Sequence, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.core.exceptions import (
    AlreadyExistsError,
    AssignError,
    AssignMultipleError,
    AuthzError,
    FetchError,
    NotFoundError,
    ReplaceError,
    RevokeError,
    RevokeMultipleError,
)
from authz_service.repositories.relation import (
    RelationRepository,
    RolePermissionRepository,
    ServiceVisibleRoleRepository,
    UserRoleRepository,
)
from authz_service.schemas.relation import BatchAssignmentResult

logger = structlog.get_logger()

RepoT = TypeVar("RepoT", bound=RelationRepository)


def _unique(ids: Sequence[UUID]) -> list[UUID]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


class RelationService(Generic[RepoT]):
    """
    Generic relation store.

    "left" and "right" follow the repository: for UserRoleService the left
    id is the user and the right id the role.
    """

    resource: str
    repository_class: type[RepoT]

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo: RepoT = self.repository_class(db)

    def _fetch_error(self, operation: str, e: Exception, **ids) -> FetchError:
        logger.error(
            "Relation fetch failed",
            resource=self.resource,
            operation=operation,
            error=str(e),
            **ids,
        )
        return FetchError(self.resource, **ids)

    # ============================================================
    # READS
    # ============================================================

    async def get_right_ids(self, left_id: UUID) -> list[UUID]:
        try:
            return await self.repo.right_ids_for(left_id)
        except SQLAlchemyError as e:
            raise self._fetch_error("get_right_ids", e, left_id=str(left_id)) from e

    async def get_left_ids(self, right_id: UUID) -> list[UUID]:
        try:
            return await self.repo.left_ids_for(right_id)
        except SQLAlchemyError as e:
            raise self._fetch_error("get_left_ids", e, right_id=str(right_id)) from e

    async def get_right_ids_batch(self, left_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        """Right ids per left id, from one IN query. Ids with no rows are absent."""
        try:
            return await self.repo.right_ids_for_many(_unique(left_ids))
        except SQLAlchemyError as e:
            raise self._fetch_error("get_right_ids_batch", e, count=len(left_ids)) from e

    async def get_left_ids_batch(self, right_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        try:
            return await self.repo.left_ids_for_many(_unique(right_ids))
        except SQLAlchemyError as e:
            raise self._fetch_error("get_left_ids_batch", e, count=len(right_ids)) from e

    async def count_left_batch(self, right_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Number of left ids per right id. Every requested id is present."""
        ids = _unique(right_ids)
        try:
            counts = await self.repo.count_left_for_many(ids)
        except SQLAlchemyError as e:
            raise self._fetch_error("count_left_batch", e, count=len(ids)) from e
        return {right_id: counts.get(right_id, 0) for right_id in ids}

    async def exists(self, left_id: UUID, right_id: UUID) -> bool:
        try:
            return await self.repo.exists(left_id, right_id)
        except SQLAlchemyError as e:
            raise self._fetch_error(
                "exists", e, left_id=str(left_id), right_id=str(right_id)
            ) from e

    async def has_left_for_right(self, right_id: UUID) -> bool:
        """Whether any row references right_id. Used by delete guards."""
        try:
            return await self.repo.any_for_right(right_id)
        except SQLAlchemyError as e:
            raise self._fetch_error("has_left_for_right", e, right_id=str(right_id)) from e

    # ============================================================
    # WRITES
    # ============================================================

    async def assign(self, left_id: UUID, right_id: UUID) -> None:
        """
        Link left_id to right_id.

        The pair is checked before inserting. A concurrent insert that wins
        the race surfaces as a unique-constraint violation, which is reported
        the same way.
        """
        ids = {"left_id": str(left_id), "right_id": str(right_id)}
        try:
            if await self.repo.exists(left_id, right_id):
                raise AlreadyExistsError(self.resource, **ids)
            await self.repo.insert(left_id, right_id)
        except AuthzError:
            raise
        except IntegrityError as e:
            logger.warning("Relation insert conflicted", resource=self.resource, **ids)
            raise AlreadyExistsError(self.resource, **ids) from e
        except SQLAlchemyError as e:
            logger.error("Relation assign failed", resource=self.resource, error=str(e), **ids)
            raise AssignError(self.resource, **ids) from e

        logger.info("Relation assigned", resource=self.resource, **ids)

    async def revoke(self, left_id: UUID, right_id: UUID) -> None:
        ids = {"left_id": str(left_id), "right_id": str(right_id)}
        try:
            removed = await self.repo.delete_pair(left_id, right_id)
        except SQLAlchemyError as e:
            logger.error("Relation revoke failed", resource=self.resource, error=str(e), **ids)
            raise RevokeError(self.resource, **ids) from e

        if not removed:
            raise NotFoundError(self.resource, **ids)

        logger.info("Relation revoked", resource=self.resource, **ids)

    async def assign_multiple(
        self,
        left_id: UUID,
        right_ids: Sequence[UUID],
    ) -> BatchAssignmentResult:
        """
        Link left_id to every id in right_ids that is not linked yet.

        Already-linked ids are reported as duplicates and skipped; nothing is
        rejected for overlapping with existing rows.
        """
        requested = _unique(right_ids)
        try:
            existing = set(await self.repo.right_ids_for(left_id))
            duplicates = [rid for rid in requested if rid in existing]
            new_ids = [rid for rid in requested if rid not in existing]
            await self.repo.insert_many(left_id, new_ids)
        except IntegrityError as e:
            logger.warning(
                "Batch insert conflicted",
                resource=self.resource,
                left_id=str(left_id),
                count=len(requested),
            )
            raise AlreadyExistsError(self.resource, left_id=str(left_id)) from e
        except SQLAlchemyError as e:
            logger.error(
                "Batch assign failed",
                resource=self.resource,
                left_id=str(left_id),
                count=len(requested),
                error=str(e),
            )
            raise AssignMultipleError(self.resource, left_id=str(left_id)) from e

        logger.info(
            "Relations assigned",
            resource=self.resource,
            left_id=str(left_id),
            assigned=len(new_ids),
            skipped=len(duplicates),
        )
        return BatchAssignmentResult(
            assigned=len(new_ids),
            skipped=len(duplicates),
            duplicates=duplicates,
            new_assignments=new_ids,
        )

    async def revoke_multiple(self, left_id: UUID, right_ids: Sequence[UUID]) -> int:
        """Unlink the given ids. Ids that were not linked are ignored. Returns rows removed."""
        try:
            removed = await self.repo.delete_many(left_id, _unique(right_ids))
        except SQLAlchemyError as e:
            logger.error(
                "Batch revoke failed",
                resource=self.resource,
                left_id=str(left_id),
                count=len(right_ids),
                error=str(e),
            )
            raise RevokeMultipleError(self.resource, left_id=str(left_id)) from e

        logger.info("Relations revoked", resource=self.resource, left_id=str(left_id), removed=removed)
        return removed

    async def replace_all(self, left_id: UUID, right_ids: Sequence[UUID]) -> list[UUID]:
        """
        Make right_ids the complete set linked to left_id.

        Delete and insert share the session transaction; on failure it is
        rolled back so the previous set stays intact. An empty list clears
        every link.
        """
        new_ids = _unique(right_ids)
        try:
            removed = await self.repo.delete_all_for(left_id)
            await self.repo.insert_many(left_id, new_ids)
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Relation replace failed",
                resource=self.resource,
                left_id=str(left_id),
                count=len(new_ids),
                error=str(e),
            )
            raise ReplaceError(self.resource, left_id=str(left_id)) from e

        logger.info(
            "Relations replaced",
            resource=self.resource,
            left_id=str(left_id),
            removed=removed,
            inserted=len(new_ids),
        )
        return new_ids


class UserRoleService(RelationService[UserRoleRepository]):
    """Which roles each user holds."""

    resource = "user_role"
    repository_class = UserRoleRepository

    async def get_role_ids(self, user_id: UUID) -> list[UUID]:
        return await self.get_right_ids(user_id)

    async def get_user_ids(self, role_id: UUID) -> list[UUID]:
        return await self.get_left_ids(role_id)

    async def get_role_ids_batch(self, user_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_right_ids_batch(user_ids)

    async def get_user_ids_batch(self, role_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_left_ids_batch(role_ids)

    async def get_user_counts_batch(self, role_ids: Sequence[UUID]) -> dict[UUID, int]:
        return await self.count_left_batch(role_ids)

    async def has_users_for_role(self, role_id: UUID) -> bool:
        return await self.has_left_for_right(role_id)


class RolePermissionService(RelationService[RolePermissionRepository]):
    """Which permissions each role grants."""

    resource = "role_permission"
    repository_class = RolePermissionRepository

    async def get_permission_ids(self, role_id: UUID) -> list[UUID]:
        return await self.get_right_ids(role_id)

    async def get_role_ids(self, permission_id: UUID) -> list[UUID]:
        return await self.get_left_ids(permission_id)

    async def get_permission_ids_batch(self, role_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_right_ids_batch(role_ids)

    async def get_role_ids_batch(self, permission_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_left_ids_batch(permission_ids)

    async def get_role_counts_batch(self, permission_ids: Sequence[UUID]) -> dict[UUID, int]:
        return await self.count_left_batch(permission_ids)

    async def has_roles_for_permission(self, permission_id: UUID) -> bool:
        return await self.has_left_for_right(permission_id)


class ServiceVisibleRoleService(RelationService[ServiceVisibleRoleRepository]):
    """Which roles apply inside each service's scope."""

    resource = "service_visible_role"
    repository_class = ServiceVisibleRoleRepository

    async def get_role_ids(self, service_id: UUID) -> list[UUID]:
        return await self.get_right_ids(service_id)

    async def get_service_ids(self, role_id: UUID) -> list[UUID]:
        return await self.get_left_ids(role_id)

    async def get_role_ids_batch(self, service_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_right_ids_batch(service_ids)

    async def get_service_ids_batch(self, role_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        return await self.get_left_ids_batch(role_ids)
