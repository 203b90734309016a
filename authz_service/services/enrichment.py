"""
Best-effort enrichment from the sibling directories.

Each helper makes one directory call and converts any failure into its
fallback value, so a search or detail view never fails because the portal
or auth service is down.
"""

from typing import Sequence
from uuid import UUID

import structlog

from authz_service.clients.directory import ServiceDirectory, UserDirectory
from authz_service.core.exceptions import DirectoryError
from authz_service.schemas.directory import ServiceSummary, User

logger = structlog.get_logger()


async def resolve_services(
    directory: ServiceDirectory | None,
    service_ids: Sequence[UUID],
) -> dict[str, ServiceSummary] | None:
    """
    Services keyed by id, or None when the directory could not be reached.

    None means every item gets the "Service unavailable" placeholder; an id
    missing from a successful response gets "Unknown Service" instead.
    """
    ids = list(dict.fromkeys(str(sid) for sid in service_ids))
    if not ids:
        return {}
    if directory is None:
        return None
    try:
        services = await directory.find_by_ids(ids)
    except DirectoryError as e:
        logger.warning(
            "Service lookup failed, using placeholder",
            pattern="service.findByIds",
            service_ids=ids,
            error=e.message,
        )
        return None
    return {service.id: ServiceSummary.model_validate(service.model_dump()) for service in services}


def pick_service(services: dict[str, ServiceSummary] | None, service_id: UUID) -> ServiceSummary:
    if services is None:
        return ServiceSummary.unavailable()
    return services.get(str(service_id)) or ServiceSummary.unknown()


async def resolve_service(directory: ServiceDirectory | None, service_id: UUID) -> ServiceSummary:
    """The owning service of a single entity, or the unavailable placeholder."""
    if directory is None:
        return ServiceSummary.unavailable()
    try:
        service = await directory.find_by_id(str(service_id))
    except DirectoryError as e:
        logger.warning(
            "Service lookup failed, using placeholder",
            pattern="service.findById",
            service_id=str(service_id),
            error=e.message,
        )
        return ServiceSummary.unavailable()
    return ServiceSummary.model_validate(service.model_dump())


async def resolve_users(directory: UserDirectory | None, user_ids: Sequence[UUID]) -> list[User]:
    """User records for the given ids, or [] when the auth service is unavailable."""
    ids = [str(uid) for uid in user_ids]
    if not ids or directory is None:
        return []
    try:
        return await directory.find_by_ids(ids)
    except DirectoryError as e:
        logger.warning(
            "User lookup failed, returning no users",
            pattern="user.findByIds",
            user_ids=ids,
            error=e.message,
        )
        return []
