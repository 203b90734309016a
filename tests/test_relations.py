"""
Tests for the relation stores.
"""

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.core.exceptions import (
    AlreadyExistsError,
    FetchError,
    NotFoundError,
    ReplaceError,
)
from authz_service.models.relations import UserRole
from authz_service.services.relation import (
    RolePermissionService,
    ServiceVisibleRoleService,
    UserRoleService,
)


async def role_ids_in_db(db: AsyncSession, user_id) -> set:
    result = await db.execute(select(UserRole.role_id).where(UserRole.user_id == user_id))
    return set(result.scalars().all())


@pytest.mark.asyncio
async def test_assign_and_lookup_both_directions(db: AsyncSession):
    """Assigned pairs are visible from either side."""
    service = UserRoleService(db)
    user_id, role_a, role_b = uuid4(), uuid4(), uuid4()

    await service.assign(user_id, role_a)
    await service.assign(user_id, role_b)

    assert set(await service.get_role_ids(user_id)) == {role_a, role_b}
    assert await service.get_user_ids(role_a) == [user_id]
    assert await service.exists(user_id, role_a)
    assert not await service.exists(user_id, uuid4())


@pytest.mark.asyncio
async def test_assign_duplicate_raises_already_exists(db: AsyncSession):
    service = RolePermissionService(db)
    role_id, permission_id = uuid4(), uuid4()
    await service.assign(role_id, permission_id)

    with pytest.raises(AlreadyExistsError) as exc_info:
        await service.assign(role_id, permission_id)

    assert exc_info.value.code == "role_permission_already_exists"
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_revoke_missing_pair_raises_not_found(db: AsyncSession):
    service = UserRoleService(db)

    with pytest.raises(NotFoundError) as exc_info:
        await service.revoke(uuid4(), uuid4())

    assert exc_info.value.code == "user_role_not_found"


@pytest.mark.asyncio
async def test_revoke_removes_only_that_pair(db: AsyncSession):
    service = UserRoleService(db)
    user_id, role_a, role_b = uuid4(), uuid4(), uuid4()
    await service.assign_multiple(user_id, [role_a, role_b])

    await service.revoke(user_id, role_a)

    assert await service.get_role_ids(user_id) == [role_b]


@pytest.mark.asyncio
async def test_batch_lookup_groups_by_left_id(db: AsyncSession):
    service = RolePermissionService(db)
    role_a, role_b, role_c = uuid4(), uuid4(), uuid4()
    p1, p2, p3 = uuid4(), uuid4(), uuid4()
    await service.assign_multiple(role_a, [p1, p2])
    await service.assign_multiple(role_b, [p3])

    grouped = await service.get_permission_ids_batch([role_a, role_b, role_c])

    assert set(grouped[role_a]) == {p1, p2}
    assert grouped[role_b] == [p3]
    # No rows, no key
    assert role_c not in grouped


@pytest.mark.asyncio
async def test_batch_lookup_empty_input(db: AsyncSession):
    assert await UserRoleService(db).get_role_ids_batch([]) == {}


@pytest.mark.asyncio
async def test_count_left_batch_includes_zero_counts(db: AsyncSession):
    service = UserRoleService(db)
    busy_role, idle_role = uuid4(), uuid4()
    for _ in range(3):
        await service.assign(uuid4(), busy_role)

    counts = await service.get_user_counts_batch([busy_role, idle_role])

    assert counts == {busy_role: 3, idle_role: 0}


@pytest.mark.asyncio
async def test_has_left_for_right(db: AsyncSession):
    service = RolePermissionService(db)
    role_id, permission_id = uuid4(), uuid4()

    assert not await service.has_roles_for_permission(permission_id)
    await service.assign(role_id, permission_id)
    assert await service.has_roles_for_permission(permission_id)


@pytest.mark.asyncio
async def test_assign_multiple_is_idempotent(db: AsyncSession):
    """Repeating a batch assignment skips everything and changes nothing."""
    service = UserRoleService(db)
    user_id, x, y = uuid4(), uuid4(), uuid4()

    first = await service.assign_multiple(user_id, [x, y])
    assert first.assigned == 2
    assert first.skipped == 0
    assert set(first.new_assignments) == {x, y}
    rows_after_first = await role_ids_in_db(db, user_id)

    second = await service.assign_multiple(user_id, [x, y])

    assert second.assigned == 0
    assert second.skipped == 2
    assert second.duplicates == [x, y]
    assert second.new_assignments == []
    assert await role_ids_in_db(db, user_id) == rows_after_first


@pytest.mark.asyncio
async def test_assign_multiple_partial_overlap(db: AsyncSession):
    service = UserRoleService(db)
    user_id, x, y, z = uuid4(), uuid4(), uuid4(), uuid4()
    await service.assign(user_id, x)

    result = await service.assign_multiple(user_id, [x, y, z, y])

    assert result.assigned == 2
    assert result.skipped == 1
    assert result.duplicates == [x]
    assert result.new_assignments == [y, z]
    assert await role_ids_in_db(db, user_id) == {x, y, z}


@pytest.mark.asyncio
async def test_revoke_multiple_ignores_missing_ids(db: AsyncSession):
    service = UserRoleService(db)
    user_id, x, y = uuid4(), uuid4(), uuid4()
    await service.assign_multiple(user_id, [x, y])

    removed = await service.revoke_multiple(user_id, [x, uuid4()])

    assert removed == 1
    assert await service.get_role_ids(user_id) == [y]


@pytest.mark.asyncio
async def test_replace_all_empty_clears_everything(db: AsyncSession):
    service = UserRoleService(db)
    user_id = uuid4()
    await service.assign_multiple(user_id, [uuid4(), uuid4(), uuid4()])

    await service.replace_all(user_id, [])

    assert await role_ids_in_db(db, user_id) == set()


@pytest.mark.asyncio
async def test_replace_all_leaves_exactly_the_new_set(db: AsyncSession):
    service = UserRoleService(db)
    user_id, other_user, x = uuid4(), uuid4(), uuid4()
    await service.assign_multiple(user_id, [uuid4(), uuid4()])
    await service.assign(other_user, x)

    await service.replace_all(user_id, [])
    await service.replace_all(user_id, [x])

    assert await role_ids_in_db(db, user_id) == {x}
    # Other users are untouched
    assert await role_ids_in_db(db, other_user) == {x}


@pytest.mark.asyncio
async def test_replace_all_can_keep_existing_ids(db: AsyncSession):
    service = ServiceVisibleRoleService(db)
    service_id, keep, drop, add = uuid4(), uuid4(), uuid4(), uuid4()
    await service.assign_multiple(service_id, [keep, drop])

    await service.replace_all(service_id, [keep, add])

    assert set(await service.get_role_ids(service_id)) == {keep, add}


@pytest.mark.asyncio
async def test_replace_all_failure_rolls_back(db: AsyncSession, monkeypatch):
    """A failed insert leaves the previous set in place."""
    service = UserRoleService(db)
    user_id, x, y = uuid4(), uuid4(), uuid4()
    await service.assign_multiple(user_id, [x])
    await db.commit()

    async def failing_insert_many(left_id, right_ids):
        raise OperationalError("INSERT INTO user_roles", {}, Exception("disk I/O error"))

    monkeypatch.setattr(service.repo, "insert_many", failing_insert_many)

    with pytest.raises(ReplaceError) as exc_info:
        await service.replace_all(user_id, [y])

    assert exc_info.value.code == "user_role_replace_error"
    assert await role_ids_in_db(db, user_id) == {x}


@pytest.mark.asyncio
async def test_read_failure_raises_fetch_error(broken_session_factory):
    async with broken_session_factory() as session:
        with pytest.raises(FetchError) as exc_info:
            await UserRoleService(session).get_role_ids(uuid4())

    assert exc_info.value.code == "user_role_fetch_error"
