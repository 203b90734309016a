"""
Tests for the message-pattern endpoint.
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from authz_service.core.rpc import RpcRegistry


def test_patterns_are_registered():
    patterns = RpcRegistry.patterns()

    assert "authorization.checkPermission" in patterns
    assert "role.findByIds" in patterns
    assert "userRole.replaceRoles" in patterns
    assert "serviceVisibleRole.findRolesByService" in patterns


@pytest.mark.asyncio
async def test_check_permission_message(client: AsyncClient, factory):
    service_id, user_id = uuid4(), uuid4()
    role = await factory.role("admin", service_id)
    permission = await factory.permission("user:create", service_id)
    await factory.grant(role, permission)
    await factory.give_role(user_id, role)
    await factory.make_visible(service_id, role)

    response = await client.post(
        "/rpc",
        json={
            "pattern": "authorization.checkPermission",
            "data": {"user_id": str(user_id), "action": "user:create", "service_id": str(service_id)},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"data": {"has_permission": True}}


@pytest.mark.asyncio
async def test_find_roles_by_ids_message(client: AsyncClient, factory):
    alpha = await factory.role("alpha")
    beta = await factory.role("beta")

    response = await client.post(
        "/rpc",
        json={"pattern": "role.findByIds", "data": {"ids": [str(alpha.id), str(beta.id)]}},
    )

    assert response.status_code == 200
    assert [r["name"] for r in response.json()["data"]] == ["beta", "alpha"]


@pytest.mark.asyncio
async def test_assign_multiple_message(client: AsyncClient):
    user_id, role_id = str(uuid4()), str(uuid4())
    message = {
        "pattern": "userRole.assignMultiple",
        "data": {"user_id": user_id, "role_ids": [role_id]},
    }

    first = await client.post("/rpc", json=message)
    second = await client.post("/rpc", json=message)

    assert first.json()["data"]["assigned"] == 1
    assert second.json()["data"]["skipped"] == 1


@pytest.mark.asyncio
async def test_unknown_pattern(client: AsyncClient):
    response = await client.post("/rpc", json={"pattern": "role.explode", "data": {}})

    assert response.status_code == 404
    assert response.json()["error"] == "pattern_not_found"


@pytest.mark.asyncio
async def test_invalid_message_data(client: AsyncClient):
    response = await client.post(
        "/rpc",
        json={"pattern": "authorization.checkPermission", "data": {"user_id": "not-a-uuid"}},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "rpc_invalid_payload"


@pytest.mark.asyncio
async def test_list_patterns(client: AsyncClient):
    response = await client.get("/rpc/patterns")

    assert response.status_code == 200
    assert "authorization.checkRole" in response.json()


@pytest.mark.asyncio
async def test_batch_relation_lookups(client: AsyncClient, factory):
    service_id, user_a, user_b = uuid4(), uuid4(), uuid4()
    admin = await factory.role("admin", service_id)
    viewer = await factory.role("viewer", service_id)
    read = await factory.permission("doc:read", service_id)
    await factory.give_role(user_a, admin, viewer)
    await factory.give_role(user_b, viewer)
    await factory.grant(admin, read)
    await factory.grant(viewer, read)
    await factory.make_visible(service_id, admin)

    async def send(pattern: str, data: dict):
        response = await client.post("/rpc", json={"pattern": pattern, "data": data})
        assert response.status_code == 200
        return response.json()["data"]

    users_by_role = await send("userRole.findUsersByRoles", {"role_ids": [str(viewer.id), str(uuid4())]})
    assert sorted(users_by_role[str(viewer.id)]) == sorted([str(user_a), str(user_b)])
    assert len(users_by_role) == 1

    roles_by_user = await send("userRole.findRolesByUsers", {"user_ids": [str(user_b)]})
    assert roles_by_user == {str(user_b): [str(viewer.id)]}

    roles_by_permission = await send("rolePermission.findRolesByPermissions", {"permission_ids": [str(read.id)]})
    assert sorted(roles_by_permission[str(read.id)]) == sorted([str(admin.id), str(viewer.id)])

    permissions_by_role = await send("rolePermission.findPermissionsByRoles", {"role_ids": [str(admin.id)]})
    assert permissions_by_role == {str(admin.id): [str(read.id)]}

    services_by_role = await send("serviceVisibleRole.findServicesByRoles", {"role_ids": [str(admin.id)]})
    assert services_by_role == {str(admin.id): [str(service_id)]}

    roles_by_service = await send("serviceVisibleRole.findRolesByServices", {"service_ids": [str(service_id)]})
    assert roles_by_service == {str(service_id): [str(admin.id)]}
