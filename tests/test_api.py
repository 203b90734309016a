"""
Tests for the REST API.
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_check_detailed(client: AsyncClient):
    response = await client.get("/health/detailed")

    assert response.status_code in (200, 503)
    assert response.json()["components"]["database"]["status"] in ("healthy", "degraded")


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


# ============ Roles ============


@pytest.mark.asyncio
async def test_create_and_get_role(client: AsyncClient, service_directory):
    service_id = uuid4()
    service_directory.add(service_id, "Billing")

    response = await client.post(
        "/api/roles",
        json={"name": "admin", "service_id": str(service_id), "priority": 1},
    )

    assert response.status_code == 201
    role = response.json()
    assert role["name"] == "admin"
    assert role["priority"] == 1

    response = await client.get(f"/api/roles/{role['id']}")

    assert response.status_code == 200
    detail = response.json()
    assert detail["service"]["name"] == "Billing"
    assert detail["users"] == []


@pytest.mark.asyncio
async def test_create_role_validation(client: AsyncClient):
    response = await client.post(
        "/api/roles",
        json={"name": "admin", "service_id": str(uuid4()), "priority": 11},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_role_error_envelope(client: AsyncClient):
    payload = {"name": "admin", "service_id": str(uuid4())}
    await client.post("/api/roles", json=payload)

    response = await client.post("/api/roles", json=payload)

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "role_already_exists"
    assert body["message"]


@pytest.mark.asyncio
async def test_get_missing_role(client: AsyncClient):
    response = await client.get(f"/api/roles/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"] == "role_not_found"


@pytest.mark.asyncio
async def test_search_roles(client: AsyncClient, factory, service_directory):
    service_id = uuid4()
    service_directory.add(service_id, "Billing")
    await factory.role("billing-admin", service_id)
    await factory.role("billing-viewer", service_id)
    await factory.role("support")

    response = await client.get(
        "/api/roles",
        params={"name": "billing", "sort_by": "name", "sort_order": "asc", "limit": 10},
    )

    assert response.status_code == 200
    data = response.json()
    assert [r["name"] for r in data["items"]] == ["billing-admin", "billing-viewer"]
    assert data["items"][0]["user_count"] == 0
    assert data["items"][0]["service"]["name"] == "Billing"
    assert data["page_info"]["total_items"] == 2


@pytest.mark.asyncio
async def test_search_roles_rejects_bad_limit(client: AsyncClient):
    response = await client.get("/api/roles", params={"limit": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_role(client: AsyncClient, factory):
    role = await factory.role("viewer")

    response = await client.patch(f"/api/roles/{role.id}", json={"description": "Read only"})

    assert response.status_code == 200
    assert response.json()["description"] == "Read only"
    assert response.json()["name"] == "viewer"


@pytest.mark.asyncio
async def test_delete_role_lifecycle(client: AsyncClient, factory):
    """Delete is refused while assigned and succeeds once the user is unassigned."""
    role = await factory.role("viewer")
    user_id = uuid4()
    await factory.give_role(user_id, role)

    response = await client.delete(f"/api/roles/{role.id}")
    assert response.status_code == 409
    assert response.json()["error"] == "role_delete_error"

    response = await client.delete(f"/api/user-roles/users/{user_id}/roles/{role.id}")
    assert response.status_code == 204

    response = await client.delete(f"/api/roles/{role.id}")
    assert response.status_code == 204

    response = await client.get(f"/api/roles/{role.id}")
    assert response.status_code == 404


# ============ Permissions ============


@pytest.mark.asyncio
async def test_permission_crud(client: AsyncClient):
    service_id = str(uuid4())

    response = await client.post(
        "/api/permissions",
        json={"action": "report:export", "service_id": service_id},
    )
    assert response.status_code == 201
    permission_id = response.json()["id"]

    response = await client.patch(f"/api/permissions/{permission_id}", json={"action": "report:export-csv"})
    assert response.status_code == 200
    assert response.json()["action"] == "report:export-csv"

    response = await client.get(f"/api/permissions/{permission_id}")
    assert response.status_code == 200
    assert response.json()["roles"] == []

    response = await client.delete(f"/api/permissions/{permission_id}")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_permission_action_format(client: AsyncClient):
    response = await client.post(
        "/api/permissions",
        json={"action": "Export Reports", "service_id": str(uuid4())},
    )

    assert response.status_code == 422


# ============ Relations ============


@pytest.mark.asyncio
async def test_user_role_assignment_routes(client: AsyncClient, factory):
    role = await factory.role("editor")
    user_id = uuid4()
    base = f"/api/user-roles/users/{user_id}/roles"

    response = await client.post(f"{base}/{role.id}")
    assert response.status_code == 204

    response = await client.post(f"{base}/{role.id}")
    assert response.status_code == 409
    assert response.json()["error"] == "user_role_already_exists"

    response = await client.get(base)
    assert response.json() == [str(role.id)]

    response = await client.get(f"{base}/{role.id}/exists")
    assert response.json() == {"exists": True}

    response = await client.get(f"/api/user-roles/roles/{role.id}/users")
    assert response.json() == [str(user_id)]


@pytest.mark.asyncio
async def test_revoke_missing_assignment(client: AsyncClient):
    response = await client.delete(f"/api/user-roles/users/{uuid4()}/roles/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"] == "user_role_not_found"


@pytest.mark.asyncio
async def test_batch_assign_revoke_and_replace(client: AsyncClient):
    role_id = uuid4()
    p1, p2, p3 = str(uuid4()), str(uuid4()), str(uuid4())
    base = f"/api/role-permissions/roles/{role_id}/permissions"

    response = await client.post(f"{base}/batch", json={"ids": [p1, p2]})
    assert response.status_code == 200
    assert response.json()["assigned"] == 2

    response = await client.post(f"{base}/batch", json={"ids": [p1, p2]})
    result = response.json()
    assert result["assigned"] == 0
    assert result["skipped"] == 2
    assert sorted(result["duplicates"]) == sorted([p1, p2])

    response = await client.request("DELETE", f"{base}/batch", json={"ids": [p1]})
    assert response.status_code == 204
    assert (await client.get(base)).json() == [p2]

    response = await client.put(base, json={"ids": [p3]})
    assert response.status_code == 204
    assert (await client.get(base)).json() == [p3]

    response = await client.put(base, json={"ids": []})
    assert response.status_code == 204
    assert (await client.get(base)).json() == []


@pytest.mark.asyncio
async def test_service_visible_role_routes(client: AsyncClient):
    service_id, role_id = uuid4(), uuid4()

    response = await client.post(f"/api/service-visible-roles/services/{service_id}/roles/{role_id}")
    assert response.status_code == 204

    response = await client.get(f"/api/service-visible-roles/roles/{role_id}/services")
    assert response.json() == [str(service_id)]


# ============ Authorization ============


@pytest.mark.asyncio
async def test_check_permission_flow(client: AsyncClient):
    """Permission appears only after the role is made visible in the service."""
    service_id, user_id = str(uuid4()), str(uuid4())

    role = (await client.post("/api/roles", json={"name": "admin", "service_id": service_id})).json()
    permission = (
        await client.post("/api/permissions", json={"action": "user:create", "service_id": service_id})
    ).json()
    await client.post(f"/api/role-permissions/roles/{role['id']}/permissions/{permission['id']}")
    await client.post(f"/api/user-roles/users/{user_id}/roles/{role['id']}")

    check = {"user_id": user_id, "action": "user:create", "service_id": service_id}

    response = await client.post("/api/authorization/check-permission", json=check)
    assert response.json() == {"has_permission": False}

    await client.post(f"/api/service-visible-roles/services/{service_id}/roles/{role['id']}")

    response = await client.post("/api/authorization/check-permission", json=check)
    assert response.json() == {"has_permission": True}

    response = await client.post(
        "/api/authorization/check-role",
        json={"user_id": user_id, "role_name": "ADMIN", "service_id": service_id},
    )
    assert response.json() == {"has_role": True}

    response = await client.get(
        f"/api/authorization/users/{user_id}/permission-actions",
        params={"service_id": service_id},
    )
    assert response.json() == ["user:create"]


@pytest.mark.asyncio
async def test_check_complex(client: AsyncClient):
    response = await client.post(
        "/api/authorization/check-complex",
        json={
            "user_id": str(uuid4()),
            "permissions": ["user:create"],
            "roles": [],
            "combination_operator": "OR",
        },
    )

    assert response.status_code == 200
    # Empty role list is satisfied, so OR allows
    assert response.json() == {"allowed": True}


@pytest.mark.asyncio
async def test_available_services_route(client: AsyncClient, service_directory):
    public_id = uuid4()
    service_directory.add(public_id, "Public")
    service_directory.add(uuid4(), "Hidden", is_visible=False)

    response = await client.get(f"/api/authorization/users/{uuid4()}/services")

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [str(public_id)]
