"""
Tests for the outbound directory clients.
"""

import json

import httpx
import pytest

from authz_service.clients.directory import HttpServiceDirectory, HttpUserDirectory, RpcClient
from authz_service.core.exceptions import DirectoryError
from authz_service.schemas.directory import Service


def make_client(handler) -> RpcClient:
    return RpcClient(
        "http://portal.test",
        target="portal_service",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_find_by_ids_sends_message_envelope():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "s1",
                        "name": "Billing",
                        "isVisible": True,
                        "isVisibleByRole": True,
                        "owner": "ops",
                    }
                ]
            },
        )

    directory = HttpServiceDirectory(make_client(handler))
    services = await directory.find_by_ids(["s1"])

    assert seen == [("/rpc", {"pattern": "service.findByIds", "data": {"service_ids": ["s1"]}})]
    assert services[0].name == "Billing"
    assert services[0].is_visible is True
    assert services[0].is_visible_by_role is True
    # Unknown fields are kept
    assert services[0].model_dump()["owner"] == "ops"


@pytest.mark.asyncio
async def test_empty_id_list_makes_no_call():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = make_client(handler)

    assert await HttpServiceDirectory(client).find_by_ids([]) == []
    assert await HttpUserDirectory(client).find_by_ids([]) == []


@pytest.mark.asyncio
async def test_http_error_becomes_directory_error():
    directory = HttpServiceDirectory(make_client(lambda request: httpx.Response(503)))

    with pytest.raises(DirectoryError) as exc_info:
        await directory.find_all()

    assert exc_info.value.code == "portal_service_unavailable"
    assert "503" in exc_info.value.message


@pytest.mark.asyncio
async def test_timeout_becomes_directory_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(DirectoryError) as exc_info:
        await HttpServiceDirectory(make_client(handler)).find_by_id("s1")

    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_connection_error_becomes_directory_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DirectoryError):
        await HttpServiceDirectory(make_client(handler)).find_all()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"result": []}),
        httpx.Response(200, json={"data": {"id": "s1"}}),
        httpx.Response(200, json={"data": [{"name": "missing id"}]}),
    ],
)
@pytest.mark.asyncio
async def test_malformed_body_becomes_directory_error(response):
    directory = HttpServiceDirectory(make_client(lambda request: response))

    with pytest.raises(DirectoryError):
        await directory.find_by_ids(["s1"])


@pytest.mark.asyncio
async def test_user_directory_parses_users():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["pattern"] == "user.findByIds"
        return httpx.Response(
            200,
            json={"data": [{"id": uid, "email": f"{uid}@example.com"} for uid in body["data"]["user_ids"]]},
        )

    users = await HttpUserDirectory(make_client(handler)).find_by_ids(["u1", "u2"])

    assert [u.email for u in users] == ["u1@example.com", "u2@example.com"]


def test_service_without_visibility_flag_is_hidden():
    service = Service.model_validate({"id": "s1", "name": "Billing"})

    assert service.is_visible is False
    assert service.is_visible_by_role is False


def test_service_accepts_camel_case_flags():
    service = Service.model_validate(
        {"id": "s1", "name": "Admin Console", "isVisible": False, "isVisibleByRole": True}
    )

    assert service.is_visible is False
    assert service.is_visible_by_role is True
    assert "isVisible" not in service.model_dump()
