"""
Outbound RPC to sibling services.

ServiceDirectory (portal service) and UserDirectory (auth service) are
protocols so the engine and entity services can be exercised with in-memory
fakes. The HTTP implementations post a message envelope to the sibling's
/rpc endpoint:

    POST {base_url}/rpc  {"pattern": "service.findByIds", "data": {"service_ids": [...]}}
    200                  {"data": [...]}

One call per logical operation, bounded by the configured timeout, never
retried. Any failure raises DirectoryError; callers catch it and fall back.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import httpx
from pydantic import ValidationError

from authz_service.core.exceptions import DirectoryError
from authz_service.schemas.directory import Service, ServiceIdsPayload, User, UserIdsPayload


class ServiceDirectory(Protocol):
    async def find_by_id(self, service_id: str) -> Service:
        ...

    async def find_by_ids(self, service_ids: Sequence[str]) -> list[Service]:
        ...

    async def find_all(self) -> list[Service]:
        ...


class UserDirectory(Protocol):
    async def find_by_ids(self, user_ids: Sequence[str]) -> list[User]:
        ...


class RpcClient:
    """Minimal message-pattern client over HTTP."""

    def __init__(
        self,
        base_url: str,
        target: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.target = target
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def send(self, pattern: str, data: dict[str, Any]) -> Any:
        try:
            response = await self._client.post("/rpc", json={"pattern": pattern, "data": data})
            response.raise_for_status()
            return response.json()["data"]
        except httpx.TimeoutException as e:
            raise DirectoryError(self.target, f"{pattern} timed out", pattern=pattern) from e
        except httpx.HTTPStatusError as e:
            raise DirectoryError(
                self.target,
                f"{pattern} returned HTTP {e.response.status_code}",
                pattern=pattern,
            ) from e
        except httpx.HTTPError as e:
            raise DirectoryError(self.target, f"{pattern} failed: {e}", pattern=pattern) from e
        except (ValueError, KeyError, TypeError) as e:
            raise DirectoryError(self.target, f"{pattern} returned a malformed body", pattern=pattern) from e

    async def aclose(self) -> None:
        await self._client.aclose()


class HttpServiceDirectory:
    """ServiceDirectory backed by the portal service."""

    def __init__(self, client: RpcClient):
        self.client = client

    async def find_by_id(self, service_id: str) -> Service:
        data = await self.client.send("service.findById", {"service_id": service_id})
        return _parse(Service, data, self.client.target)

    async def find_by_ids(self, service_ids: Sequence[str]) -> list[Service]:
        if not service_ids:
            return []
        payload = ServiceIdsPayload(service_ids=[str(sid) for sid in service_ids])
        data = await self.client.send("service.findByIds", payload.model_dump())
        return _parse_list(Service, data, self.client.target)

    async def find_all(self) -> list[Service]:
        data = await self.client.send("service.findAll", {})
        return _parse_list(Service, data or [], self.client.target)


class HttpUserDirectory:
    """UserDirectory backed by the auth service."""

    def __init__(self, client: RpcClient):
        self.client = client

    async def find_by_ids(self, user_ids: Sequence[str]) -> list[User]:
        if not user_ids:
            return []
        payload = UserIdsPayload(user_ids=[str(uid) for uid in user_ids])
        data = await self.client.send("user.findByIds", payload.model_dump())
        return _parse_list(User, data, self.client.target)


def _parse(model, data: Any, target: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DirectoryError(target, f"unexpected {model.__name__} payload") from e


def _parse_list(model, data: Any, target: str) -> list:
    if not isinstance(data, list):
        raise DirectoryError(target, f"expected a list of {model.__name__}")
    return [_parse(model, item, target) for item in data]
