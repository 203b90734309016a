"""
Message-pattern registry for the /rpc endpoint.

Handlers register themselves under a pattern name with the payload model
used to validate the message data. The endpoint looks the pattern up,
validates, and awaits the handler.

Usage:
    @RpcRegistry.pattern("authorization.checkPermission", CheckPermissionRequest)
    async def check_permission(payload: CheckPermissionRequest, ctx: RpcContext):
        ...

    result = await RpcRegistry.dispatch("authorization.checkPermission", data, ctx)
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from authz_service.clients.directory import ServiceDirectory, UserDirectory
from authz_service.core.exceptions import InvalidPayloadError, NotFoundError
from authz_service.services.authorization import AuthorizationService


@dataclass
class RpcContext:
    """Per-message dependencies handed to every handler."""

    db: AsyncSession
    engine: AuthorizationService
    service_directory: ServiceDirectory | None = None
    user_directory: UserDirectory | None = None


Handler = Callable[[Any, RpcContext], Awaitable[Any]]


@dataclass(frozen=True)
class RpcHandler:
    name: str
    fn: Handler
    payload: Type[BaseModel] | None = None


class RpcRegistry:
    """Central registry of message patterns."""

    _handlers: dict[str, RpcHandler] = {}

    @classmethod
    def pattern(
        cls,
        name: str,
        payload: Type[BaseModel] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator to register a handler for a message pattern."""
        def decorator(fn: Handler) -> Handler:
            cls._handlers[name] = RpcHandler(name=name, fn=fn, payload=payload)
            return fn
        return decorator

    @classmethod
    def get(cls, name: str) -> RpcHandler:
        handler = cls._handlers.get(name)
        if not handler:
            raise NotFoundError("pattern", f"Unknown message pattern: '{name}'", pattern=name)
        return handler

    @classmethod
    def patterns(cls) -> list[str]:
        return sorted(cls._handlers)

    @classmethod
    async def dispatch(cls, name: str, data: dict[str, Any] | None, ctx: RpcContext) -> Any:
        handler = cls.get(name)

        payload: Any = data or {}
        if handler.payload is not None:
            try:
                payload = handler.payload.model_validate(payload)
            except ValidationError as e:
                raise InvalidPayloadError(
                    "rpc",
                    f"Invalid data for '{name}': {e.error_count()} error(s)",
                    pattern=name,
                    errors=e.errors(include_url=False),
                ) from e

        return await handler.fn(payload, ctx)
