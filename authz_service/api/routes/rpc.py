"""
Message-pattern endpoint for sibling services.

    POST /rpc  {"pattern": "authorization.checkPermission", "data": {...}}
    200        {"data": {"has_permission": true}}

Errors use the same envelope as the REST routes, e.g. 404
{"error": "pattern_not_found", "message": "..."} for an unknown pattern.
"""

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

import authz_service.api.rpc  # noqa: F401
from authz_service.api.dependencies.database import get_db
from authz_service.api.dependencies.services import (
    get_authorization_service,
    get_service_directory,
    get_user_directory,
)
from authz_service.clients.directory import ServiceDirectory, UserDirectory
from authz_service.core.rpc import RpcContext, RpcRegistry
from authz_service.schemas.rpc import RpcRequest, RpcResponse
from authz_service.services.authorization import AuthorizationService

router = APIRouter()


@router.post("/rpc", response_model=RpcResponse)
async def handle_message(
    message: RpcRequest,
    db: AsyncSession = Depends(get_db),
    engine: AuthorizationService = Depends(get_authorization_service),
    service_directory: ServiceDirectory = Depends(get_service_directory),
    user_directory: UserDirectory = Depends(get_user_directory),
):
    ctx = RpcContext(
        db=db,
        engine=engine,
        service_directory=service_directory,
        user_directory=user_directory,
    )
    result = await RpcRegistry.dispatch(message.pattern, message.data, ctx)
    return RpcResponse(data=jsonable_encoder(result))


@router.get("/rpc/patterns", response_model=list[str])
async def list_patterns():
    """Registered message patterns."""
    return RpcRegistry.patterns()
