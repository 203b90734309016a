"""
RPC envelope and message payloads.

Authorization patterns reuse the request models from schemas.authorization.
"""

from typing import Any
from uuid import UUID
from pydantic import BaseModel, Field


class RpcRequest(BaseModel):
    pattern: str = Field(min_length=1, max_length=100)
    data: dict[str, Any] = Field(default_factory=dict)


class RpcResponse(BaseModel):
    data: Any = None


# Entities

class EntityIdPayload(BaseModel):
    id: UUID


class EntityIdsPayload(BaseModel):
    ids: list[UUID] = Field(default_factory=list, max_length=1000)


class ByServiceIdsPayload(BaseModel):
    service_ids: list[UUID] = Field(default_factory=list, max_length=1000)


# Relation lookups

class UserIdPayload(BaseModel):
    user_id: UUID


class RoleIdPayload(BaseModel):
    role_id: UUID


class PermissionIdPayload(BaseModel):
    permission_id: UUID


class ServiceIdPayload(BaseModel):
    service_id: UUID


class UserIdsPayload(BaseModel):
    user_ids: list[UUID] = Field(default_factory=list, max_length=1000)


class RoleIdsPayload(BaseModel):
    role_ids: list[UUID] = Field(default_factory=list, max_length=1000)


class PermissionIdsPayload(BaseModel):
    permission_ids: list[UUID] = Field(default_factory=list, max_length=1000)


# Relation pairs

class UserRolePair(BaseModel):
    user_id: UUID
    role_id: UUID


class RolePermissionPair(BaseModel):
    role_id: UUID
    permission_id: UUID


class ServiceRolePair(BaseModel):
    service_id: UUID
    role_id: UUID


# Relation batches

class UserRolesPayload(BaseModel):
    user_id: UUID
    role_ids: list[UUID] = Field(default_factory=list, max_length=1000)


class RolePermissionsPayload(BaseModel):
    role_id: UUID
    permission_ids: list[UUID] = Field(default_factory=list, max_length=1000)


class ServiceRolesPayload(BaseModel):
    service_id: UUID
    role_ids: list[UUID] = Field(default_factory=list, max_length=1000)
