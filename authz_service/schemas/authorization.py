"""
Authorization check schemas.
"""

from enum import Enum
from uuid import UUID
from pydantic import BaseModel, Field


class CheckPermissionRequest(BaseModel):
    user_id: UUID
    action: str = Field(min_length=1, max_length=100)
    service_id: UUID | None = None


class CheckPermissionResponse(BaseModel):
    has_permission: bool


class CheckRoleRequest(BaseModel):
    user_id: UUID
    role_name: str = Field(min_length=1, max_length=50)
    service_id: UUID | None = None


class CheckRoleResponse(BaseModel):
    has_role: bool


class UserScopeRequest(BaseModel):
    """Listing payload: a user, optionally scoped to one service."""
    user_id: UUID
    service_id: UUID | None = None


class UserRequest(BaseModel):
    user_id: UUID


class Operator(str, Enum):
    AND = "AND"
    OR = "OR"


class ComplexCheckRequest(BaseModel):
    """
    Combined permission + role check.

    permission_operator / role_operator combine items within each list;
    combination_operator combines the two partial results. An empty list
    counts as satisfied.
    """
    user_id: UUID
    permissions: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)
    permission_operator: Operator = Operator.AND
    role_operator: Operator = Operator.AND
    combination_operator: Operator = Operator.AND
    service_id: UUID | None = None


class ComplexCheckResponse(BaseModel):
    allowed: bool
