"""
Relation schemas.
"""

from uuid import UUID
from pydantic import BaseModel, Field


class IdList(BaseModel):
    """Batch payload: the right-hand ids to assign, revoke or replace."""
    ids: list[UUID] = Field(default_factory=list, max_length=1000)


class ExistsResponse(BaseModel):
    exists: bool


class BatchAssignmentResult(BaseModel):
    """
    Outcome of assign_multiple.

    duplicates were already present and skipped; new_assignments were inserted.
    """
    assigned: int
    skipped: int
    duplicates: list[UUID]
    new_assignments: list[UUID]
