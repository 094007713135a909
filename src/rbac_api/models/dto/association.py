"""Role-permission association DTOs."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class AssociationCreate(BaseModel):
    """Grant a permission to a role."""

    role_id: UUID
    permission_id: UUID


class AssociationResponse(BaseModel):
    """Stored association row."""

    role_id: UUID
    permission_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class AssociationDetail(BaseModel):
    """Association flattened with role and permission names."""

    role_id: UUID
    role_name: str
    permission_id: UUID
    permission_name: str
    permission_description: str | None = None


class AssociationListResponse(BaseModel):
    """Association list response."""

    items: list[AssociationDetail]
    total: int


class BulkAssociationRequest(BaseModel):
    """Assign or unassign several permissions for one role."""

    role_id: UUID
    permission_ids: list[UUID] = Field(min_length=1, max_length=500)
    operation: Literal["assign", "unassign"]


class BulkAssociationResponse(BaseModel):
    """Outcome of a bulk association change."""

    message: str
    role_id: UUID
    permission_ids: list[UUID]
    operation: Literal["assign", "unassign"]
    affected: int
