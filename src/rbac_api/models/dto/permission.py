"""Permission DTOs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_api.utils.validation import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, NAME_PATTERN


class PermissionCreate(BaseModel):
    """Create permission request."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH, pattern=NAME_PATTERN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)


class PermissionUpdate(BaseModel):
    """Update permission request. Omitted fields are left unchanged."""

    name: str | None = Field(
        default=None, min_length=1, max_length=NAME_MAX_LENGTH, pattern=NAME_PATTERN
    )
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)


class PermissionResponse(BaseModel):
    """Permission response."""

    id: UUID
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PermissionListResponse(BaseModel):
    """Paginated permission list response."""

    items: list[PermissionResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
