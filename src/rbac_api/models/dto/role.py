"""Role DTOs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_api.utils.validation import NAME_MAX_LENGTH, NAME_PATTERN


class RoleCreate(BaseModel):
    """Create role request."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH, pattern=NAME_PATTERN)


class RoleUpdate(BaseModel):
    """Update role request."""

    name: str | None = Field(
        default=None, min_length=1, max_length=NAME_MAX_LENGTH, pattern=NAME_PATTERN
    )


class RoleResponse(BaseModel):
    """Role response."""

    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoleListResponse(BaseModel):
    """Paginated role list response."""

    items: list[RoleResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
