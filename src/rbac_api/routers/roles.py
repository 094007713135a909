"""Roles router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rbac_api.dependencies import get_role_service
from rbac_api.models.dto.common import DeleteResponse
from rbac_api.models.dto.role import (
    RoleCreate,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
)
from rbac_api.security.auth import OperatorUser
from rbac_api.services.role_service import RoleService
from rbac_api.utils.validation import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, MAX_SEARCH_LENGTH

router = APIRouter()


@router.get("", response_model=RoleListResponse)
async def list_roles(
    current_user: OperatorUser,
    service: Annotated[RoleService, Depends(get_role_service)],
    query: str | None = Query(default=None, max_length=MAX_SEARCH_LENGTH),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
) -> RoleListResponse:
    """List roles, optionally filtered by name."""
    return await service.list_roles(query=query, limit=limit, offset=offset)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    current_user: OperatorUser,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleResponse:
    """Create a role."""
    return await service.create_role(data)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: UUID,
    current_user: OperatorUser,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleResponse:
    """Get a role by ID."""
    return await service.get_role(role_id)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    current_user: OperatorUser,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleResponse:
    """Rename a role."""
    return await service.update_role(role_id, data)


@router.delete("/{role_id}", response_model=DeleteResponse)
async def delete_role(
    role_id: UUID,
    current_user: OperatorUser,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> DeleteResponse:
    """Delete a role together with all of its permission grants."""
    removed = await service.delete_role(role_id)
    return DeleteResponse(
        message="Role deleted successfully", associations_removed=removed
    )
