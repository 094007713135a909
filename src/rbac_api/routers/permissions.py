"""Permissions router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rbac_api.dependencies import get_permission_service
from rbac_api.models.dto.common import DeleteResponse
from rbac_api.models.dto.permission import (
    PermissionCreate,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_api.security.auth import OperatorUser
from rbac_api.services.permission_service import PermissionService
from rbac_api.utils.validation import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, MAX_SEARCH_LENGTH

router = APIRouter()


@router.get("", response_model=PermissionListResponse)
async def list_permissions(
    current_user: OperatorUser,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    query: str | None = Query(default=None, max_length=MAX_SEARCH_LENGTH),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
) -> PermissionListResponse:
    """List permissions, optionally filtered by name or description."""
    return await service.list_permissions(query=query, limit=limit, offset=offset)


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    current_user: OperatorUser,
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> PermissionResponse:
    """Create a permission."""
    return await service.create_permission(data)


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: UUID,
    current_user: OperatorUser,
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> PermissionResponse:
    """Get a permission by ID."""
    return await service.get_permission(permission_id)


@router.put("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: UUID,
    data: PermissionUpdate,
    current_user: OperatorUser,
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> PermissionResponse:
    """Rename a permission or change its description."""
    return await service.update_permission(permission_id, data)


@router.delete("/{permission_id}", response_model=DeleteResponse)
async def delete_permission(
    permission_id: UUID,
    current_user: OperatorUser,
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> DeleteResponse:
    """Delete a permission and revoke it from every role holding it."""
    removed = await service.delete_permission(permission_id)
    return DeleteResponse(
        message="Permission deleted successfully", associations_removed=removed
    )
