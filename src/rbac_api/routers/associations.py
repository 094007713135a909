"""Role-permission associations router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rbac_api.dependencies import get_association_service
from rbac_api.models.dto.association import (
    AssociationCreate,
    AssociationListResponse,
    AssociationResponse,
    BulkAssociationRequest,
    BulkAssociationResponse,
)
from rbac_api.models.dto.common import MessageResponse
from rbac_api.security.auth import OperatorUser
from rbac_api.services.association_service import AssociationService

router = APIRouter()


@router.get("", response_model=AssociationListResponse)
async def list_associations(
    current_user: OperatorUser,
    service: Annotated[AssociationService, Depends(get_association_service)],
    role_id: UUID | None = Query(default=None),
    permission_id: UUID | None = Query(default=None),
) -> AssociationListResponse:
    """List associations with role and permission names."""
    return await service.list_associations(role_id=role_id, permission_id=permission_id)


@router.post("", response_model=AssociationResponse, status_code=status.HTTP_201_CREATED)
async def create_association(
    data: AssociationCreate,
    current_user: OperatorUser,
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> AssociationResponse:
    """Grant a permission to a role."""
    return await service.create_association(data.role_id, data.permission_id)


@router.delete("", response_model=MessageResponse)
async def delete_association(
    current_user: OperatorUser,
    service: Annotated[AssociationService, Depends(get_association_service)],
    role_id: UUID = Query(...),
    permission_id: UUID = Query(...),
) -> MessageResponse:
    """Revoke a permission from a role."""
    await service.delete_association(role_id, permission_id)
    return MessageResponse(message="Association deleted successfully")


@router.post("/bulk", response_model=BulkAssociationResponse)
async def bulk_update_associations(
    data: BulkAssociationRequest,
    current_user: OperatorUser,
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> BulkAssociationResponse:
    """Assign or unassign several permissions for one role."""
    return await service.bulk_update(data)
