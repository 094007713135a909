"""Dashboard router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rbac_api.dependencies import get_dashboard_service
from rbac_api.models.dto.dashboard import DashboardStatsResponse
from rbac_api.security.auth import OperatorUser
from rbac_api.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    current_user: OperatorUser,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardStatsResponse:
    """Get entity totals and recent activity.

    Response is cached until the next permission, role or association change.
    """
    return await service.get_stats()
