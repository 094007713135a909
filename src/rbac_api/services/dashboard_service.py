"""Dashboard statistics service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.models.dto.dashboard import DashboardStatsResponse, RecentActivity
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository
from rbac_api.services.cache_service import CacheService

logger = logging.getLogger(__name__)

RECENT_PER_KIND = 5
RECENT_ACTIVITY_LIMIT = 10


class DashboardService:
    """Service for dashboard statistics."""

    def __init__(self, session: AsyncSession, cache: CacheService | None = None) -> None:
        """Initialize service with database session."""
        self.session = session
        self.cache = cache
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.association_repo = RolePermissionRepository(session)

    async def get_stats(self) -> DashboardStatsResponse:
        """Get entity totals and the most recent creations.

        Served from the cache when available; any RBAC mutation clears it.

        Returns:
            DashboardStatsResponse
        """
        if self.cache is not None:
            cached = await self.cache.get_dashboard_stats()
            if cached is not None:
                return DashboardStatsResponse.model_validate(cached)

        stats = DashboardStatsResponse(
            total_permissions=await self.permission_repo.count(),
            total_roles=await self.role_repo.count(),
            total_associations=await self.association_repo.count(),
            recent_activity=await self._recent_activity(),
        )

        if self.cache is not None:
            await self.cache.set_dashboard_stats(stats)
        return stats

    async def _recent_activity(self) -> list[RecentActivity]:
        permissions = await self.permission_repo.get_recent(RECENT_PER_KIND)
        roles = await self.role_repo.get_recent(RECENT_PER_KIND)

        activity = [
            RecentActivity(
                id=f"permission_{p.id}",
                type="permission_created",
                description=f'Permission "{p.name}" was created',
                timestamp=p.created_at,
            )
            for p in permissions
        ] + [
            RecentActivity(
                id=f"role_{r.id}",
                type="role_created",
                description=f'Role "{r.name}" was created',
                timestamp=r.created_at,
            )
            for r in roles
        ]
        activity.sort(key=lambda item: item.timestamp, reverse=True)
        return activity[:RECENT_ACTIVITY_LIMIT]
