"""Dashboard DTOs."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class RecentActivity(BaseModel):
    """A recently created permission or role."""

    id: str
    type: Literal["permission_created", "role_created"]
    description: str
    timestamp: datetime


class DashboardStatsResponse(BaseModel):
    """Dashboard statistics response."""

    total_permissions: int
    total_roles: int
    total_associations: int
    recent_activity: list[RecentActivity]
