"""API routers."""

from rbac_api.routers import (
    ai_command,
    ai_service,
    associations,
    dashboard,
    permissions,
    roles,
)

__all__ = [
    "ai_command",
    "ai_service",
    "associations",
    "dashboard",
    "permissions",
    "roles",
]
