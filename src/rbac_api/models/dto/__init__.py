"""Data Transfer Objects package."""

from rbac_api.models.dto.ai import (
    AICommandPayload,
    AICommandRequest,
    AICommandResponse,
    AIProcessRequest,
    AIResponse,
    CommandExecutionResult,
)
from rbac_api.models.dto.association import (
    AssociationCreate,
    AssociationDetail,
    AssociationListResponse,
    AssociationResponse,
    BulkAssociationRequest,
    BulkAssociationResponse,
)
from rbac_api.models.dto.common import DeleteResponse, ErrorResponse, MessageResponse
from rbac_api.models.dto.dashboard import DashboardStatsResponse, RecentActivity
from rbac_api.models.dto.permission import (
    PermissionCreate,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_api.models.dto.role import RoleCreate, RoleListResponse, RoleResponse, RoleUpdate

__all__ = [
    "AICommandPayload",
    "AICommandRequest",
    "AICommandResponse",
    "AIProcessRequest",
    "AIResponse",
    "AssociationCreate",
    "AssociationDetail",
    "AssociationListResponse",
    "AssociationResponse",
    "BulkAssociationRequest",
    "BulkAssociationResponse",
    "CommandExecutionResult",
    "DashboardStatsResponse",
    "DeleteResponse",
    "ErrorResponse",
    "MessageResponse",
    "PermissionCreate",
    "PermissionListResponse",
    "PermissionResponse",
    "PermissionUpdate",
    "RecentActivity",
    "RoleCreate",
    "RoleListResponse",
    "RoleResponse",
    "RoleUpdate",
]
