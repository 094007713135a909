"""Business logic services."""

from rbac_api.services.ai_service import AIService
from rbac_api.services.association_service import AssociationService
from rbac_api.services.cache_service import CacheService
from rbac_api.services.command_executor import CommandExecutor
from rbac_api.services.command_interpreter import CommandInterpreter
from rbac_api.services.command_validator import CommandValidator
from rbac_api.services.context_service import RbacContextManager
from rbac_api.services.dashboard_service import DashboardService
from rbac_api.services.permission_service import PermissionService
from rbac_api.services.role_service import RoleService

__all__ = [
    "AIService",
    "AssociationService",
    "CacheService",
    "CommandExecutor",
    "CommandInterpreter",
    "CommandValidator",
    "DashboardService",
    "PermissionService",
    "RbacContextManager",
    "RoleService",
]
