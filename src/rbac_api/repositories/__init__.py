"""Repositories package."""

from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository

__all__ = [
    "PermissionRepository",
    "RolePermissionRepository",
    "RoleRepository",
]
