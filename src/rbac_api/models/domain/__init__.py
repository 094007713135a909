"""Domain models package."""

from rbac_api.models.domain.command import (
    AssignPermissionCommand,
    Command,
    CreatePermissionCommand,
    CreateRoleCommand,
    DeletePermissionCommand,
    DeleteRoleCommand,
    RemovePermissionCommand,
    UnknownCommand,
    build_command,
)
from rbac_api.models.domain.context import AssociationRef, PermissionRef, RbacContext, RoleRef

__all__ = [
    "AssignPermissionCommand",
    "AssociationRef",
    "Command",
    "CreatePermissionCommand",
    "CreateRoleCommand",
    "DeletePermissionCommand",
    "DeleteRoleCommand",
    "PermissionRef",
    "RbacContext",
    "RemovePermissionCommand",
    "RoleRef",
    "UnknownCommand",
    "build_command",
]
