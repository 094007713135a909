"""Checks a structured command against an RBAC snapshot before execution."""

from collections.abc import Callable
from dataclasses import dataclass, field

from rbac_api.models.domain.command import (
    AssignPermissionCommand,
    Command,
    CreatePermissionCommand,
    CreateRoleCommand,
    DeletePermissionCommand,
    DeleteRoleCommand,
    RemovePermissionCommand,
)
from rbac_api.models.domain.context import RbacContext


@dataclass
class CommandValidation:
    """Outcome of validating a command. Any error blocks execution."""

    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class CommandValidator:
    """Existence and duplicate checks for each command kind."""

    def __init__(self, context: RbacContext) -> None:
        self.context = context
        self._checks: dict[type, Callable[[Command], list[str]]] = {
            CreatePermissionCommand: self._check_create_permission,
            CreateRoleCommand: self._check_create_role,
            AssignPermissionCommand: self._check_assign,
            RemovePermissionCommand: self._check_remove,
            DeletePermissionCommand: self._check_delete_permission,
            DeleteRoleCommand: self._check_delete_role,
        }

    def validate(self, command: Command) -> CommandValidation:
        """Validate ``command`` against the snapshot.

        Returns:
            CommandValidation with errors in a stable order
        """
        check = self._checks.get(type(command))
        if check is None:
            return CommandValidation(errors=["Unknown command type"])
        return CommandValidation(errors=check(command))

    def _check_create_permission(self, command: CreatePermissionCommand) -> list[str]:
        if self.context.find_permission(command.name):
            return [f'Permission "{command.name}" already exists']
        return []

    def _check_create_role(self, command: CreateRoleCommand) -> list[str]:
        if self.context.find_role(command.name):
            return [f'Role "{command.name}" already exists']
        return []

    def _resolve_pair(
        self, role_name: str, permission_name: str
    ) -> tuple[list[str], bool]:
        """Return (errors, associated) for a role/permission pair."""
        role = self.context.find_role(role_name)
        permission = self.context.find_permission(permission_name)
        errors = []
        if role is None:
            errors.append(f'Role "{role_name}" does not exist')
        if permission is None:
            errors.append(f'Permission "{permission_name}" does not exist')
        if errors:
            return errors, False
        return [], self.context.has_association(role.id, permission.id)

    def _check_assign(self, command: AssignPermissionCommand) -> list[str]:
        errors, associated = self._resolve_pair(command.role_name, command.permission_name)
        if not errors and associated:
            errors.append(
                f'Role "{command.role_name}" already has permission "{command.permission_name}"'
            )
        return errors

    def _check_remove(self, command: RemovePermissionCommand) -> list[str]:
        errors, associated = self._resolve_pair(command.role_name, command.permission_name)
        if not errors and not associated:
            errors.append(
                f'Role "{command.role_name}" does not have permission "{command.permission_name}"'
            )
        return errors

    def _check_delete_permission(self, command: DeletePermissionCommand) -> list[str]:
        if self.context.find_permission(command.name) is None:
            return [f'Permission "{command.name}" does not exist']
        return []

    def _check_delete_role(self, command: DeleteRoleCommand) -> list[str]:
        if self.context.find_role(command.name) is None:
            return [f'Role "{command.name}" does not exist']
        return []
