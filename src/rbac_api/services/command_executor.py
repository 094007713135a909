"""Applies structured commands through the same services as the REST API."""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.exceptions import PermissionNotFoundError, RbacAPIError, RoleNotFoundError
from rbac_api.models.domain.command import (
    AssignPermissionCommand,
    Command,
    CreatePermissionCommand,
    CreateRoleCommand,
    DeletePermissionCommand,
    DeleteRoleCommand,
    RemovePermissionCommand,
)
from rbac_api.models.dto.ai import CommandExecutionResult
from rbac_api.models.dto.permission import PermissionCreate
from rbac_api.models.dto.role import RoleCreate
from rbac_api.models.orm.permission import PermissionORM
from rbac_api.models.orm.role import RoleORM
from rbac_api.services.association_service import AssociationService
from rbac_api.services.cache_service import CacheService
from rbac_api.services.context_service import RbacContextManager
from rbac_api.services.permission_service import PermissionService
from rbac_api.services.role_service import RoleService

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Executes one command and reports the outcome.

    Every branch looks its targets up in storage again rather than trusting
    an earlier validation, since state may have changed in between. Domain
    errors become an unsuccessful result; nothing is written in that case.
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: CacheService | None = None,
        context_manager: RbacContextManager | None = None,
    ) -> None:
        """Initialize executor with database session."""
        self.session = session
        self.context_manager = context_manager
        self.permission_service = PermissionService(session, cache)
        self.role_service = RoleService(session, cache)
        self.association_service = AssociationService(session, cache)
        self._handlers: dict[type, Callable[[Command], Awaitable[CommandExecutionResult]]] = {
            CreatePermissionCommand: self._create_permission,
            CreateRoleCommand: self._create_role,
            AssignPermissionCommand: self._assign_permission,
            RemovePermissionCommand: self._remove_permission,
            DeletePermissionCommand: self._delete_permission,
            DeleteRoleCommand: self._delete_role,
        }

    async def execute(self, command: Command) -> CommandExecutionResult:
        """Execute ``command``.

        Args:
            command: Typed command

        Returns:
            CommandExecutionResult describing success or the reason for failure
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            return CommandExecutionResult(
                success=False,
                message="Unknown command type",
                error=f"Unsupported command type: {command.type}",
            )

        try:
            result = await handler(command)
        except RbacAPIError as e:
            logger.info(f"Command {command.type} not executed: {e.message}")
            return CommandExecutionResult(success=False, message=e.message, error=e.error)

        if self.context_manager is not None:
            self.context_manager.invalidate()
        return result

    async def _find_role(self, name: str) -> RoleORM:
        role = await self.role_service.find_by_name(name)
        if role is None:
            raise RoleNotFoundError(name=name)
        return role

    async def _find_permission(self, name: str) -> PermissionORM:
        permission = await self.permission_service.find_by_name(name)
        if permission is None:
            raise PermissionNotFoundError(name=name)
        return permission

    async def _create_permission(self, command: CreatePermissionCommand) -> CommandExecutionResult:
        permission = await self.permission_service.create_permission(
            PermissionCreate(name=command.name, description=command.description)
        )
        return CommandExecutionResult(
            success=True,
            message=f'Permission "{permission.name}" created successfully',
            data=permission.model_dump(mode="json"),
        )

    async def _create_role(self, command: CreateRoleCommand) -> CommandExecutionResult:
        role = await self.role_service.create_role(RoleCreate(name=command.name))
        return CommandExecutionResult(
            success=True,
            message=f'Role "{role.name}" created successfully',
            data=role.model_dump(mode="json"),
        )

    async def _assign_permission(self, command: AssignPermissionCommand) -> CommandExecutionResult:
        role = await self._find_role(command.role_name)
        permission = await self._find_permission(command.permission_name)
        association = await self.association_service.create_association(role.id, permission.id)
        return CommandExecutionResult(
            success=True,
            message=f'Permission "{permission.name}" assigned to role "{role.name}" successfully',
            data=association.model_dump(mode="json"),
        )

    async def _remove_permission(self, command: RemovePermissionCommand) -> CommandExecutionResult:
        role = await self._find_role(command.role_name)
        permission = await self._find_permission(command.permission_name)
        await self.association_service.delete_association(role.id, permission.id)
        return CommandExecutionResult(
            success=True,
            message=f'Permission "{permission.name}" removed from role "{role.name}" successfully',
            data={"role_id": str(role.id), "permission_id": str(permission.id)},
        )

    async def _delete_permission(self, command: DeletePermissionCommand) -> CommandExecutionResult:
        permission = await self._find_permission(command.name)
        name, permission_id = permission.name, permission.id
        removed = await self.permission_service.delete_permission(permission_id)
        return CommandExecutionResult(
            success=True,
            message=f'Permission "{name}" deleted successfully',
            data={"id": str(permission_id), "associations_removed": removed},
        )

    async def _delete_role(self, command: DeleteRoleCommand) -> CommandExecutionResult:
        role = await self._find_role(command.name)
        name, role_id = role.name, role.id
        removed = await self.role_service.delete_role(role_id)
        return CommandExecutionResult(
            success=True,
            message=f'Role "{name}" deleted successfully',
            data={"id": str(role_id), "associations_removed": removed},
        )
