"""Tests for checking commands against an RBAC snapshot."""

from uuid import uuid4

import pytest

from rbac_api.models.domain.command import (
    AssignPermissionCommand,
    CreatePermissionCommand,
    CreateRoleCommand,
    DeletePermissionCommand,
    DeleteRoleCommand,
    RemovePermissionCommand,
    UnknownCommand,
)
from rbac_api.models.domain.context import AssociationRef, PermissionRef, RbacContext, RoleRef
from rbac_api.services.command_validator import CommandValidator


@pytest.fixture
def validator() -> CommandValidator:
    read_users = PermissionRef(id=uuid4(), name="read_users")
    write_users = PermissionRef(id=uuid4(), name="write_users")
    admin = RoleRef(id=uuid4(), name="admin")
    viewer = RoleRef(id=uuid4(), name="viewer")
    context = RbacContext(
        permissions=[read_users, write_users],
        roles=[admin, viewer],
        associations=[AssociationRef(role_id=admin.id, permission_id=read_users.id)],
    )
    return CommandValidator(context)


@pytest.mark.parametrize(
    ("command", "errors"),
    [
        (CreatePermissionCommand(name="delete_users"), []),
        (CreatePermissionCommand(name="Read_Users"), ['Permission "Read_Users" already exists']),
        (CreateRoleCommand(name="editor"), []),
        (CreateRoleCommand(name="admin"), ['Role "admin" already exists']),
        (AssignPermissionCommand(role_name="viewer", permission_name="read_users"), []),
        (
            AssignPermissionCommand(role_name="admin", permission_name="read_users"),
            ['Role "admin" already has permission "read_users"'],
        ),
        (
            AssignPermissionCommand(role_name="ghost", permission_name="nothing"),
            ['Role "ghost" does not exist', 'Permission "nothing" does not exist'],
        ),
        (RemovePermissionCommand(role_name="admin", permission_name="read_users"), []),
        (
            RemovePermissionCommand(role_name="viewer", permission_name="read_users"),
            ['Role "viewer" does not have permission "read_users"'],
        ),
        (
            RemovePermissionCommand(role_name="admin", permission_name="nothing"),
            ['Permission "nothing" does not exist'],
        ),
        (DeletePermissionCommand(name="write_users"), []),
        (DeletePermissionCommand(name="nothing"), ['Permission "nothing" does not exist']),
        (DeleteRoleCommand(name="VIEWER"), []),
        (DeleteRoleCommand(name="ghost"), ['Role "ghost" does not exist']),
        (UnknownCommand(), ["Unknown command type"]),
    ],
)
def test_validate(validator: CommandValidator, command, errors: list[str]) -> None:
    result = validator.validate(command)

    assert result.errors == errors
    assert result.valid is (not errors)
