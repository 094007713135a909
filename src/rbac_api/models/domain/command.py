"""Structured commands produced from natural-language input.

Each command kind is its own model carrying only the fields it needs. The
``type`` field is the discriminator, so a raw ``{type, parameters}`` pair
from the text-generation service either validates into exactly one kind or
fails validation.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from rbac_api.utils.validation import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, NAME_PATTERN

# New entity names must satisfy the same rules as the REST create endpoints
NewName = Annotated[
    str, Field(min_length=1, max_length=NAME_MAX_LENGTH, pattern=NAME_PATTERN)
]
# Existing entities are looked up by name, so only presence is required here
ExistingName = Annotated[str, Field(min_length=1, max_length=NAME_MAX_LENGTH)]

COMMAND_TYPES = (
    "create_permission",
    "create_role",
    "assign_permission",
    "remove_permission",
    "delete_permission",
    "delete_role",
    "unknown",
)


class BaseCommand(BaseModel):
    """Common behaviour of all command kinds."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    type: str

    @property
    def parameters(self) -> dict[str, str]:
        """Flat parameter map as exchanged with clients."""
        return self.model_dump(exclude={"type"}, exclude_none=True)


class CreatePermissionCommand(BaseCommand):
    type: Literal["create_permission"] = "create_permission"
    name: NewName
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("description")
    @classmethod
    def empty_description_is_none(cls, v: str | None) -> str | None:
        return v or None


class CreateRoleCommand(BaseCommand):
    type: Literal["create_role"] = "create_role"
    name: NewName


class AssignPermissionCommand(BaseCommand):
    type: Literal["assign_permission"] = "assign_permission"
    role_name: ExistingName
    permission_name: ExistingName


class RemovePermissionCommand(BaseCommand):
    type: Literal["remove_permission"] = "remove_permission"
    role_name: ExistingName
    permission_name: ExistingName


class DeletePermissionCommand(BaseCommand):
    type: Literal["delete_permission"] = "delete_permission"
    name: ExistingName


class DeleteRoleCommand(BaseCommand):
    type: Literal["delete_role"] = "delete_role"
    name: ExistingName


class UnknownCommand(BaseCommand):
    """The input did not map to any supported action."""

    type: Literal["unknown"] = "unknown"


Command = Annotated[
    Union[
        CreatePermissionCommand,
        CreateRoleCommand,
        AssignPermissionCommand,
        RemovePermissionCommand,
        DeletePermissionCommand,
        DeleteRoleCommand,
        UnknownCommand,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def build_command(command_type: str, parameters: dict[str, Any]) -> Command:
    """Build a typed command from a type name and a parameter map.

    Unrecognised types become ``UnknownCommand``. Parameters that do not
    fit the kind raise ``pydantic.ValidationError``.

    Args:
        command_type: Command type name
        parameters: Flat parameter map

    Returns:
        The typed command
    """
    if command_type not in COMMAND_TYPES:
        command_type = "unknown"
    return _command_adapter.validate_python({**parameters, "type": command_type})
