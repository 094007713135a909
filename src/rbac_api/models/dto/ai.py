"""Natural-language command DTOs."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from rbac_api.models.domain.command import Command, build_command
from rbac_api.models.domain.context import RbacContext

MAX_COMMAND_TEXT_LENGTH = 1000

CommandType = Literal[
    "create_permission",
    "create_role",
    "assign_permission",
    "remove_permission",
    "delete_permission",
    "delete_role",
    "unknown",
]


class AICommandPayload(BaseModel):
    """Wire form of a structured command."""

    type: CommandType
    parameters: dict[str, str | None] = Field(default_factory=dict, max_length=10)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @classmethod
    def from_command(cls, command: Command, confidence: float) -> "AICommandPayload":
        return cls(type=command.type, parameters=command.parameters, confidence=confidence)

    def to_command(self) -> Command:
        """Convert to the typed command.

        Raises:
            pydantic.ValidationError: If the parameters do not fit the type
        """
        return build_command(self.type, self.parameters)


class AIProcessRequest(BaseModel):
    """Text to interpret."""

    command: str = Field(max_length=MAX_COMMAND_TEXT_LENGTH)


class AIResponse(BaseModel):
    """Result of interpreting (but not executing) a command."""

    success: bool
    command: AICommandPayload | None = None
    message: str
    error: str | None = None
    suggestions: list[str] = Field(default_factory=list)


class CommandExecutionResult(BaseModel):
    """Outcome of executing a command."""

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None


class AICommandRequest(BaseModel):
    """Either free text to interpret and execute, or a structured command."""

    command: str | AICommandPayload = Field(union_mode="left_to_right")

    @field_validator("command")
    @classmethod
    def limit_text_length(cls, v: str | AICommandPayload) -> str | AICommandPayload:
        if isinstance(v, str) and len(v) > MAX_COMMAND_TEXT_LENGTH:
            raise ValueError(f"Command must be at most {MAX_COMMAND_TEXT_LENGTH} characters")
        return v


class AICommandResponse(BaseModel):
    """Result of ``/ai-command``."""

    success: bool
    message: str
    error: str | None = None
    data: dict[str, Any] | None = None
    parsed_command: AICommandPayload | None = None
    suggestions: list[str] = Field(default_factory=list)


class AvailabilityResponse(BaseModel):
    """Whether the text-generation service is configured."""

    available: bool
    provider: str
    message: str


class HelpResponse(BaseModel):
    """Usage help for natural-language commands."""

    help_text: str


class SuggestionsResponse(BaseModel):
    """Example commands built from the current inventory."""

    suggestions: list[str]


class ContextResponse(RbacContext):
    """Current RBAC snapshot."""
