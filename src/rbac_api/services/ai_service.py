"""Natural-language command service."""

import logging
import random

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.config import Settings
from rbac_api.exceptions import ServiceUnavailableError, ValidationError
from rbac_api.models.domain.command import Command
from rbac_api.models.domain.context import RbacContext
from rbac_api.models.dto.ai import (
    AICommandPayload,
    AICommandRequest,
    AICommandResponse,
    AIResponse,
)
from rbac_api.providers.base import TextGenerationProvider
from rbac_api.services.cache_service import CacheService
from rbac_api.services.command_executor import CommandExecutor
from rbac_api.services.command_interpreter import (
    NOT_ACTIONABLE_ERROR,
    NOT_ACTIONABLE_MESSAGE,
    PROVIDER_FAILURE_SUGGESTIONS,
    CommandInterpreter,
    InterpretationFailure,
)
from rbac_api.services.command_validator import CommandValidator
from rbac_api.services.context_service import RbacContextManager

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 6

EMPTY_INPUT_SUGGESTIONS = [
    'Try: "Create a new permission called read_users"',
    'Or: "Give the admin role the read_users permission"',
]

VALIDATION_TIPS = [
    "Check if the referenced permissions or roles exist",
    "Try using the exact names as they appear in the system",
]

FALLBACK_SUGGESTIONS = [
    "Create a new permission called read_users",
    "Create a new role called editor",
    "Give the admin role the read_users permission",
    "Remove write_posts permission from guest role",
    "Delete the old_permission permission",
    "Delete the unused_role role",
]

HELP_TEXT = """Natural Language Commands Help:

CREATING ITEMS:
• "Create a new permission called [name]"
• "Add permission [name] with description [description]"
• "Create a new role called [name]"
• "Add role [name]"

MANAGING ASSOCIATIONS:
• "Give [role_name] the [permission_name] permission"
• "Assign [permission_name] to [role_name]"
• "Remove [permission_name] from [role_name]"
• "Take away [permission_name] permission from [role_name]"

DELETING ITEMS:
• "Delete the [permission_name] permission"
• "Remove permission [permission_name]"
• "Delete the [role_name] role"
• "Remove role [role_name]"

TIPS:
• Use exact names as they appear in your system
• Be specific about what you want to do
• You can use natural variations of these commands
• If a command fails, try rephrasing it"""


class AIService:
    """Interprets, validates and executes natural-language RBAC commands."""

    def __init__(
        self,
        session: AsyncSession,
        provider: TextGenerationProvider,
        context_manager: RbacContextManager,
        settings: Settings,
        cache: CacheService | None = None,
    ) -> None:
        """Initialize service with its collaborators."""
        self.session = session
        self.settings = settings
        self.context_manager = context_manager
        self.interpreter = CommandInterpreter(provider, settings.ai_confidence_threshold)
        self.executor = CommandExecutor(session, cache, context_manager)

    def is_available(self) -> bool:
        """Whether an API key for the text generation service is configured."""
        return self.settings.ai_configured

    def _require_available(self) -> None:
        if not self.is_available():
            raise ServiceUnavailableError(
                "AI service is currently unavailable",
                {
                    "reason": "Text generation API key is not configured",
                    "suggestions": [
                        "Use the manual interface to manage permissions and roles",
                        "Contact your administrator to configure the AI service",
                    ],
                },
            )

    async def _process(self, user_input: str) -> tuple[AIResponse, Command | None]:
        """Interpret and validate without executing.

        Returns:
            The response, and the command when it may be executed
        """
        if not user_input or not user_input.strip():
            return (
                AIResponse(
                    success=False,
                    message="Please enter a command to process.",
                    suggestions=list(EMPTY_INPUT_SUGGESTIONS),
                ),
                None,
            )

        context = await self.context_manager.refresh(self.session)
        result = await self.interpreter.interpret(user_input.strip(), context)

        if isinstance(result, InterpretationFailure):
            return (
                AIResponse(
                    success=False,
                    message=result.message,
                    error=result.error,
                    suggestions=result.suggestions,
                ),
                None,
            )

        payload = AICommandPayload.from_command(result.command, result.confidence)
        if not result.success:
            return (
                AIResponse(
                    success=False,
                    command=payload,
                    message=result.message,
                    suggestions=result.suggestions,
                ),
                None,
            )

        validation = CommandValidator(context).validate(result.command)
        if not validation.valid:
            return (
                AIResponse(
                    success=False,
                    command=payload,
                    message="Command validation failed",
                    error=", ".join(validation.errors),
                    suggestions=validation.errors + VALIDATION_TIPS,
                ),
                None,
            )

        return (
            AIResponse(
                success=True,
                command=payload,
                message=result.message,
                suggestions=result.suggestions,
            ),
            result.command,
        )

    async def process_command(self, user_input: str) -> AIResponse:
        """Turn a sentence into a validated command without executing it.

        Args:
            user_input: Sentence typed by the operator

        Returns:
            AIResponse with the parsed command when successful

        Raises:
            ServiceUnavailableError: If the text generation service is not configured
        """
        self._require_available()
        response, _ = await self._process(user_input)
        return response

    async def run_command(self, request: AICommandRequest) -> AICommandResponse:
        """Execute a structured command, or interpret then execute a sentence.

        Args:
            request: Either a command payload or free text

        Returns:
            AICommandResponse describing the outcome

        Raises:
            ValidationError: If the payload or text is malformed
            ServiceUnavailableError: If text is given and no provider is configured
        """
        if isinstance(request.command, AICommandPayload):
            payload = request.command
            try:
                command = payload.to_command()
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid command parameters",
                    {"errors": [err["msg"] for err in e.errors()]},
                ) from e
            if not self.interpreter.is_actionable(command.type, payload.confidence):
                return AICommandResponse(
                    success=False,
                    message=NOT_ACTIONABLE_MESSAGE,
                    error=NOT_ACTIONABLE_ERROR,
                    suggestions=list(PROVIDER_FAILURE_SUGGESTIONS),
                    parsed_command=payload,
                )
            result = await self.executor.execute(command)
            return AICommandResponse(
                success=result.success,
                message=result.message,
                error=result.error,
                data=result.data,
                parsed_command=payload,
            )

        if not request.command.strip():
            raise ValidationError(
                "Command must be a non-empty string or parsed command object",
                {"suggestions": list(EMPTY_INPUT_SUGGESTIONS)},
            )

        self._require_available()
        response, command = await self._process(request.command)
        if command is None:
            return AICommandResponse(
                success=False,
                message=response.message,
                error=response.error,
                suggestions=response.suggestions,
                parsed_command=None,
            )

        result = await self.executor.execute(command)
        return AICommandResponse(
            success=result.success,
            message=result.message,
            error=result.error,
            data=result.data,
            parsed_command=response.command,
            suggestions=[] if result.success else response.suggestions,
        )

    async def get_command_suggestions(self) -> list[str]:
        """Build example commands from the current inventory.

        Returns:
            Up to six suggestions
        """
        context = await self.context_manager.get_context(self.session)
        if not context.permissions and not context.roles:
            return list(FALLBACK_SUGGESTIONS)

        suggestions = [
            "Create a new permission called [permission_name]",
            "Create a new role called [role_name]",
        ]
        if context.permissions and context.roles:
            permission = context.permissions[0].name
            role = context.roles[0].name
            suggestions.append(f"Give the {role} role the {permission} permission")
            suggestions.append(f"Remove {permission} permission from {role} role")
        if context.permissions:
            suggestions.append(f"Delete the {random.choice(context.permissions).name} permission")
        if context.roles:
            suggestions.append(f"Delete the {random.choice(context.roles).name} role")
        return suggestions[:MAX_SUGGESTIONS]

    @staticmethod
    def get_help_text() -> str:
        """Static usage help."""
        return HELP_TEXT

    async def get_system_context(self) -> RbacContext:
        """Current RBAC snapshot."""
        return await self.context_manager.get_context(self.session)
