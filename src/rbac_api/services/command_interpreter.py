"""Turns free text into a structured command using a text-generation service."""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from rbac_api.exceptions import RbacAPIError
from rbac_api.models.domain.command import Command, build_command
from rbac_api.models.domain.context import RbacContext
from rbac_api.providers.base import TextGenerationProvider
from rbac_api.utils.secure_logging import log_warning

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.5

UNPARSEABLE_MESSAGE = "I couldn't understand your command. Please try rephrasing it."
UNPARSEABLE_ERROR = "Failed to parse AI response"
UNPARSEABLE_SUGGESTIONS = [
    "Try using simpler language",
    "Be more specific about what you want to do",
    'Use examples like: "Create a new permission called read_users"',
    'Or: "Give the admin role the read_users permission"',
]

PROVIDER_FAILURE_MESSAGE = "Failed to process your command. Please try again."
PROVIDER_FAILURE_SUGGESTIONS = [
    "Try rephrasing your command",
    "Check if you're using correct permission or role names",
    "Use simpler language",
]

NOT_ACTIONABLE_MESSAGE = "The command is not clear enough to execute. Please try rephrasing it."
NOT_ACTIONABLE_ERROR = "Command type is unknown or confidence is below the threshold"

# Greedy: from the first "{" to the last "}" of the reply
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

PROMPT_TEMPLATE = """You are an RBAC (Role-Based Access Control) configuration assistant. Your job is to interpret natural language commands and convert them into structured actions.

{context}

SUPPORTED COMMANDS:
1. Create permission: "Create a new permission called [name]" or "Add permission [name] with description [desc]"
2. Create role: "Create a new role called [name]" or "Add role [name]"
3. Assign permission: "Give role [role_name] the permission [permission_name]" or "Assign [permission_name] to [role_name]"
4. Remove permission from role: "Remove permission [permission_name] from role [role_name]"
5. Delete permission: "Delete permission [permission_name]"
6. Delete role: "Delete role [role_name]"

USER COMMAND: "{user_input}"

Please analyze the command and respond with a JSON object in this exact format:
{{
  "type": "create_permission|create_role|assign_permission|remove_permission|delete_permission|delete_role|unknown",
  "parameters": {{
    // For create_permission: {{"name": "permission_name", "description": "optional_description"}}
    // For create_role: {{"name": "role_name"}}
    // For assign_permission: {{"role_name": "role_name", "permission_name": "permission_name"}}
    // For remove_permission: {{"role_name": "role_name", "permission_name": "permission_name"}}
    // For delete_permission: {{"name": "permission_name"}}
    // For delete_role: {{"name": "role_name"}}
  }},
  "confidence": 0.0-1.0,
  "message": "Human-readable explanation of what will be done",
  "validation_errors": ["array of any validation issues found"],
  "suggestions": ["array of helpful suggestions if command is unclear"]
}}

VALIDATION RULES:
- Check if referenced permissions/roles exist in the current system
- Prevent duplicate creation of permissions/roles
- Ensure role-permission associations don't already exist when assigning
- Ensure associations exist when removing
- Provide helpful error messages for validation failures

Respond ONLY with the JSON object, no additional text."""


@dataclass
class Interpretation:
    """A reply that mapped onto a command.

    ``success`` is False when the command is ``unknown`` or the confidence
    does not exceed the threshold; such commands must not be executed.
    """

    command: Command
    confidence: float
    success: bool
    message: str
    suggestions: list[str] = field(default_factory=list)


@dataclass
class InterpretationFailure:
    """The service could not be reached or its reply did not fit the schema."""

    message: str
    error: str
    suggestions: list[str] = field(default_factory=list)


class MalformedReplyError(ValueError):
    """Raised when a reply cannot be mapped onto the command schema."""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


class CommandInterpreter:
    """Maps a sentence to one of the supported commands.

    Language understanding is delegated to a ``TextGenerationProvider``;
    this class owns the prompt and the strict checking of the reply.
    """

    def __init__(
        self,
        provider: TextGenerationProvider,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> None:
        self.provider = provider
        self.confidence_threshold = confidence_threshold

    def is_actionable(self, command_type: str, confidence: float) -> bool:
        """Whether a command of this kind and confidence may be executed."""
        return command_type != "unknown" and confidence > self.confidence_threshold

    @staticmethod
    def build_prompt(user_input: str, context: RbacContext) -> str:
        """Render the instruction prompt for one user sentence."""
        # Quotes would end the USER COMMAND literal early
        safe_input = user_input.replace('"', "'")
        return PROMPT_TEMPLATE.format(context=context.describe(), user_input=safe_input)

    async def interpret(
        self, user_input: str, context: RbacContext
    ) -> Interpretation | InterpretationFailure:
        """Interpret ``user_input`` against the given inventory.

        Args:
            user_input: Sentence typed by the operator
            context: Current RBAC snapshot included in the prompt

        Returns:
            Interpretation, or InterpretationFailure if no command could be derived
        """
        prompt = self.build_prompt(user_input, context)
        try:
            reply = await self.provider.generate(prompt)
        except RbacAPIError as e:
            log_warning(logger, "Text generation failed", e)
            return InterpretationFailure(
                message=PROVIDER_FAILURE_MESSAGE,
                error=e.message,
                suggestions=list(PROVIDER_FAILURE_SUGGESTIONS),
            )
        return self.parse_reply(reply)

    def parse_reply(self, reply: str) -> Interpretation | InterpretationFailure:
        """Check a raw reply and convert it into an Interpretation.

        Args:
            reply: Text returned by the provider

        Returns:
            Interpretation, or InterpretationFailure for a malformed reply
        """
        try:
            data = self._decode(reply)
            command = build_command(data["type"], data["parameters"])
        except (MalformedReplyError, PydanticValidationError) as e:
            log_warning(logger, "Could not parse text generation reply", e)
            return InterpretationFailure(
                message=UNPARSEABLE_MESSAGE,
                error=UNPARSEABLE_ERROR,
                suggestions=list(UNPARSEABLE_SUGGESTIONS),
            )

        confidence = max(0.0, min(1.0, float(data["confidence"])))
        validation_errors = _string_list(data.get("validation_errors"))
        suggestions = validation_errors or _string_list(data.get("suggestions"))
        message = data.get("message") if isinstance(data.get("message"), str) else None

        return Interpretation(
            command=command,
            confidence=confidence,
            success=self.is_actionable(command.type, confidence),
            message=message or f"Interpreted as: {command.type}",
            suggestions=suggestions,
        )

    @staticmethod
    def _decode(reply: str) -> dict[str, Any]:
        match = _JSON_OBJECT_RE.search(reply or "")
        if match is None:
            raise MalformedReplyError("No JSON object found in reply")

        try:
            data = json.loads(match.group(0))
        except ValueError as e:
            # JSONDecodeError, or an integer past the int conversion digit limit
            raise MalformedReplyError(f"Invalid JSON in reply: {e}") from e

        if not isinstance(data, dict):
            raise MalformedReplyError("Reply is not a JSON object")
        if not isinstance(data.get("type"), str) or not data["type"]:
            raise MalformedReplyError("Reply has no command type")
        if not isinstance(data.get("parameters"), dict):
            raise MalformedReplyError("Reply has no parameters object")
        confidence = data.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise MalformedReplyError("Reply confidence is not a number")
        try:
            value = float(confidence)
        except OverflowError as e:
            raise MalformedReplyError("Reply confidence is out of range") from e
        if math.isnan(value):
            raise MalformedReplyError("Reply confidence is not a number")
        data["confidence"] = value
        return data
