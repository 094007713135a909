"""Tests for turning text generation replies into commands."""

import json
from uuid import uuid4

import pytest

from rbac_api.exceptions import NetworkError
from rbac_api.models.domain.command import (
    AssignPermissionCommand,
    CreatePermissionCommand,
    UnknownCommand,
)
from rbac_api.models.domain.context import PermissionRef, RbacContext, RoleRef
from rbac_api.services.command_interpreter import (
    PROVIDER_FAILURE_MESSAGE,
    UNPARSEABLE_ERROR,
    UNPARSEABLE_MESSAGE,
    CommandInterpreter,
    Interpretation,
    InterpretationFailure,
)


@pytest.fixture
def interpreter(provider) -> CommandInterpreter:
    return CommandInterpreter(provider, confidence_threshold=0.5)


class TestParseReply:
    """Strict checking of provider replies."""

    def test_create_permission_reply(self, interpreter, reply) -> None:
        result = interpreter.parse_reply(
            reply("create_permission", 0.95, name="read_users", description="View users")
        )

        assert isinstance(result, Interpretation)
        assert result.success
        assert result.command == CreatePermissionCommand(name="read_users", description="View users")
        assert result.confidence == 0.95

    def test_reply_wrapped_in_prose_and_fences(self, interpreter, reply) -> None:
        raw = "Sure! Here it is:\n```json\n" + reply(
            "assign_permission", role_name="admin", permission_name="read_users"
        ) + "\n```"

        result = interpreter.parse_reply(raw)

        assert isinstance(result, Interpretation)
        assert isinstance(result.command, AssignPermissionCommand)
        assert result.command.role_name == "admin"

    @pytest.mark.parametrize(
        "raw",
        [
            "I cannot help with that",
            "{not json}",
            json.dumps({"parameters": {}, "confidence": 0.9}),
            json.dumps({"type": "create_role", "confidence": 0.9}),
            json.dumps({"type": "create_role", "parameters": {"name": "x"}, "confidence": "high"}),
            json.dumps({"type": "create_role", "parameters": {"name": "x"}, "confidence": True}),
            # Too large for a float
            '{"type": "create_role", "parameters": {"name": "x"}, "confidence": 1' + "0" * 400 + "}",
            # Longer than the int conversion digit limit
            '{"type": "create_role", "parameters": {"name": "x"}, "confidence": ' + "9" * 5000 + "}",
        ],
    )
    def test_malformed_reply_is_failure(self, interpreter, raw: str) -> None:
        result = interpreter.parse_reply(raw)

        assert isinstance(result, InterpretationFailure)
        assert result.message == UNPARSEABLE_MESSAGE
        assert result.error == UNPARSEABLE_ERROR
        assert result.suggestions

    def test_missing_required_parameter_is_failure(self, interpreter, reply) -> None:
        result = interpreter.parse_reply(reply("assign_permission", role_name="admin"))

        assert isinstance(result, InterpretationFailure)

    def test_invalid_new_name_is_failure(self, interpreter, reply) -> None:
        result = interpreter.parse_reply(reply("create_role", name="bad name!"))

        assert isinstance(result, InterpretationFailure)

    def test_unrecognised_type_becomes_unknown(self, interpreter, reply) -> None:
        result = interpreter.parse_reply(reply("grant_everything", 0.99))

        assert isinstance(result, Interpretation)
        assert isinstance(result.command, UnknownCommand)
        assert not result.success

    @pytest.mark.parametrize(
        ("confidence", "success"),
        [(0.49, False), (0.5, False), (0.51, True), (1.0, True)],
    )
    def test_confidence_must_exceed_threshold(
        self, interpreter, reply, confidence: float, success: bool
    ) -> None:
        result = interpreter.parse_reply(reply("create_role", confidence, name="editor"))

        assert result.success is success

    def test_confidence_is_clamped(self, interpreter, reply) -> None:
        result = interpreter.parse_reply(reply("create_role", 7, name="editor"))

        assert result.confidence == 1.0

    def test_validation_errors_take_precedence_over_suggestions(self, interpreter) -> None:
        raw = json.dumps(
            {
                "type": "create_role",
                "parameters": {"name": "editor"},
                "confidence": 0.3,
                "validation_errors": ["Role may already exist"],
                "suggestions": ["Try another name"],
            }
        )

        result = interpreter.parse_reply(raw)

        assert result.suggestions == ["Role may already exist"]
        assert result.message == "Interpreted as: create_role"


class TestInterpret:
    """End-to-end interpretation through the provider."""

    async def test_prompt_contains_context_and_input(self, interpreter, provider, reply) -> None:
        provider.queue(reply("create_role", name="editor"))
        context = RbacContext(
            permissions=[PermissionRef(id=uuid4(), name="read_users", description="View users")],
            roles=[RoleRef(id=uuid4(), name="admin")],
        )

        await interpreter.interpret('Create a role called "editor"', context)

        prompt = provider.prompts[0]
        assert "- read_users (View users)" in prompt
        assert "- admin" in prompt
        assert "USER COMMAND: \"Create a role called 'editor'\"" in prompt

    async def test_provider_failure_is_reported(self, interpreter, provider) -> None:
        provider.queue(NetworkError("Unable to reach the text generation service"))

        result = await interpreter.interpret("Create a role called editor", RbacContext())

        assert isinstance(result, InterpretationFailure)
        assert result.message == PROVIDER_FAILURE_MESSAGE
        assert result.error == "Unable to reach the text generation service"
