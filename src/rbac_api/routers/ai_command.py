"""Natural-language command execution router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from rbac_api.dependencies import get_ai_service
from rbac_api.models.dto.ai import AICommandRequest, AICommandResponse
from rbac_api.security.auth import OperatorUser
from rbac_api.security.rate_limit import AI_COMMAND_LIMIT, limiter
from rbac_api.services.ai_service import AIService

router = APIRouter()


@router.post("", response_model=AICommandResponse)
@limiter.limit(AI_COMMAND_LIMIT)
async def run_command(
    request: Request,
    data: AICommandRequest,
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> AICommandResponse:
    """Execute a structured command, or interpret and execute a sentence.

    A failed interpretation or execution is answered with 200 and
    ``success: false``; malformed requests and an unconfigured text
    generation service raise.
    """
    return await service.run_command(data)
