"""Natural-language helper endpoints.

These endpoints interpret commands and describe the system; they never
change stored state.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from rbac_api.dependencies import get_ai_service
from rbac_api.models.dto.ai import (
    AIProcessRequest,
    AIResponse,
    AvailabilityResponse,
    ContextResponse,
    HelpResponse,
    SuggestionsResponse,
)
from rbac_api.security.auth import OperatorUser
from rbac_api.security.rate_limit import AI_COMMAND_LIMIT, limiter
from rbac_api.services.ai_service import AIService

router = APIRouter()


@router.post("/process", response_model=AIResponse)
@limiter.limit(AI_COMMAND_LIMIT)
async def process_command(
    request: Request,
    data: AIProcessRequest,
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> AIResponse:
    """Interpret a sentence into a validated command without executing it."""
    return await service.process_command(data.command)


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    request: Request,
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> AvailabilityResponse:
    """Report whether the text generation service is configured."""
    available = service.is_available()
    return AvailabilityResponse(
        available=available,
        provider=request.app.state.text_provider.name,
        message="AI service is available" if available else "Text generation API key not configured",
    )


@router.get("/help", response_model=HelpResponse)
async def get_help(
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> HelpResponse:
    """Get usage help for natural-language commands."""
    return HelpResponse(help_text=service.get_help_text())


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> SuggestionsResponse:
    """Get example commands built from the current permissions and roles."""
    return SuggestionsResponse(suggestions=await service.get_command_suggestions())


@router.get("/context", response_model=ContextResponse)
async def get_context(
    current_user: OperatorUser,
    service: Annotated[AIService, Depends(get_ai_service)],
) -> ContextResponse:
    """Get the RBAC snapshot used to ground interpretation."""
    context = await service.get_system_context()
    return ContextResponse.model_validate(context.model_dump())
