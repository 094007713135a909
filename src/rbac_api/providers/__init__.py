"""Text-generation providers."""

from rbac_api.config import Settings
from rbac_api.providers.base import HTTPTextGenerationProvider, TextGenerationProvider
from rbac_api.providers.gemini import GeminiProvider
from rbac_api.providers.openai import OpenAIProvider

PROVIDER_REGISTRY: dict[str, type[HTTPTextGenerationProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
}


def create_text_provider(settings: Settings) -> TextGenerationProvider:
    """Build the provider selected by ``LLM_PROVIDER``.

    Args:
        settings: Application settings

    Returns:
        Configured provider instance
    """
    provider_class = PROVIDER_REGISTRY[settings.llm_provider]
    return provider_class(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
        max_output_tokens=settings.llm_max_output_tokens,
        timeout=settings.llm_timeout_seconds,
        max_retries=settings.llm_max_retries,
        retry_base_delay=settings.llm_retry_base_delay,
        retry_max_delay=settings.llm_retry_max_delay,
    )


__all__ = [
    "GeminiProvider",
    "OpenAIProvider",
    "PROVIDER_REGISTRY",
    "TextGenerationProvider",
    "create_text_provider",
]
