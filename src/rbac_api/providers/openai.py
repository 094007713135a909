"""OpenAI-compatible chat completions provider."""

from typing import Any

from rbac_api.providers.base import HTTPTextGenerationProvider


class OpenAIProvider(HTTPTextGenerationProvider):
    """Any endpoint implementing ``POST /chat/completions``."""

    name = "openai"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
        }
        return f"{self.base_url}/chat/completions", headers, body

    def _extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"] or ""
