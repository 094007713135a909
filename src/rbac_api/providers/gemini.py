"""Google Gemini provider."""

from typing import Any

from rbac_api.providers.base import HTTPTextGenerationProvider

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class GeminiProvider(HTTPTextGenerationProvider):
    """Gemini ``generateContent`` REST endpoint."""

    name = "gemini"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        # Key goes in a header so it never appears in logged URLs
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topK": 1,
                "topP": 1,
                "maxOutputTokens": self.max_output_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
                for category in HARM_CATEGORIES
            ],
        }
        return url, headers, body

    def _extract_text(self, data: dict[str, Any]) -> str:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
