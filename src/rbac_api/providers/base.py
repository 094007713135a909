"""Text-generation provider interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from rbac_api.exceptions import NetworkError, ServiceUnavailableError
from rbac_api.utils.http_retry import send_with_retry
from rbac_api.utils.secure_logging import log_error

logger = logging.getLogger(__name__)


class TextGenerationProvider(ABC):
    """A remote service that turns a prompt into text."""

    name: str = "base"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a completion for ``prompt``.

        Args:
            prompt: Full prompt text

        Returns:
            Generated text

        Raises:
            NetworkError: If the service cannot be reached
            ServiceUnavailableError: If the service rejects the call or
                returns an unusable reply
        """

    async def close(self) -> None:
        """Release network resources."""


class HTTPTextGenerationProvider(TextGenerationProvider):
    """Shared plumbing for providers reached over HTTPS with JSON bodies.

    Each instance owns one ``httpx.AsyncClient``, created lazily and
    reused for every call until ``close`` is awaited at shutdown.
    """

    DEFAULT_BASE_URL: str = ""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.1,
        max_output_tokens: int = 2048,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
        self._http_client = None

    @abstractmethod
    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, headers, json body) for one generation call."""

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the generated text out of a decoded response body."""

    async def generate(self, prompt: str) -> str:
        url, headers, body = self._build_request(prompt)
        client = self._get_http_client()

        try:
            response = await send_with_retry(
                lambda: client.post(url, headers=headers, json=body),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=self.retry_max_delay,
                operation=f"{self.name} generate",
            )
        except httpx.TransportError as e:
            log_error(logger, f"{self.name} request failed", e)
            raise NetworkError(
                "Unable to reach the text generation service", {"provider": self.name}
            ) from e

        if response.status_code != 200:
            logger.error(f"{self.name} returned HTTP {response.status_code}")
            raise ServiceUnavailableError(
                "The text generation service rejected the request",
                {"provider": self.name, "status": response.status_code},
            )

        try:
            return self._extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            log_error(logger, f"Unexpected {self.name} response body", e)
            raise ServiceUnavailableError(
                "The text generation service returned an unusable reply",
                {"provider": self.name},
            ) from e
