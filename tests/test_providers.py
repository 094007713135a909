"""Text generation provider tests using httpx mock transports."""

import json

import httpx
import pytest

from rbac_api.config import Settings
from rbac_api.exceptions import NetworkError, ServiceUnavailableError
from rbac_api.providers import GeminiProvider, OpenAIProvider, create_text_provider
from rbac_api.utils.http_retry import backoff_delay, send_with_retry


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_provider(cls, handler, max_retries: int = 2):
    provider = cls(
        api_key="secret-key",
        model="test-model",
        max_retries=max_retries,
        retry_base_delay=0,
        retry_max_delay=0,
    )
    provider._http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return provider


class TestGeminiProvider:
    """Request building and reply handling for Gemini."""

    async def test_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=gemini_body('{"type": "unknown"}'))

        provider = make_provider(GeminiProvider, handler)
        text = await provider.generate("hello")

        assert text == '{"type": "unknown"}'
        request = seen[0]
        assert request.url.path == "/v1beta/models/test-model:generateContent"
        assert request.headers["x-goog-api-key"] == "secret-key"
        assert "key=" not in str(request.url)
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "hello"
        assert body["generationConfig"]["topK"] == 1
        assert body["generationConfig"]["topP"] == 1
        assert body["generationConfig"]["maxOutputTokens"] == 2048
        assert {s["threshold"] for s in body["safetySettings"]} == {"BLOCK_MEDIUM_AND_ABOVE"}
        await provider.close()

    async def test_server_errors_are_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls < 3:
                return httpx.Response(503)
            return httpx.Response(200, json=gemini_body("ok"))

        provider = make_provider(GeminiProvider, handler, max_retries=2)

        assert await provider.generate("hello") == "ok"
        assert calls == 3

    @pytest.mark.parametrize("status", [400, 401, 429])
    async def test_client_errors_are_not_retried(self, status: int) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(status)

        provider = make_provider(GeminiProvider, handler, max_retries=3)

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await provider.generate("hello")
        assert calls == 1
        assert exc_info.value.details["status"] == status

    async def test_persistent_server_error_gives_up(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        provider = make_provider(GeminiProvider, handler, max_retries=2)

        with pytest.raises(ServiceUnavailableError):
            await provider.generate("hello")
        assert calls == 3

    async def test_network_failure_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(GeminiProvider, handler, max_retries=1)

        with pytest.raises(NetworkError):
            await provider.generate("hello")

    async def test_unusable_body_is_unavailable(self) -> None:
        provider = make_provider(
            GeminiProvider, lambda request: httpx.Response(200, json={"candidates": []})
        )

        with pytest.raises(ServiceUnavailableError):
            await provider.generate("hello")


class TestOpenAIProvider:
    """Chat completions endpoint."""

    async def test_reads_first_choice(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "reply"}}]})

        provider = make_provider(OpenAIProvider, handler)

        assert await provider.generate("hello") == "reply"
        assert seen[0].url.path.endswith("/chat/completions")
        assert seen[0].headers["Authorization"] == "Bearer secret-key"


def test_provider_selected_from_settings() -> None:
    gemini = create_text_provider(Settings(llm_provider="gemini", llm_api_key="k"))
    openai = create_text_provider(Settings(llm_provider="openai", llm_api_key="k"))

    assert isinstance(gemini, GeminiProvider)
    assert isinstance(openai, OpenAIProvider)


class TestRetryHelper:
    """Backoff arithmetic and retry decisions."""

    def test_backoff_grows_and_is_capped(self) -> None:
        assert 1.0 <= backoff_delay(0, 1.0, 10.0) <= 1.1
        assert 4.0 <= backoff_delay(2, 1.0, 10.0) <= 4.4
        assert 10.0 <= backoff_delay(8, 1.0, 10.0) <= 11.0

    async def test_timeouts_are_retried(self) -> None:
        attempts = 0

        async def send() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise httpx.ReadTimeout("timed out")
            return httpx.Response(200)

        response = await send_with_retry(send, max_retries=2, base_delay=0, max_delay=0)

        assert response.status_code == 200
        assert attempts == 2

    async def test_last_transport_error_is_raised(self) -> None:
        async def send() -> httpx.Response:
            raise httpx.ConnectTimeout("timed out")

        with pytest.raises(httpx.ConnectTimeout):
            await send_with_retry(send, max_retries=1, base_delay=0, max_delay=0)
