"""Tests for the completion providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from metabohyp.agents import (
    AnthropicProvider,
    LLMProvider,
    OpenAIProvider,
    _status_message,
    create_llm,
)
from metabohyp.core import LLMSettings
from metabohyp.core.errors import ConfigurationError, TransportError


class TestCleanText:
    """Tests for _clean_text static method."""

    def test_no_think_tags(self):
        assert LLMProvider._clean_text('[{"rank": 1}]') == '[{"rank": 1}]'

    def test_multiline_think_block(self):
        """Reasoning before the JSON is removed."""
        text = "<think>\nLactate is up...\nglucose down\n</think>\n[]"
        assert LLMProvider._clean_text(text) == "[]"

    def test_multiple_think_blocks(self):
        text = "<think>first</think>Hello <think>second</think>world"
        assert LLMProvider._clean_text(text) == "Hello world"

    def test_empty_string(self):
        assert LLMProvider._clean_text("") == ""


class TestStatusMessage:
    def test_anthropic_body(self):
        body = {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        assert _status_message(body, 529) == "Overloaded"

    def test_flat_body(self):
        assert _status_message({"message": "Incorrect API key provided"}, 401) == "Incorrect API key provided"

    @pytest.mark.parametrize("body", [None, "Bad Gateway", {}, {"error": "boom"}])
    def test_generic_fallback(self, body):
        assert _status_message(body, 502) == "API error: 502"


class TestCreateLLM:
    def test_anthropic(self):
        llm = create_llm("anthropic", "sk-ant")
        assert isinstance(llm, AnthropicProvider)
        assert llm.api_key == "sk-ant"

    def test_openai(self):
        assert isinstance(create_llm("openai", "sk"), OpenAIProvider)

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="mistral"):
            create_llm("mistral", "key")


def _anthropic_message(text: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(text=text)],
        usage=SimpleNamespace(input_tokens=120, output_tokens=40),
    )


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_complete(self):
        settings = LLMSettings(max_tokens=4000, temperature=0.2)
        with patch("anthropic.AsyncAnthropic") as client_cls:
            create = client_cls.return_value.messages.create
            create.side_effect = AsyncMock(return_value=_anthropic_message("<think>hm</think>[1, 2]"))

            response = await AnthropicProvider("sk-ant").complete("SYS", "USER", settings)

        assert response.text == "[1, 2]"
        assert response.provider == "anthropic"
        assert response.output_tokens == 40
        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "SYS"
        assert kwargs["messages"] == [{"role": "user", "content": "USER"}]
        assert kwargs["max_tokens"] == 4000
        assert kwargs["temperature"] == 0.2
        assert client_cls.call_args.kwargs["api_key"] == "sk-ant"

    @pytest.mark.asyncio
    async def test_status_error_becomes_transport_error(self):
        import anthropic

        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        body = {"type": "error", "error": {"type": "rate_limit_error", "message": "Rate limited"}}
        error = anthropic.APIStatusError(
            "Rate limited", response=httpx.Response(429, request=request), body=body
        )
        with patch("anthropic.AsyncAnthropic") as client_cls:
            client_cls.return_value.messages.create = AsyncMock(side_effect=error)

            with pytest.raises(TransportError) as exc_info:
                await AnthropicProvider("sk-ant").complete("s", "u", LLMSettings())

        assert str(exc_info.value) == "Rate limited"
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transport_error(self):
        import anthropic

        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.APIConnectionError(message="Connection refused", request=request)
        with patch("anthropic.AsyncAnthropic") as client_cls:
            client_cls.return_value.messages.create = AsyncMock(side_effect=error)

            with pytest.raises(TransportError) as exc_info:
                await AnthropicProvider("sk-ant").complete("s", "u", LLMSettings())

        assert "Connection refused" in str(exc_info.value)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_other_sdk_errors_become_transport_error(self):
        import anthropic

        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.APIError("Unexpected response shape", request, body=None)
        with patch("anthropic.AsyncAnthropic") as client_cls:
            client_cls.return_value.messages.create = AsyncMock(side_effect=error)

            with pytest.raises(TransportError) as exc_info:
                await AnthropicProvider("sk-ant").complete("s", "u", LLMSettings())

        assert str(exc_info.value) == "Unexpected response shape"
        assert exc_info.value.status_code is None


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_complete(self):
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"a": 1}'))],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5),
        )
        with patch("openai.AsyncOpenAI") as client_cls:
            create = client_cls.return_value.chat.completions.create
            create.side_effect = AsyncMock(return_value=completion)

            response = await OpenAIProvider("sk").complete("SYS", "USER", LLMSettings())

        assert response.text == '{"a": 1}'
        assert response.input_tokens == 10
        assert create.call_args.kwargs["messages"] == [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "USER"},
        ]
