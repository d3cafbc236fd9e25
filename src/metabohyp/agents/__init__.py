"""
Agent layer for Metabohyp — LLM providers.

Provides:
- LLMResponse: Response from an LLM call
- LLMProvider: Abstract base class for LLM providers
- AnthropicProvider: Claude implementation
- OpenAIProvider: OpenAI implementation
- create_llm: Factory function to instantiate providers

Providers raise TransportError for anything that goes wrong on the wire,
carrying the provider's own message when it sent one.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from metabohyp.core import LLMSettings
from metabohyp.core.errors import ConfigurationError, TransportError


@dataclass
class LLMResponse:
    """Response from an LLM API call."""

    text: str
    provider: str
    model: str
    input_tokens: int
    output_tokens: int


def _status_message(body: Any, status_code: int) -> str:
    """Provider's error message if the body carries one, else a generic one."""
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"API error: {status_code}"


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str = ""

    @staticmethod
    def _clean_text(text: str) -> str:
        """Strip <think>...</think> reasoning blocks from LLM output."""
        return re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()

    @abstractmethod
    async def complete(
        self, system: str, user: str, settings: LLMSettings
    ) -> LLMResponse:
        """Generate a completion from the LLM."""
        ...


class AnthropicProvider(LLMProvider):
    """Claude implementation of LLMProvider."""

    name = "anthropic"

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def complete(
        self, system: str, user: str, settings: LLMSettings
    ) -> LLMResponse:
        import anthropic

        async with httpx.AsyncClient(timeout=settings.timeout) as http:
            client = anthropic.AsyncAnthropic(api_key=self.api_key, http_client=http)
            try:
                response = await client.messages.create(
                    model=settings.model,
                    max_tokens=settings.max_tokens,
                    temperature=settings.temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                )
            except anthropic.APIStatusError as e:
                raise TransportError(
                    _status_message(e.body, e.status_code), e.status_code
                ) from e
            except anthropic.APIError as e:
                raise TransportError(str(e)) from e

        raw_text = response.content[0].text if response.content else ""
        return LLMResponse(
            text=self._clean_text(raw_text),
            provider=self.name,
            model=settings.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLMProvider."""

    name = "openai"

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def complete(
        self, system: str, user: str, settings: LLMSettings
    ) -> LLMResponse:
        import openai

        async with httpx.AsyncClient(timeout=settings.timeout) as http:
            client = openai.AsyncOpenAI(api_key=self.api_key, http_client=http)
            try:
                response = await client.chat.completions.create(
                    model=settings.model,
                    max_tokens=settings.max_tokens,
                    temperature=settings.temperature,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                )
            except openai.APIStatusError as e:
                raise TransportError(
                    _status_message(e.body, e.status_code), e.status_code
                ) from e
            except openai.APIError as e:
                raise TransportError(str(e)) from e

        raw_text = response.choices[0].message.content or ""
        return LLMResponse(
            text=self._clean_text(raw_text),
            provider=self.name,
            model=settings.model,
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
        )


def create_llm(provider: str, api_key: str) -> LLMProvider:
    """Factory function to create an LLM provider."""
    if provider == "anthropic":
        return AnthropicProvider(api_key)
    elif provider == "openai":
        return OpenAIProvider(api_key)
    else:
        raise ConfigurationError(f"Unknown provider: {provider}")


__all__ = [
    "LLMResponse",
    "LLMProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "create_llm",
]
