# src/llm/adapters/anthropic_adapter.py - v1
"""Anthropic Claude adapter implementing BaseLLMClient.

Uses the official anthropic SDK. Streaming reads ``content_block_delta``
events off ``messages.create(stream=True)``.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from alchemy4d.llm.base_client import BaseLLMClient, GeneratorTransportError
from alchemy4d.llm.models import Message

logger = logging.getLogger(__name__)


def _sdk() -> Any:
    try:
        import anthropic
    except ImportError as e:
        raise ImportError(
            "anthropic package required: pip install anthropic"
        ) from e
    return anthropic


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            self.__client = _sdk().AsyncAnthropic(api_key=self._api_key or "")
        return self.__client

    async def stream(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        """Yield text deltas as Claude produces them."""
        kwargs = self._build_kwargs(messages, system, max_tokens, temperature)
        kwargs["stream"] = True
        api_error = _sdk().APIError

        try:
            events = await self._client.messages.create(**kwargs)
        except api_error as e:
            raise GeneratorTransportError("anthropic", str(e)) from e

        try:
            async for event in events:
                if getattr(event, "type", None) != "content_block_delta":
                    continue
                text = getattr(event.delta, "text", None)
                if text:
                    yield text
        except api_error as e:
            raise GeneratorTransportError("anthropic", str(e)) from e
        finally:
            await events.close()

    @property
    def provider_name(self) -> str:
        return "anthropic"

    # --- Internal helpers ---

    def _build_kwargs(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if system:
            kwargs["system"] = system
        return kwargs
