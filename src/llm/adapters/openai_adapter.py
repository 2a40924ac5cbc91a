# src/llm/adapters/openai_adapter.py - v1
"""OpenAI GPT adapter implementing BaseLLMClient.

Uses the official openai SDK; streaming reads ``delta.content`` off
chat completion chunks.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

from alchemy4d.llm.base_client import BaseLLMClient, GeneratorTransportError
from alchemy4d.llm.models import Message


class OpenAIAdapter(BaseLLMClient):
    """OpenAI GPT adapter."""

    def __init__(self, model: str = "gpt-4o-mini", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(api_key=self._api_key)
        return self.__client

    async def stream(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        import openai

        kwargs = self._build_kwargs(messages, system, max_tokens, temperature)
        kwargs["stream"] = True
        try:
            chunks = await self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise GeneratorTransportError("openai", str(e)) from e

        try:
            async for chunk in chunks:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except openai.OpenAIError as e:
            raise GeneratorTransportError("openai", str(e)) from e
        finally:
            await chunks.close()

    @property
    def provider_name(self) -> str:
        return "openai"

    def _build_kwargs(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})
        return {
            "model": self._model,
            "messages": oai_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
