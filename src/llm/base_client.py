# src/llm/base_client.py - v1
"""Abstract LLM client interface.

``stream`` is the generator boundary used by recipe crafting: an async
iterator of text chunks that ends on natural end-of-stream, or raises
GeneratorTransportError when the provider call fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from alchemy4d.llm.models import Message


class GeneratorTransportError(Exception):
    """The provider call failed outright (network, auth, rate limit, server error)."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        """Text completion, yielded chunk by chunk as the provider produces it."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai)."""
