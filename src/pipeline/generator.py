# src/pipeline/generator.py - v1
"""Recipe generator: the craft core's view of the external model.

Anything with ``generate(request) -> AsyncIterator[str]`` can drive the
coordinator; RecipeGenerator is the production implementation on top of
an LLM client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator, Protocol

from alchemy4d.llm.models import Message
from alchemy4d.llm.prompts import RECIPE_SYSTEM, build_recipe_prompt

if TYPE_CHECKING:
    from alchemy4d.config.settings import Settings
    from alchemy4d.core.models import CraftRequest
    from alchemy4d.llm.base_client import BaseLLMClient


class RecipeSource(Protocol):
    """Generator boundary consumed by CraftCoordinator."""

    def generate(self, request: CraftRequest) -> AsyncIterator[str]:
        ...


class RecipeGenerator:
    """Streams a recipe for a craft request from an LLM client."""

    def __init__(
        self,
        client: BaseLLMClient,
        max_tokens: int = 1000,
        temperature: float = 0.6,
    ) -> None:
        self._client = client
        self._max_tokens = max_tokens
        self._temperature = temperature

    @classmethod
    def from_settings(cls, client: BaseLLMClient, settings: Settings) -> RecipeGenerator:
        return cls(
            client,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )

    def generate(self, request: CraftRequest) -> AsyncIterator[str]:
        return self._client.stream(
            [Message(role="user", content=build_recipe_prompt(request))],
            system=RECIPE_SYSTEM,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
