# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted recipe generator, sample materials and recipes, and a
list-backed output channel. No network access; every generator is fake.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import AsyncIterator

import pytest

from alchemy4d.config.settings import Settings
from alchemy4d.core.models import CraftEvent, CraftRequest, Material, Recipe
from alchemy4d.streaming.channel import ChannelClosed, OutputChannel

RECIPE_PAYLOAD = {
    "steps": [
        {"type": "mix", "description": "Stir the cobalt echo into the ash"},
        {"type": "heat", "description": "Warm over a low flame", "temperature": 60},
        {"type": "byproduct", "description": "Grey residue", "item": "ash_dust", "quantity": 1},
    ],
    "result": {
        "name": "Frostbound Draught",
        "rarity": 3,
        "effects": ["chill", "clarity"],
        "description": "A pale blue tonic that hums faintly.",
    },
}

RECIPE_JSON = json.dumps(RECIPE_PAYLOAD)


def split_chunks(text: str, size: int = 16) -> list[str]:
    """Cut generator output into fixed-size chunks."""
    return [text[i : i + size] for i in range(0, len(text), size)]


class FakeGenerator:
    """Scripted generator: yields the given chunks, optionally then fails.

    ``delay`` sleeps before each chunk; ``calls`` counts generate() calls.
    """

    def __init__(
        self,
        chunks: list[str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.chunks = chunks if chunks is not None else split_chunks(
            "Here is your recipe:\n" + RECIPE_JSON + "\nEnjoy!"
        )
        self.error = error
        self.delay = delay
        self.calls = 0
        self.closed = False

    def generate(self, request: CraftRequest) -> AsyncIterator[str]:
        self.calls += 1
        return self._run()

    async def _run(self) -> AsyncIterator[str]:
        try:
            for chunk in self.chunks:
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


class ListChannel(OutputChannel):
    """Collects events in a list. ``fail_after`` simulates a disconnect."""

    def __init__(self, fail_after: int | None = None) -> None:
        self.events: list[CraftEvent] = []
        self.close_calls = 0
        self._closed = False
        self._fail_after = fail_after

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: CraftEvent) -> None:
        if self._closed:
            raise ChannelClosed("closed")
        if self._fail_after is not None and len(self.events) >= self._fail_after:
            raise ChannelClosed("consumer detached")
        self.events.append(event)

    async def close(self) -> None:
        self.close_calls += 1
        self._closed = True

    @property
    def types(self) -> list[str]:
        return [e.type for e in self.events]


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_materials() -> list[Material]:
    return [
        Material(name="cobalt_echo", quantity=10, unit="ml"),
        Material(name="snow_ash", quantity=5, unit="g"),
    ]


@pytest.fixture
def craft_request(sample_materials: list[Material]) -> CraftRequest:
    return CraftRequest(materials=sample_materials, incantation="warm gently")


@pytest.fixture
def sample_recipe(sample_materials: list[Material]) -> Recipe:
    return Recipe(
        hash="f" * 64,
        materials=sample_materials,
        incantation="warm gently",
        steps=RECIPE_PAYLOAD["steps"],
        outcome=RECIPE_PAYLOAD["result"],
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def list_channel() -> ListChannel:
    return ListChannel()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)
