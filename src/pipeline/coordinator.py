# src/pipeline/coordinator.py - v1
"""Craft coordinator: cache check, live generation, extraction, store.

Per request:
  CACHE_CHECK --hit--> REPLAY (one ``complete`` event, cached=True)
  CACHE_CHECK --miss--> GENERATING (chunks relayed live)
      -> EXTRACTING --ok--> STORE (``complete``, cached=False)
      -> EXTRACTING --fail--> ERROR
  GENERATING --generator error / timeout--> ERROR

Exactly one terminal event (``complete`` or ``error``) is sent unless the
client disconnects, and the channel is always closed on exit. Nothing is
retried here.

Usage:
    coordinator = CraftCoordinator(cache, RecipeGenerator(client))
    async for event in coordinator.stream(request):
        ...
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, AsyncIterator

from alchemy4d.cache.fingerprint import compute_fingerprint
from alchemy4d.core.models import CompleteEvent, CraftEvent, ErrorEvent, Recipe
from alchemy4d.extraction.recipe_extractor import extract_recipe
from alchemy4d.llm.base_client import GeneratorTransportError
from alchemy4d.logging.context import set_fingerprint, set_phase, set_request_context
from alchemy4d.streaming.channel import ChannelClosed, OutputChannel, QueueChannel
from alchemy4d.streaming.relay import StreamRelay, StreamSession

if TYPE_CHECKING:
    from alchemy4d.cache.base_cache_store import BaseRecipeCache
    from alchemy4d.config.settings import Settings
    from alchemy4d.core.models import CraftRequest
    from alchemy4d.pipeline.generator import RecipeSource

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate recipe"
PARSE_FAILED = "Failed to parse recipe"
INTERNAL_ERROR = "Internal error while crafting"


class CraftCoordinator:
    """Orchestrates one craft request against the shared recipe cache."""

    def __init__(
        self,
        cache: BaseRecipeCache,
        generator: RecipeSource,
        relay: StreamRelay | None = None,
        generation_timeout_s: float | None = 60.0,
        channel_buffer_size: int = 32,
    ) -> None:
        self._cache = cache
        self._generator = generator
        self._relay = relay or StreamRelay()
        self._timeout = generation_timeout_s
        self._channel_buffer_size = channel_buffer_size

    @classmethod
    def from_settings(
        cls, cache: BaseRecipeCache, generator: RecipeSource, settings: Settings
    ) -> CraftCoordinator:
        return cls(
            cache,
            generator,
            generation_timeout_s=settings.generation_timeout_s,
            channel_buffer_size=settings.channel_buffer_size,
        )

    @property
    def cache(self) -> BaseRecipeCache:
        return self._cache

    async def craft(
        self, request: CraftRequest, channel: OutputChannel
    ) -> CraftEvent | None:
        """Run one craft request, emitting events on ``channel``.

        Returns:
            The terminal event sent, or None if the client disconnected.
        """
        set_request_context(uuid.uuid4().hex[:12])
        try:
            return await self._run(request, channel)
        except ChannelClosed:
            logger.info("Client disconnected; craft abandoned")
            return None
        except asyncio.CancelledError:
            logger.info("Craft cancelled")
            raise
        except Exception:
            logger.exception("Unexpected failure while crafting")
            return await self._fail(channel, INTERNAL_ERROR)
        finally:
            set_phase("done")
            await channel.close()

    async def stream(self, request: CraftRequest) -> AsyncIterator[CraftEvent]:
        """Run ``craft`` on a queue channel and yield its events.

        Closing this iterator early (client disconnect) cancels the craft and
        discards any partial generation.
        """
        channel = QueueChannel(maxsize=self._channel_buffer_size)
        task = asyncio.create_task(self.craft(request, channel))
        drained = False
        try:
            async for event in channel.events():
                yield event
            drained = True
        finally:
            if not drained:
                channel.detach()
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    # --- States ---

    async def _run(
        self, request: CraftRequest, channel: OutputChannel
    ) -> CraftEvent | None:
        fingerprint = compute_fingerprint(request.materials, request.incantation)
        set_fingerprint(fingerprint)
        set_phase("cache_check")
        cached = await self._cache.get(fingerprint)
        if cached is not None:
            set_phase("replay")
            logger.info("Cache hit for %s", fingerprint[:12])
            event = CompleteEvent(recipe=cached, cached=True)
            await channel.send(event)
            return event

        logger.info("Cache miss for %s; generating", fingerprint[:12])
        set_phase("generating")
        session = StreamSession(channel=channel)
        start = time.monotonic()
        try:
            outcome = await asyncio.wait_for(
                self._relay.run(self._generator.generate(request), session),
                timeout=self._timeout,
            )
        except GeneratorTransportError as e:
            logger.error("Generator unavailable: %s", e)
            return await self._fail(channel, GENERATION_FAILED)
        except asyncio.TimeoutError:
            logger.warning("Generation timed out after %.1fs", self._timeout)
            return await self._fail(
                channel, f"Recipe generation timed out after {self._timeout:g}s"
            )

        latency = time.monotonic() - start
        if outcome.status == "disconnected":
            return None
        if outcome.status == "failed":
            logger.error(
                "Generator failed after %d chunks: %s",
                outcome.chunk_count, outcome.error, exc_info=outcome.error,
            )
            return await self._fail(channel, GENERATION_FAILED)
        logger.info(
            "Generation finished: %d chunks, %d chars in %.2fs",
            outcome.chunk_count, len(outcome.text), latency,
        )

        set_phase("extracting")
        result = extract_recipe(outcome.text)
        if result.recipe is None:
            logger.warning("Unusable generator output (%s): %s", result.error, result.detail)
            return await self._fail(channel, f"{PARSE_FAILED}: {result.detail}")

        set_phase("store")
        recipe = Recipe(
            hash=fingerprint,
            materials=request.materials,
            incantation=request.incantation,
            steps=result.recipe.steps,
            outcome=result.recipe.outcome,
            created_at=datetime.now(timezone.utc),
        )
        if not await self._cache.put_if_absent(fingerprint, recipe):
            logger.debug("Concurrent craft stored %s first; keeping its entry", fingerprint[:12])

        event = CompleteEvent(recipe=recipe, cached=False)
        await channel.send(event)
        return event

    async def _fail(self, channel: OutputChannel, message: str) -> CraftEvent | None:
        set_phase("error")
        event = ErrorEvent(message=message)
        try:
            await channel.send(event)
        except ChannelClosed:
            return None
        return event
