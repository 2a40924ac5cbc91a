# src/streaming/channel.py - v1
"""Output channel abstraction between the craft core and a client transport.

The core only ever calls ``send`` and ``close``. Transports (SSE, CLI,
tests) consume events on the other side, so the core runs without a real
network connection.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterator

from alchemy4d.core.models import CraftEvent


class ChannelClosed(Exception):
    """The consumer went away; no further events can be delivered."""


class OutputChannel(ABC):
    """Client-facing sink for craft events."""

    @abstractmethod
    async def send(self, event: CraftEvent) -> None:
        """Deliver one event, suspending while the consumer is not ready.

        Raises:
            ChannelClosed: If the consumer has detached or the channel is closed.
        """

    @abstractmethod
    async def close(self) -> None:
        """Signal that no further events follow. Idempotent."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether the channel no longer accepts events."""


class QueueChannel(OutputChannel):
    """Bounded asyncio.Queue channel.

    ``send`` suspends while the queue is full (backpressure, nothing is
    dropped). ``detach`` is called by the consumer when it disconnects:
    pending events are discarded and any suspended ``send`` raises
    ChannelClosed.
    """

    def __init__(self, maxsize: int = 32) -> None:
        self._queue: asyncio.Queue[CraftEvent | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._detached = False

    @property
    def closed(self) -> bool:
        return self._closed or self._detached

    @property
    def detached(self) -> bool:
        return self._detached

    async def send(self, event: CraftEvent) -> None:
        if self.closed:
            raise ChannelClosed("channel is closed")
        await self._queue.put(event)
        if self._detached:
            raise ChannelClosed("consumer detached")

    async def close(self) -> None:
        if self.closed:
            return
        self._closed = True
        await self._queue.put(None)

    def detach(self) -> None:
        """Consumer side: stop receiving and unblock the producer."""
        self._detached = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def events(self) -> AsyncIterator[CraftEvent]:
        """Consumer side: yield events until the producer closes the channel."""
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event
