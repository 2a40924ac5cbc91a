# src/streaming/relay.py - v1
"""Relay a generator's chunk stream to an output channel while buffering it.

Each chunk is appended to the session buffer and then forwarded verbatim,
in arrival order, as a ``chunk`` event. The buffer is only handed out
when the generator ends naturally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Literal

from alchemy4d.core.models import ChunkEvent
from alchemy4d.streaming.channel import ChannelClosed, OutputChannel

logger = logging.getLogger(__name__)


@dataclass
class StreamSession:
    """Per-request state while a recipe is being generated. Never persisted."""

    channel: OutputChannel
    chunks: list[str] = field(default_factory=list)

    def append(self, chunk: str) -> None:
        self.chunks.append(chunk)

    @property
    def text(self) -> str:
        return "".join(self.chunks)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def discard(self) -> None:
        """Drop the partial buffer."""
        self.chunks.clear()


@dataclass(frozen=True)
class RelayOutcome:
    """How a relay run ended.

    ``text`` is only populated for ``completed``.
    """

    status: Literal["completed", "failed", "disconnected"]
    text: str = ""
    chunk_count: int = 0
    error: Exception | None = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"


class StreamRelay:
    """Consumes an async chunk iterator into a StreamSession."""

    async def run(
        self, chunks: AsyncIterator[str], session: StreamSession
    ) -> RelayOutcome:
        """Forward every chunk to the session channel and accumulate it.

        Generator failures and consumer disconnects are reported in the
        returned outcome rather than raised. Cancellation propagates after
        the generator has been closed.
        """
        finished = False
        try:
            async for chunk in chunks:
                if not chunk:
                    continue
                session.append(chunk)
                await session.channel.send(ChunkEvent(content=chunk))
            finished = True
        except ChannelClosed:
            count = session.chunk_count
            session.discard()
            logger.info("Client disconnected after %d chunks", count)
            return RelayOutcome(status="disconnected", chunk_count=count)
        except Exception as e:
            count = session.chunk_count
            session.discard()
            return RelayOutcome(status="failed", chunk_count=count, error=e)
        finally:
            if not finished:
                await _close_quietly(chunks)

        return RelayOutcome(
            status="completed", text=session.text, chunk_count=session.chunk_count
        )


async def _close_quietly(chunks: AsyncIterator[str]) -> None:
    """Close an abandoned async generator so provider connections are released."""
    aclose = getattr(chunks, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.debug("Error while closing generator stream: %s", e)
