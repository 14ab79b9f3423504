"""Chunk sources for structured streaming.

``ChunkStream`` lets a callback-style producer (an SSE handler, a websocket
reader) feed text into a pull-based consumer. Uses asyncio.Queue internally
for producer/consumer coordination.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

_SENTINEL = object()


@dataclass(frozen=True)
class _Failure:
    error: BaseException


class ChunkStream:
    """Text chunk stream supporting push from producers and async iteration by one consumer."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | _Failure | object] = asyncio.Queue()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def push(self, chunk: str) -> None:
        """Push a chunk into the stream. No-op if stream is already done."""
        if self._done:
            return
        self._queue.put_nowait(chunk)

    def fail(self, error: BaseException) -> None:
        """Terminate the stream; the consumer receives ``error`` after queued chunks."""
        if self._done:
            return
        self._done = True
        self._queue.put_nowait(_Failure(error))

    def end(self) -> None:
        """Signal that no more chunks will be pushed."""
        if self._done:
            return
        self._done = True
        self._queue.put_nowait(_SENTINEL)

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            item = await self._queue.get()
            if item is _SENTINEL:
                return
            if isinstance(item, _Failure):
                raise item.error
            yield item  # type: ignore[misc]


async def iterate_chunks(chunks: Iterable[str]) -> AsyncIterator[str]:
    """Adapt an in-memory sequence of chunks into an async chunk source."""
    for chunk in chunks:
        await asyncio.sleep(0)
        yield chunk
