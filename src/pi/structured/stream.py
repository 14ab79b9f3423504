"""Structured streaming: typed partial values from a stream of JSON text.

Usage:
    result = stream_structured(chunks, Analysis)
    async for partial in result:
        if partial.summary is not None:
            render(partial.summary)

Each chunk is appended to a buffer, the buffer is repaired into valid JSON
and decoded into the target's partial variant, and the partial is yielded
when its content changed since the last one. When the source ends one final
attempt decides between clean completion and ``ConversionFailedError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pi.structured.config import StreamOptions
from pi.structured.decode import Decoded, attempt_decode
from pi.structured.errors import ConversionFailedError, NoContentError, SizeExceededError
from pi.structured.partial import resolve_decoder

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Callable

    from pi.structured.partial import PartialDecoder

logger = logging.getLogger(__name__)

_UNSET = object()

T = TypeVar("T")



async def _pull(chunks: AsyncIterator[str]) -> str:
    return await anext(chunks)


class StructuredStream(Generic[T]):
    """Drives one stream: owns its buffer and the last emitted snapshot.

    Iterable exactly once. Source errors propagate unchanged; decode and
    parse failures while accumulating are retried on the next chunk.
    """

    def __init__(
        self,
        source: AsyncIterable[str],
        decoder: PartialDecoder[T],
        options: StreamOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self._source = source
        self._decoder = decoder
        self._options = options or StreamOptions()
        self._cancel_event = cancel_event
        self._parts: list[str] = []
        self._size = 0
        self._snapshot: Any = _UNSET
        self._emissions = 0
        self._started = False

    @property
    def decoder(self) -> PartialDecoder[T]:
        return self._decoder

    @property
    def buffer(self) -> str:
        return "".join(self._parts)

    @property
    def size(self) -> int:
        return self._size

    @property
    def emissions(self) -> int:
        return self._emissions

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise asyncio.CancelledError("structured stream cancelled")

    def _append(self, chunk: str) -> None:
        attempted = self._size + len(chunk)
        if attempted > self._options.max_buffer_size:
            logger.warning(
                "Structured stream aborted: %d characters exceeds limit of %d",
                attempted,
                self._options.max_buffer_size,
            )
            raise SizeExceededError(self._options.max_buffer_size, attempted)
        self._parts.append(chunk)
        self._size = attempted

    def _accept(self, attempt: Decoded[Any]) -> bool:
        """Record ``attempt`` as the latest emission unless nothing changed."""
        if self._snapshot is not _UNSET and attempt.snapshot == self._snapshot:
            return False
        self._snapshot = attempt.snapshot
        self._emissions += 1
        logger.debug("Emitting partial #%d after %d characters", self._emissions, self._size)
        return True

    async def _next_chunk(self, chunks: AsyncIterator[str]) -> str:
        """Pull the next chunk, abandoning the pull as soon as ``cancel_event`` is set."""
        if self._cancel_event is None:
            return await anext(chunks)

        pull_task = asyncio.create_task(_pull(chunks))
        cancel_task = asyncio.create_task(self._cancel_event.wait())
        try:
            await asyncio.wait({pull_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not pull_task.done():
                pull_task.cancel()
                # The source must be idle again before it can be closed.
                await asyncio.wait({pull_task})

        if pull_task.cancelled():
            raise asyncio.CancelledError("structured stream cancelled")
        return pull_task.result()

    def __aiter__(self) -> AsyncIterator[Any]:
        if self._started:
            raise RuntimeError("StructuredStream can only be iterated once")
        self._started = True
        return self._run()

    async def _run(self) -> AsyncIterator[Any]:
        chunks = aiter(self._source)
        try:
            while True:
                self._check_cancelled()
                try:
                    chunk = await self._next_chunk(chunks)
                except StopAsyncIteration:
                    break
                self._check_cancelled()

                self._append(chunk)
                if not self._options.should_decode(chunk):
                    continue

                attempt = attempt_decode(self.buffer, self._decoder)
                if isinstance(attempt, Decoded) and self._accept(attempt):
                    yield attempt.value

            attempt = attempt_decode(self.buffer, self._decoder)
            if isinstance(attempt, Decoded):
                if self._accept(attempt):
                    yield attempt.value
            elif self._emissions:
                raise ConversionFailedError(attempt.error) from attempt.error
            else:
                logger.debug("Structured stream ended without decodable content (%d chars)", self._size)
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()


class StreamingResult(Generic[T]):
    """Async iterable of partial values with helpers for the final value."""

    def __init__(self, stream: StructuredStream[T]) -> None:
        self._stream = stream

    @property
    def stream(self) -> StructuredStream[T]:
        return self._stream

    def __aiter__(self) -> AsyncIterator[Any]:
        return aiter(self._stream)

    async def collect(self) -> T:
        """Drain the stream and convert the last partial into a complete value."""
        return await self.reduce(None)

    async def collect_or_none(self) -> T | None:
        """Like ``collect`` but returns None when nothing was emitted."""
        try:
            return await self.collect()
        except NoContentError:
            return None

    async def reduce(self, handler: Callable[[Any], None] | None) -> T:
        """Call ``handler`` with every partial, then return the complete value."""
        last: Any = _UNSET
        async for partial in self:
            if handler is not None:
                handler(partial)
            last = partial
        if last is _UNSET:
            raise NoContentError()
        return self._stream.decoder.decode_complete(last)


def stream_structured(
    source: AsyncIterable[str],
    target: Any,
    *,
    options: StreamOptions | None = None,
    cancel_event: asyncio.Event | None = None,
) -> StreamingResult[Any]:
    """Stream partial values of ``target`` decoded from JSON text chunks.

    ``target`` is a pydantic model class, a JSON Schema dict, or a
    ``PartialDecoder``. Terminates cleanly, or with ``SizeExceededError``,
    ``ConversionFailedError``, the source's own error, or
    ``asyncio.CancelledError``.
    """
    decoder = resolve_decoder(target)
    return StreamingResult(StructuredStream(source, decoder, options, cancel_event))
