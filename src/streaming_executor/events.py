"""Event pipeline between a run's background task and its consumer.

The producer appends events and finally a finish marker; the consumer
pulls them lazily through an async generator. The run's result future is
resolved by the producer alone, so a consumer that reads only some
events, or none, never holds the result back.

Unconsumed events stay queued for as long as the run object is alive.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass

from streaming_executor.models import ExecutionEvent, ExecutionResult

_FINISHED = object()


class EventQueue:
    """Unbounded single-writer, single-reader queue of execution events."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ExecutionEvent | object] = asyncio.Queue()
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def push(self, event: ExecutionEvent) -> None:
        """Append an event, waking the consumer if it is waiting."""
        self._queue.put_nowait(event)

    def finish(self) -> None:
        """Mark the end of the sequence. Further finishes are no-ops."""
        if not self._finished:
            self._finished = True
            self._queue.put_nowait(_FINISHED)

    async def drain(self) -> AsyncIterator[ExecutionEvent]:
        """Yield events in order until the finish marker is reached."""
        while True:
            item = await self._queue.get()
            if item is _FINISHED:
                return
            yield item


@dataclass
class StreamingRun:
    """Handle returned by ``StreamingExecutor.submit``.

    ``events`` yields one ExecutionEvent per executed statement.
    ``result`` resolves once the stream ends and every statement has run,
    whether or not ``events`` was consumed.
    """

    events: AsyncIterator[ExecutionEvent]
    result: asyncio.Future[ExecutionResult]

    async def collect(self) -> tuple[list[ExecutionEvent], ExecutionResult]:
        """Drain all events, then await the result."""
        events = [event async for event in self.events]
        return events, await self.result
