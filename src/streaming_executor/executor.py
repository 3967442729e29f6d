"""Streaming executor: the run controller.

Reads a chunk stream in a background task, hands each complete statement
to the statement pipeline, and publishes one event per statement. Tracks
line numbers per run, applies the error policy, flushes the trailing
buffer at stream end, and resolves the run's result.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
import uuid
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any

from streaming_executor import executor_logger
from streaming_executor.analyzer import analyze
from streaming_executor.context import ExecutionContext
from streaming_executor.errors import ExecutorBusyError
from streaming_executor.events import EventQueue, StreamingRun
from streaming_executor.models import (
    ExecutionError,
    ExecutionEvent,
    ExecutionResult,
    ExecutorOptions,
)
from streaming_executor.scanner import BoundaryScanner, Statement
from streaming_executor.statement import execute_statement

_log = logging.getLogger("streaming_executor")

ChunkStream = AsyncIterable[str] | Iterable[str]


async def _iter_chunks(stream: ChunkStream) -> AsyncIterator[str]:
    if isinstance(stream, str):
        yield stream
    elif isinstance(stream, AsyncIterable):
        async for chunk in stream:
            yield chunk
    else:
        for chunk in stream:
            yield chunk


class StreamingExecutor:
    """Executes Python statements as they arrive on a stream.

    The context persists across runs: call ``submit`` as many times as you
    like, one run at a time.

    Args:
        options: Full options model. Keyword overrides are applied on top
            (``initial_bindings``, ``timeout_ms``, ``dialect``,
            ``continue_on_error``).
    """

    def __init__(self, options: ExecutorOptions | None = None, **overrides: Any) -> None:
        if options is None:
            options = ExecutorOptions(**overrides)
        elif overrides:
            options = ExecutorOptions.model_validate(
                {**dict(options), **overrides}
            )
        self.options = options
        self._context = ExecutionContext(options.initial_bindings)
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def context(self) -> dict[str, Any]:
        """The live namespace. Read declared names or inject new ones."""
        return self._context.namespace

    @property
    def running(self) -> bool:
        """True while a run is in progress."""
        return self._running

    def submit(self, stream: ChunkStream) -> StreamingRun:
        """Start executing *stream* in the background.

        Must be called with an event loop running. Returns immediately;
        statements run as chunks arrive, independent of whether the
        returned events are consumed.

        Raises:
            ExecutorBusyError: If another run is still in progress.
        """
        if self._running:
            raise ExecutorBusyError("Cannot call submit() while another run is in progress")

        loop = asyncio.get_running_loop()
        self._running = True
        queue = EventQueue()
        result: asyncio.Future[ExecutionResult] = loop.create_future()
        self._task = loop.create_task(self._run(stream, queue, result))
        return StreamingRun(events=queue.drain(), result=result)

    async def _run(
        self,
        stream: ChunkStream,
        queue: EventQueue,
        result: asyncio.Future[ExecutionResult],
    ) -> None:
        run_id = uuid.uuid4().hex[:8]
        continue_on_error = self.options.continue_on_error
        scanner = BoundaryScanner(functools.partial(analyze, dialect=self.options.dialect))
        logs: list[str] = []
        governing: ExecutionError | None = None
        stream_error: Exception | None = None
        start = time.monotonic()

        executor_logger.log_run_start(run_id, continue_on_error)

        def record(event: ExecutionEvent) -> bool:
            """Publish an event; False when the run has to stop."""
            nonlocal governing
            logs.append(event.logs)
            if event.error is not None and governing is None:
                governing = event.error
            queue.push(event)
            return event.error is None or continue_on_error

        try:
            halted = False
            async for chunk in _iter_chunks(stream):
                for statement in scanner.feed(chunk):
                    if not record(await self._execute(run_id, statement)):
                        halted = True
                        break
                if halted:
                    break

            if not halted:
                statement = scanner.flush()
                if statement is not None:
                    record(await self._execute(run_id, statement))
        except asyncio.CancelledError:
            result.cancel()
            raise
        except Exception as e:
            _log.debug("Run %s: input stream failed: %s", run_id, e)
            stream_error = e
        finally:
            self._running = False
            queue.finish()
            executor_logger.log_run_complete(
                run_id,
                len(logs),
                (time.monotonic() - start) * 1000,
                governing.type if governing else None,
            )
            if not result.done():
                if stream_error is not None:
                    result.set_exception(stream_error)
                else:
                    result.set_result(ExecutionResult(logs="".join(logs), error=governing))

    async def _execute(self, run_id: str, statement: Statement) -> ExecutionEvent:
        executor_logger.log_statement_start(run_id, statement.line, statement.text)
        started = time.monotonic()

        event = await execute_statement(
            statement,
            self._context,
            dialect=self.options.dialect,
            timeout_ms=self.options.timeout_ms,
        )

        if event.error is not None:
            executor_logger.log_statement_error(
                run_id, statement.line, event.error.type, event.error.message
            )
        else:
            executor_logger.log_statement_complete(
                run_id, statement.line, (time.monotonic() - started) * 1000
            )
        return event
