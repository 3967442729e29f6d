"""Custom exception hierarchy for streaming-executor.

All exceptions inherit from StreamingExecutorError so callers can catch
broadly or narrowly as needed. Only ExecutorBusyError and ConfigLoadError
are raised to callers; the others end up as the ``thrown`` value of an
ExecutionError inside an event.
"""

from __future__ import annotations


class StreamingExecutorError(Exception):
    """Base for all streaming-executor errors."""


class ExecutorBusyError(StreamingExecutorError):
    """submit() was called while another run is in progress."""


class ConfigLoadError(StreamingExecutorError):
    """YAML parsing or options validation failed."""


class LoweringError(StreamingExecutorError):
    """A complete statement could not be compiled for execution."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class IncompleteStatementError(StreamingExecutorError):
    """The stream ended while the buffered statement was still unparseable."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.message = "Incomplete statement"
        super().__init__(self.message)


class ExecutionTimeoutError(StreamingExecutorError):
    """A statement exceeded the configured per-statement timeout."""

    def __init__(self, timeout_ms: float) -> None:
        self.timeout_ms = timeout_ms
        self.message = "Execution timeout"
        super().__init__(self.message)


class LLMError(StreamingExecutorError):
    """LLM call failed (network, error result, etc.)."""
