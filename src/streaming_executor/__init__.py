"""streaming-executor: run Python statements as they stream in."""

# Patch the SDK before anything imports query(). See sdk_patch.py for why.
from streaming_executor.sdk_patch import apply as _apply_sdk_patch

_apply_sdk_patch()

from streaming_executor.analyzer import Analysis, Bindings, analyze, extract_bindings
from streaming_executor.errors import (
    ConfigLoadError,
    ExecutionTimeoutError,
    ExecutorBusyError,
    IncompleteStatementError,
    LLMError,
    LoweringError,
    StreamingExecutorError,
)
from streaming_executor.events import StreamingRun
from streaming_executor.executor import StreamingExecutor
from streaming_executor.executor_logger import configure_logging
from streaming_executor.loader import load_options
from streaming_executor.models import (
    Dialect,
    ExecutionError,
    ExecutionEvent,
    ExecutionResult,
    ExecutorOptions,
)
from streaming_executor.sources import (
    chunk_text,
    llm_code_stream,
    read_lines,
    strip_code_fences,
)
from streaming_executor.templates import render_system_prompt

__all__ = [
    "analyze",
    "chunk_text",
    "configure_logging",
    "extract_bindings",
    "llm_code_stream",
    "load_options",
    "read_lines",
    "render_system_prompt",
    "strip_code_fences",
    "Analysis",
    "Bindings",
    "ConfigLoadError",
    "Dialect",
    "ExecutionError",
    "ExecutionEvent",
    "ExecutionResult",
    "ExecutionTimeoutError",
    "ExecutorBusyError",
    "ExecutorOptions",
    "IncompleteStatementError",
    "LLMError",
    "LoweringError",
    "StreamingExecutor",
    "StreamingExecutorError",
    "StreamingRun",
]
