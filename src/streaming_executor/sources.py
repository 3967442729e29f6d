"""Chunk sources for the executor.

Anything that yields strings can feed a run; these helpers cover the
common cases: a string cut into pieces, a blocking file read line by
line, and a language model writing code token by token.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import IO, Any

from claude_agent_sdk import ClaudeAgentOptions, ResultMessage, query
from claude_agent_sdk.types import AssistantMessage, StreamEvent, TextBlock

from streaming_executor.errors import LLMError

_log = logging.getLogger("streaming_executor")

FENCE = "```"


async def chunk_text(text: str, size: int) -> AsyncIterator[str]:
    """Yield *text* in slices of at most *size* characters."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    for pos in range(0, len(text), size):
        yield text[pos : pos + size]


async def read_lines(file: IO[str]) -> AsyncIterator[str]:
    """Yield lines from a blocking file (e.g. stdin) as they become available."""
    while True:
        line = await asyncio.to_thread(file.readline)
        if not line:
            return
        yield line


async def strip_code_fences(chunks: AsyncIterable[str]) -> AsyncIterator[str]:
    """Pass through only the code inside a markdown fence.

    Works line by line. Blank lines before the opening fence are dropped, as
    is everything from the closing fence on. A response whose first
    non-blank line is not a fence is treated as bare code and passed
    through whole.
    """
    pending = ""
    state = "start"  # start -> code -> done, or start -> bare

    async for chunk in chunks:
        if state == "done":
            continue
        pending += chunk
        while "\n" in pending and state != "done":
            line, pending = pending.split("\n", 1)
            state, out = _fence_step(state, line)
            if out is not None:
                yield out + "\n"

    if pending and state != "done":
        state, out = _fence_step(state, pending)
        if out is not None:
            yield out


def _fence_step(state: str, line: str) -> tuple[str, str | None]:
    is_fence = line.strip().startswith(FENCE)
    if state == "start":
        if not line.strip():
            return state, None
        if is_fence:
            return "code", None
        return "bare", line
    if state == "code":
        if is_fence:
            return "done", None
        return state, line
    if state == "bare":
        return state, line
    return state, None


async def llm_code_stream(
    prompt: str,
    *,
    model: str = "sonnet",
    system_prompt: str | None = None,
    llm_fn: Callable[..., AsyncIterator[Any]] | None = None,
) -> AsyncIterator[str]:
    """Stream the text of an LLM response as it is generated.

    Partial messages are requested so text deltas arrive token by token.
    When the SDK delivers no partial events, whole assistant text blocks
    are yielded instead.

    Args:
        prompt: User prompt asking for code.
        model: Model alias (haiku, sonnet, opus).
        system_prompt: Optional system prompt.
        llm_fn: Optional replacement for ``claude_agent_sdk.query``
            (injected for testing).

    Raises:
        LLMError: If the SDK reports an error result.
    """
    options = ClaudeAgentOptions(
        model=model,
        system_prompt=system_prompt,
        max_turns=1,
        include_partial_messages=True,
    )

    _query = llm_fn or query
    streamed = False

    # Unknown message types (e.g. rate_limit_event) are patched to return
    # None by sdk_patch.apply(), so we just skip them here.
    async for message in _query(prompt=prompt, options=options):
        if message is None:
            continue

        if isinstance(message, StreamEvent):
            text = _delta_text(message.event)
            if text:
                streamed = True
                yield text

        elif isinstance(message, AssistantMessage) and not streamed:
            for block in message.content:
                if isinstance(block, TextBlock):
                    yield block.text

        elif isinstance(message, ResultMessage):
            _log.debug(
                "LLM stream finished: subtype=%s, cost=$%s",
                message.subtype,
                message.total_cost_usd,
            )
            if message.is_error:
                raise LLMError(f"LLM returned error: {message.result}")


def _delta_text(event: dict[str, Any]) -> str | None:
    if event.get("type") != "content_block_delta":
        return None
    delta = event.get("delta") or {}
    if delta.get("type") != "text_delta":
        return None
    return delta.get("text")
