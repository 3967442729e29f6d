"""Smoke test: have a real LLM write a program and run it as it streams.

Usage:
    uv run python e2e/run.py
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

# Add src to path for local dev
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from streaming_executor import (
    StreamingExecutor,
    configure_logging,
    llm_code_stream,
    render_system_prompt,
    strip_code_fences,
)

E2E_DIR = Path(__file__).parent
LOG_DIR = E2E_DIR / "logs"

PROMPT = (
    "Define a function that returns the first n prime numbers, print the "
    "first 15, then await asyncio.sleep(0.1) and print their sum."
)


async def main() -> None:
    configure_logging(LOG_DIR)

    print("=" * 70)
    print("streaming-executor smoke test: generate and run")
    print("=" * 70)
    print(f"Prompt: {PROMPT}")
    print(f"Logs:   {LOG_DIR}")
    print()

    executor = StreamingExecutor(timeout_ms=10_000)
    stream = strip_code_fences(
        llm_code_stream(PROMPT, model="haiku", system_prompt=render_system_prompt([]))
    )

    start = time.monotonic()
    run = executor.submit(stream)

    print("Running statements as they arrive...")
    print("-" * 70)
    async for event in run.events:
        elapsed = time.monotonic() - start
        first_line = event.statement.splitlines()[0]
        print(f"[{elapsed:6.2f}s] line {event.line:3d}  {first_line[:50]}")
        for log_line in event.logs.splitlines():
            print(f"           | {log_line}")
        if event.error:
            print(f"           ! {event.error.type}: {event.error.message}")
    print("-" * 70)

    result = await run.result
    print()
    print("=" * 70)
    print(f"Total time: {time.monotonic() - start:.2f}s")
    print(f"Error:      {result.error.message if result.error else 'none'}")
    names = sorted(n for n in executor.context if not n.startswith("__") and n != "print")
    print(f"Bound:      {', '.join(names)}")
    print("=" * 70)


if __name__ == "__main__":
    asyncio.run(main())
