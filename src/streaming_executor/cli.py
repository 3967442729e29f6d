"""Command-line interface for streaming-executor.

Enables execution via ``uvx streaming-executor`` or a plain
``streaming-executor`` command after install.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import AsyncIterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streaming_executor.executor import StreamingExecutor
    from streaming_executor.models import ExecutionEvent, ExecutorOptions

DEFAULT_CHUNK_SIZE = 64

# ── Human-readable help strings ──────────────────────────────────────────────

_TOP_DESCRIPTION = """\
Execute Python statements while the program is still arriving.

Source text is read as a stream of chunks. Every top-level statement runs
as soon as it is complete, in a namespace shared by the whole program, and
its printed output is reported immediately. The program can come from a
file, from stdin, or straight from a language model as it writes it.
"""

_TOP_EPILOG = """\
Quick examples:
  streaming-executor run script.py
  tail -f commands.py | streaming-executor run -
  streaming-executor generate "print the first 10 primes" --model haiku
"""

_RUN_DESCRIPTION = """\
Stream a Python source file (or stdin) through the executor.

Each statement's output is printed as soon as the statement completes.
Errors are written to stderr as "[type] line N: message", where type is
parse, runtime or timeout.
"""

_RUN_EPILOG = """\
JSON output (--json), one object per line on stdout:

  {"event":  {"statement": <str>, "line": <int>, "logs": <str>, "error": <obj|null>}}
  ...
  {"result": {"logs": <str>, "error": <obj|null>}}

Exit codes:
  0 -- every statement ran (or errors were tolerated and none occurred)
  1 -- the run's result carries an error, or --config could not be loaded

Examples:
  streaming-executor run script.py --timeout-ms 5000
  streaming-executor run script.py --continue-on-error --echo
  cat script.py | streaming-executor run - --json
"""

_GENERATE_DESCRIPTION = """\
Ask a language model for Python code and execute it while it streams.

The model is told which names already exist (from --config
initial_bindings) and that its reply runs statement by statement. Only the
body of the first markdown code fence in the reply is executed.
"""


# ── Parser ───────────────────────────────────────────────────────────────────

def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--timeout-ms",
        type=float,
        metavar="MS",
        help="Per-statement timeout in milliseconds (default: 30000).",
    )
    p.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep executing after a statement fails. The first error still fails the run.",
    )
    p.add_argument(
        "--echo",
        action="store_true",
        help="Print the repr of every top-level expression statement, like a REPL.",
    )
    p.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="YAML options file. Command-line flags override its values.",
    )
    p.add_argument(
        "--log-dir",
        type=Path,
        metavar="DIR",
        help=(
            "Write JSONL execution logs to DIR/executor.log. Each line is a "
            "JSON event: run_start, statement_start, statement_complete, "
            "statement_error or run_complete."
        ),
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Emit one JSON object per event, then the result, instead of plain output.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streaming-executor",
        description=_TOP_DESCRIPTION,
        epilog=_TOP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    # ── run ──────────────────────────────────────────────────────────────────
    run_p = sub.add_parser(
        "run",
        help="Execute a Python source file or stdin statement by statement",
        description=_RUN_DESCRIPTION,
        epilog=_RUN_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    run_p.add_argument(
        "source",
        help="Path to a Python source file, or - to read stdin line by line",
    )
    run_p.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        metavar="N",
        help=f"Characters per chunk when reading a file (default: {DEFAULT_CHUNK_SIZE}).",
    )
    _add_run_options(run_p)

    # ── generate ─────────────────────────────────────────────────────────────
    gen_p = sub.add_parser(
        "generate",
        help="Have an LLM write Python and run it while it streams",
        description=_GENERATE_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    gen_p.add_argument("prompt", help="What the program should do")
    gen_p.add_argument(
        "--model",
        choices=["haiku", "sonnet", "opus"],
        default="sonnet",
        help="Model alias (default: sonnet).",
    )
    _add_run_options(gen_p)

    return parser


# ── Command handlers ──────────────────────────────────────────────────────────

def _build_options(args: argparse.Namespace) -> ExecutorOptions:
    """Options from --config, with command-line flags applied on top."""
    from streaming_executor import ExecutorOptions, load_options

    options = load_options(args.config) if args.config else ExecutorOptions()

    updates: dict[str, object] = {}
    if args.timeout_ms is not None:
        updates["timeout_ms"] = args.timeout_ms
    if args.continue_on_error:
        updates["continue_on_error"] = True
    if args.echo:
        updates["dialect"] = options.dialect.model_copy(update={"echo_expressions": True})
    if not updates:
        return options
    return ExecutorOptions.model_validate({**dict(options), **updates})


def _report(event: ExecutionEvent, as_json: bool) -> None:
    if as_json:
        print(json.dumps({"event": event.model_dump(mode="json")}), flush=True)
        return
    if event.logs:
        sys.stdout.write(event.logs)
        sys.stdout.flush()
    if event.error is not None:
        error = event.error
        print(f"[{error.type}] line {error.line}: {error.message}", file=sys.stderr)


async def _execute(
    executor: StreamingExecutor, stream: AsyncIterable[str], as_json: bool
) -> int:
    run = executor.submit(stream)
    async for event in run.events:
        _report(event, as_json)
    result = await run.result

    if as_json:
        print(json.dumps({"result": result.model_dump(mode="json")}))
    return 1 if result.error is not None else 0


async def _cmd_run(args: argparse.Namespace) -> int:
    from streaming_executor import (
        StreamingExecutor,
        StreamingExecutorError,
        chunk_text,
        configure_logging,
        read_lines,
    )

    if args.log_dir:
        configure_logging(args.log_dir)

    try:
        executor = StreamingExecutor(_build_options(args))
        if args.source == "-":
            stream = read_lines(sys.stdin)
        else:
            text = Path(args.source).read_text(encoding="utf-8")
            stream = chunk_text(text, args.chunk_size)
        return await _execute(executor, stream, args.json)
    except (StreamingExecutorError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


async def _cmd_generate(args: argparse.Namespace) -> int:
    from claude_agent_sdk import ClaudeSDKError

    from streaming_executor import (
        StreamingExecutor,
        StreamingExecutorError,
        configure_logging,
        llm_code_stream,
        render_system_prompt,
        strip_code_fences,
    )

    if args.log_dir:
        configure_logging(args.log_dir)

    try:
        options = _build_options(args)
        executor = StreamingExecutor(options)
        system_prompt = render_system_prompt(
            options.initial_bindings,
            top_level_await=options.dialect.top_level_await,
        )
        stream = strip_code_fences(
            llm_code_stream(args.prompt, model=args.model, system_prompt=system_prompt)
        )
        return await _execute(executor, stream, args.json)
    except (StreamingExecutorError, ClaudeSDKError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# ── Entry point ───────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        sys.exit(asyncio.run(_cmd_run(args)))
    elif args.command == "generate":
        sys.exit(asyncio.run(_cmd_generate(args)))


if __name__ == "__main__":
    main()
