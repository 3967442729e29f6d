"""Statement pipeline: one complete statement in, one ExecutionEvent out.

1. Take the analysis cached by the scanner (or analyze now).
2. Lower the tree; a failure is a ``parse`` error and nothing runs.
3. Wrap the body in ``async def __statement__(...)`` returning ``locals()``.
4. Run the unit in the context under the per-statement timeout, with a
   fresh output sink installed.
5. On success hoist the declared names; on failure classify the error.

Per-statement failures never escape: they are folded into the event.
"""

from __future__ import annotations

import ast
import asyncio
import logging
from collections.abc import Collection
from types import CodeType

from streaming_executor.analyzer import STATEMENT_FILENAME, analyze
from streaming_executor.context import UNIT_NAME, ExecutionContext
from streaming_executor.errors import (
    ExecutionTimeoutError,
    IncompleteStatementError,
    LoweringError,
)
from streaming_executor.lowerer import lower
from streaming_executor.models import Dialect, ExecutionError, ExecutionEvent
from streaming_executor.scanner import Statement

_log = logging.getLogger("streaming_executor")


def wrap_statement(
    tree: ast.Module, names: Collection[str], seeded: Collection[str]
) -> CodeType:
    """Compile a lowered statement into a module defining the async unit.

    Declared names that already exist in the context become parameters
    (*seeded*), so ``x += 1`` and read-before-write behave as at module
    level. With any declared names the unit returns ``locals()``.

    Raises:
        LoweringError: If the body is not valid inside a function.
    """
    module = ast.parse(
        f"async def {UNIT_NAME}({', '.join(seeded)}):\n    return locals()\n"
    )
    unit = module.body[0]
    if names:
        unit.body[:0] = tree.body
    else:
        unit.body = list(tree.body) or [ast.Pass()]
    ast.fix_missing_locations(module)

    try:
        return compile(module, STATEMENT_FILENAME, "exec", dont_inherit=True)
    except SyntaxError as e:
        raise LoweringError(e.msg, cause=e) from e


def format_error_message(error: BaseException) -> str:
    """A non-empty ``message`` attribute if present, else ``str(error)``."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__


async def execute_statement(
    statement: Statement,
    context: ExecutionContext,
    *,
    dialect: Dialect,
    timeout_ms: float,
) -> ExecutionEvent:
    """Run one statement and describe the outcome.

    Args:
        statement: Text, start line and (usually) cached analysis.
        context: Where the statement runs and where its names are hoisted.
        dialect: Grammar and lowering switches.
        timeout_ms: Bound on the statement's awaited execution.

    Returns:
        An ExecutionEvent; ``error`` is set when the statement failed.
    """
    analysis = statement.analysis or analyze(statement.text, dialect, final=True)
    if analysis is None:
        thrown = IncompleteStatementError(statement.text)
        return _failed(statement, "parse", thrown, thrown.message)

    names = analysis.bindings.names
    seeded = context.lookup(names)

    try:
        tree = lower(analysis.tree, dialect)
        unit = wrap_statement(tree, names, seeded)
    except LoweringError as e:
        _log.debug("Line %d failed to lower: %s", statement.line, e.message)
        return _failed(statement, "parse", e, e.message)

    logs: list[str] = []
    context.install_sink(logs.append)

    timeout = asyncio.timeout(timeout_ms / 1000)
    try:
        async with timeout:
            record = await context.run(unit, seeded)
    except asyncio.CancelledError as e:
        # Only a cancellation aimed at the run itself propagates; one
        # raised by user code (awaiting a cancelled task) is a failure.
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        return _failed(statement, "runtime", e, format_error_message(e), logs)
    except (Exception, SystemExit) as e:
        if isinstance(e, TimeoutError) and timeout.expired():
            thrown = ExecutionTimeoutError(timeout_ms)
            thrown.__cause__ = e
            return _failed(statement, "timeout", thrown, thrown.message, logs)
        return _failed(statement, "runtime", e, format_error_message(e), logs)

    context.hoist(names, record or {})
    return ExecutionEvent(statement=statement.text, line=statement.line, logs="".join(logs))


def _failed(
    statement: Statement,
    error_type: str,
    thrown: BaseException,
    message: str,
    logs: list[str] | None = None,
) -> ExecutionEvent:
    return ExecutionEvent(
        statement=statement.text,
        line=statement.line,
        logs="".join(logs or []),
        error=ExecutionError(
            type=error_type,
            thrown=thrown,
            message=message,
            line=statement.line,
        ),
    )
