"""Tests for the single-statement pipeline."""

from __future__ import annotations

import ast

import pytest

from streaming_executor.analyzer import analyze
from streaming_executor.context import ExecutionContext
from streaming_executor.errors import (
    ExecutionTimeoutError,
    IncompleteStatementError,
    LoweringError,
)
from streaming_executor.models import Dialect
from streaming_executor.scanner import Statement
from streaming_executor.statement import (
    execute_statement,
    format_error_message,
    wrap_statement,
)

DIALECT = Dialect()


def statement(text: str, line: int = 1) -> Statement:
    return Statement(text=text, line=line, analysis=analyze(text, DIALECT, final=True))


async def execute(text: str, context: ExecutionContext, timeout_ms: float = 1000):
    return await execute_statement(
        statement(text), context, dialect=DIALECT, timeout_ms=timeout_ms
    )


# ── wrap_statement ────────────────────────────────────────────────


def test_wrap_statement_compiles_unit():
    code = wrap_statement(ast.parse("x = 1"), ["x"], [])
    scope: dict = {}
    exec(code, {}, scope)
    assert "__statement__" in scope


def test_wrap_statement_rejects_function_only_errors():
    with pytest.raises(LoweringError, match="import \\* only allowed at module level"):
        wrap_statement(ast.parse("from os import *"), [], [])


# ── format_error_message ──────────────────────────────────────────


def test_message_attribute_preferred():
    error = ExecutionTimeoutError(100)
    assert format_error_message(error) == "Execution timeout"


def test_empty_message_attribute_ignored():
    error = ValueError("from str")
    error.message = ""
    assert format_error_message(error) == "from str"


def test_type_name_when_nothing_else():
    assert format_error_message(IndexError()) == "IndexError"


# ── execute_statement ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_success_hoists_declared_names():
    ctx = ExecutionContext()
    event = await execute("a, b = 1, 2\nprint(a + b)", ctx)

    assert event.error is None
    assert event.logs == "3\n"
    assert ctx.namespace["a"] == 1
    assert ctx.namespace["b"] == 2
    assert "__statement__" not in ctx.namespace


@pytest.mark.asyncio
async def test_statement_without_declarations():
    ctx = ExecutionContext({"items": []})
    event = await execute("items.append(1)", ctx)
    assert event.error is None
    assert ctx.namespace["items"] == [1]


@pytest.mark.asyncio
async def test_unparsed_statement_is_incomplete():
    ctx = ExecutionContext()
    event = await execute_statement(
        Statement(text="x = (", line=4, analysis=None),
        ctx,
        dialect=DIALECT,
        timeout_ms=1000,
    )
    assert event.error.type == "parse"
    assert event.error.line == 4
    assert isinstance(event.error.thrown, IncompleteStatementError)


@pytest.mark.asyncio
async def test_lowering_error_runs_nothing():
    ctx = ExecutionContext()
    event = await execute("print('never')\nreturn", ctx)
    assert event.error.type == "parse"
    assert event.logs == ""


@pytest.mark.asyncio
async def test_runtime_error_keeps_partial_logs():
    ctx = ExecutionContext()
    event = await execute("print('one')\nx = 1 / 0", ctx)

    assert event.error.type == "runtime"
    assert event.error.message == "division by zero"
    assert isinstance(event.error.thrown, ZeroDivisionError)
    assert event.logs == "one\n"
    assert "x" not in ctx.namespace


@pytest.mark.asyncio
async def test_timeout_error_chains_cancellation_cause():
    ctx = ExecutionContext()
    event = await execute("import asyncio\nawait asyncio.sleep(1)", ctx, timeout_ms=20)

    assert event.error.type == "timeout"
    thrown = event.error.thrown
    assert isinstance(thrown, ExecutionTimeoutError)
    assert thrown.timeout_ms == 20
    assert isinstance(thrown.__cause__, TimeoutError)


@pytest.mark.asyncio
async def test_late_output_does_not_leak_into_next_statement():
    ctx = ExecutionContext()
    await execute("def shout():\n    print('late')", ctx)
    first = await execute("x = 1", ctx)
    second = await execute("shout()", ctx)
    assert first.logs == ""
    assert second.logs == "late\n"
