"""Tests for statement lowering."""

from __future__ import annotations

import ast

import pytest

from streaming_executor.errors import LoweringError
from streaming_executor.lowerer import ECHO_NAME, lower
from streaming_executor.models import Dialect


def test_lower_accepts_text_and_tree():
    from_text = lower("x = 1", Dialect())
    from_tree = lower(ast.parse("x = 1"), Dialect())
    assert ast.dump(from_text) == ast.dump(from_tree)


def test_lower_does_not_modify_input_tree():
    tree = ast.parse("1 + 1")
    before = ast.dump(tree)
    lower(tree, Dialect(echo_expressions=True))
    assert ast.dump(tree) == before


@pytest.mark.parametrize(
    "code, message",
    [
        ("return 1", "'return' outside function"),
        ("yield 1", "'yield' outside function"),
        ("break", "'break' outside loop"),
        ("nonlocal x", "nonlocal declaration not allowed at module level"),
    ],
)
def test_compiler_rejections(code, message):
    with pytest.raises(LoweringError) as exc_info:
        lower(code, Dialect())
    assert exc_info.value.message == message
    assert isinstance(exc_info.value.cause, SyntaxError)


def test_top_level_await_allowed_by_default():
    tree = lower("await thing()", Dialect())
    assert isinstance(tree.body[0].value, ast.Await)


def test_top_level_await_rejected_when_disabled():
    with pytest.raises(LoweringError, match="'await' outside function"):
        lower("await thing()", Dialect(top_level_await=False))


def test_text_that_does_not_parse():
    with pytest.raises(LoweringError):
        lower("x = (", Dialect())


# ── Echo ──────────────────────────────────────────────────────────


def test_echo_wraps_top_level_expressions():
    tree = lower("x = 1\nx + 1\nf(x)", Dialect(echo_expressions=True))

    assert isinstance(tree.body[0], ast.Assign)
    for stmt in tree.body[1:]:
        call = stmt.value
        assert isinstance(call, ast.Call)
        assert call.func.id == ECHO_NAME
    assert ast.unparse(tree.body[1]) == f"{ECHO_NAME}(x + 1)"


def test_echo_leaves_nested_expressions_alone():
    tree = lower("if True:\n    x + 1", Dialect(echo_expressions=True))
    assert ast.unparse(tree) == "if True:\n    x + 1"


def test_echo_off_by_default():
    tree = lower("x + 1", Dialect())
    assert ast.unparse(tree) == "x + 1"
