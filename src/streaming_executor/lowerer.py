"""Lowering: turn a complete statement into an executable module body.

Lowering runs after the completeness check, so the text always parses.
It can still fail: the compiler rejects things the parser accepts, such as
``return`` outside a function or top-level ``await`` when the dialect
disallows it. Such failures are reported as LoweringError.
"""

from __future__ import annotations

import ast
import copy

from streaming_executor.analyzer import STATEMENT_FILENAME
from streaming_executor.errors import LoweringError
from streaming_executor.models import Dialect

ECHO_NAME = "__echo__"


def lower(source: str | ast.Module, dialect: Dialect) -> ast.Module:
    """Validate a statement as module code and apply dialect transforms.

    Args:
        source: Statement text, or the tree the analyzer already parsed.
            A tree is copied, never modified.
        dialect: Controls top-level await and expression echoing.

    Returns:
        A fresh module tree ready to be wrapped into an execution unit.

    Raises:
        LoweringError: If the statement is not valid module code.
    """
    flags = ast.PyCF_ALLOW_TOP_LEVEL_AWAIT if dialect.top_level_await else 0

    try:
        if isinstance(source, str):
            tree = ast.parse(
                source,
                filename=STATEMENT_FILENAME,
                feature_version=dialect.feature_version,
            )
        else:
            tree = copy.deepcopy(source)
        compile(tree, STATEMENT_FILENAME, "exec", flags=flags, dont_inherit=True)
    except SyntaxError as e:
        raise LoweringError(e.msg, cause=e) from e

    if dialect.echo_expressions:
        tree = _EchoTransformer().visit(tree)
        ast.fix_missing_locations(tree)

    return tree


class _EchoTransformer(ast.NodeTransformer):
    """Rewrite top-level ``expr`` statements to ``__echo__(expr)``."""

    def visit_Module(self, node: ast.Module) -> ast.Module:
        node.body = [self._echo(stmt) for stmt in node.body]
        return node

    @staticmethod
    def _echo(stmt: ast.stmt) -> ast.stmt:
        if not isinstance(stmt, ast.Expr):
            return stmt
        call = ast.Call(
            func=ast.Name(id=ECHO_NAME, ctx=ast.Load()),
            args=[stmt.value],
            keywords=[],
        )
        return ast.copy_location(
            ast.Expr(value=ast.copy_location(call, stmt.value)), stmt
        )
