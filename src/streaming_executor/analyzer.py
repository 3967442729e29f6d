"""Statement completeness checks and top-level binding extraction.

Completeness is decided by the real Python parser, never by counting
brackets or quotes: a ``;`` or newline inside a string, comment or open
bracket simply fails to parse and the scanner keeps buffering.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field

from streaming_executor.models import Dialect

# A trailing statement of one of these kinds can still grow: an indented
# line or an else/elif/except/finally/case clause may follow it.
_COMPOUND_STATEMENTS: tuple[type[ast.stmt], ...] = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.Match,
) + ((ast.TryStar,) if hasattr(ast, "TryStar") else ())

STATEMENT_FILENAME = "<statement>"


@dataclass(frozen=True)
class Bindings:
    """Names a statement binds in module scope, in declaration order."""

    variables: tuple[str, ...] = ()
    functions: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        """Union of all kinds, ordered and de-duplicated."""
        return tuple(dict.fromkeys(self.variables + self.functions + self.classes))


@dataclass(frozen=True)
class Analysis:
    """A parsed, complete statement."""

    tree: ast.Module
    bindings: Bindings = field(default_factory=Bindings)

    @property
    def is_empty(self) -> bool:
        return not self.tree.body


def analyze(text: str, dialect: Dialect, *, final: bool = False) -> Analysis | None:
    """Decide whether *text* is a complete statement.

    Args:
        text: Trimmed candidate statement.
        dialect: Grammar switches (``feature_version``).
        final: True at end of stream, when nothing more can follow. Trailing
            compound statements and comment-only text are then accepted.

    Returns:
        The Analysis when complete, otherwise None.
    """
    try:
        tree = ast.parse(
            text,
            filename=STATEMENT_FILENAME,
            feature_version=dialect.feature_version,
        )
    except (SyntaxError, ValueError):
        return None

    if not final:
        if not tree.body:
            return None
        if isinstance(tree.body[-1], _COMPOUND_STATEMENTS):
            return None

    return Analysis(tree=tree, bindings=extract_bindings(tree))


def extract_bindings(tree: ast.Module) -> Bindings:
    """Collect the names *tree* binds in module scope.

    Bodies of ``if``/``for``/``while``/``with``/``try``/``match`` are module
    scope and are walked. Function, class, lambda and comprehension bodies
    are not. Names declared ``global`` are left out, since the statement
    writes those straight into the context.
    """
    collector = _BindingCollector()
    for stmt in tree.body:
        collector.visit(stmt)

    def keep(names: list[str]) -> tuple[str, ...]:
        return tuple(n for n in dict.fromkeys(names) if n not in collector.globals)

    return Bindings(
        variables=keep(collector.variables),
        functions=keep(collector.functions),
        classes=keep(collector.classes),
    )


class _BindingCollector(ast.NodeVisitor):
    def __init__(self) -> None:
        self.variables: list[str] = []
        self.functions: list[str] = []
        self.classes: list[str] = []
        self.globals: set[str] = set()

    def visit_FunctionDef(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        self.functions.append(node.name)

    visit_AsyncFunctionDef = visit_FunctionDef

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self.classes.append(node.name)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        pass

    def visit_Global(self, node: ast.Global) -> None:
        self.globals.update(node.names)

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            self.variables.append(node.id)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        # ``x: int`` alone declares an annotation, not a value.
        if node.value is not None:
            self.generic_visit(node)

    def visit_Import(self, node: ast.Import | ast.ImportFrom) -> None:
        for alias in node.names:
            if alias.name == "*":
                continue
            self.variables.append(alias.asname or alias.name.split(".")[0])

    visit_ImportFrom = visit_Import

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.name:
            self.variables.append(node.name)
        self.generic_visit(node)

    def visit_MatchAs(self, node: ast.MatchAs) -> None:
        self.generic_visit(node)
        if node.name:
            self.variables.append(node.name)

    def visit_MatchStar(self, node: ast.MatchStar) -> None:
        if node.name:
            self.variables.append(node.name)

    def visit_MatchMapping(self, node: ast.MatchMapping) -> None:
        self.generic_visit(node)
        if node.rest:
            self.variables.append(node.rest)

    def _visit_comprehension(self, node: ast.expr) -> None:
        # Only walrus targets escape a comprehension's own scope.
        for sub in ast.walk(node):
            if isinstance(sub, ast.NamedExpr) and isinstance(sub.target, ast.Name):
                self.variables.append(sub.target.id)

    visit_ListComp = visit_SetComp = visit_DictComp = visit_GeneratorExp = _visit_comprehension
