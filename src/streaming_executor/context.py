"""Persistent execution context.

Holds the namespace every statement runs in. It outlives runs: names
hoisted by one run are visible to every later run on the same executor.
Output written with ``print`` goes to whichever sink is installed at the
time of the call, so each statement's logs stay its own.
"""

from __future__ import annotations

import builtins
import io
import sys
from collections.abc import Callable, Iterable, Mapping
from types import CodeType
from typing import Any

from streaming_executor.lowerer import ECHO_NAME

UNIT_NAME = "__statement__"


def _discard(text: str) -> None:
    pass


class ExecutionContext:
    """Namespace dict plus the output sink statements print into.

    The namespace is used directly as the globals of executed code, so
    functions defined by one statement see names hoisted by later ones.
    """

    def __init__(self, initial_bindings: Mapping[str, Any] | None = None) -> None:
        self._sink: Callable[[str], None] = _discard
        self._namespace: dict[str, Any] = {
            "__name__": "__main__",
            "__builtins__": builtins,
            "print": self._print,
            ECHO_NAME: self._echo,
        }
        if initial_bindings:
            self._namespace.update(initial_bindings)

    @property
    def namespace(self) -> dict[str, Any]:
        """The live namespace. Mutations are visible to executed code."""
        return self._namespace

    def install_sink(self, append: Callable[[str], None]) -> None:
        """Route subsequent output to *append* until another sink is installed."""
        self._sink = append

    def lookup(self, names: Iterable[str]) -> dict[str, Any]:
        """Current values of those *names* that already resolve.

        A name not in the namespace falls back to the builtin of that name,
        so ``list = list(x)`` reads the builtin as it would at module level.
        """
        found: dict[str, Any] = {}
        for name in names:
            if name in self._namespace:
                found[name] = self._namespace[name]
            elif hasattr(builtins, name):
                found[name] = getattr(builtins, name)
        return found

    async def run(self, unit: CodeType, seeded: Mapping[str, Any]) -> dict[str, Any] | None:
        """Define the wrapped statement unit and await it.

        Args:
            unit: Compiled module defining ``__statement__``.
            seeded: Arguments for the unit's parameters.

        Returns:
            The unit's record of declared names, or None when it declares none.
        """
        scope: dict[str, Any] = {}
        exec(unit, self._namespace, scope)
        return await scope[UNIT_NAME](**seeded)

    def hoist(self, names: Iterable[str], record: Mapping[str, Any]) -> None:
        """Copy a statement's declared names into the namespace.

        A declared name missing from the record was deleted by the
        statement (``del``, or an ``except ... as`` target) and is removed.
        """
        for name in names:
            if name in record:
                self._namespace[name] = record[name]
            else:
                self._namespace.pop(name, None)

    # ── Output ────────────────────────────────────────────────────

    def _print(
        self,
        *values: object,
        sep: str | None = " ",
        end: str | None = "\n",
        file: Any = None,
        flush: bool = False,
    ) -> None:
        if file is not None and file not in (sys.stdout, sys.stderr):
            print(*values, sep=sep, end=end, file=file, flush=flush)
            return
        buffer = io.StringIO()
        print(*values, sep=sep, end=end, file=buffer)
        self._sink(buffer.getvalue())

    def _echo(self, value: object) -> None:
        if value is not None:
            self._print(repr(value))
