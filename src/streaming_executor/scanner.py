"""Boundary scanner: find complete statements in a character stream.

Chunks can be any size, from one character to a whole program. The
scanner works one character at a time so the result never depends on
how the stream was split.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from streaming_executor.analyzer import Analysis

# Both end a simple statement in Python; the parser decides whether they
# actually do at a given position.
BOUNDARY_CHARS = frozenset(";\n")

AnalyzeFn = Callable[..., Analysis | None]


@dataclass(frozen=True)
class Statement:
    """A statement ready for the pipeline.

    ``analysis`` is None only for end-of-stream text that never parsed.
    """

    text: str
    line: int
    analysis: Analysis | None


class BoundaryScanner:
    """Buffers characters and emits statements as the parser accepts them.

    One scanner per run: it owns the run's line counter and buffer.
    """

    def __init__(self, analyze: AnalyzeFn) -> None:
        self._analyze = analyze
        self._buffer: list[str] = []
        self.line = 1
        self.statement_line = 1

    @property
    def pending(self) -> str:
        return "".join(self._buffer)

    def feed(self, chunk: str) -> Iterator[Statement]:
        """Consume *chunk*, yielding each statement as soon as it completes.

        The generator is lazy: a caller that stops iterating leaves the
        rest of the chunk unread.
        """
        for char in chunk:
            self._buffer.append(char)

            if char in BOUNDARY_CHARS:
                statement = self._attempt()
                if statement is not None:
                    yield statement

            # Count newlines after the attempt so statement_line is the
            # line the emitted statement started on.
            if char == "\n":
                self.line += 1
                if not self.pending.strip():
                    self.statement_line = self.line

    def flush(self) -> Statement | None:
        """Resolve whatever is left once the stream is exhausted.

        Returns None for an empty or comment-only remainder.
        """
        text = self.pending.strip()
        self._buffer.clear()
        if not text:
            return None

        analysis = self._analyze(text, final=True)
        if analysis is not None and analysis.is_empty:
            return None
        return Statement(text=text, line=self.statement_line, analysis=analysis)

    def _attempt(self) -> Statement | None:
        text = self.pending.strip()
        if not text:
            return None

        analysis = self._analyze(text)
        if analysis is None:
            return None

        statement = Statement(text=text, line=self.statement_line, analysis=analysis)
        self._buffer.clear()
        self.statement_line = self.line
        return statement
