"""Pydantic models for executor options and execution results.

All data structures live here. No business logic, just shapes.
Result models are frozen: an event is immutable once emitted.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# ── Options ───────────────────────────────────────────────────────


class Dialect(BaseModel):
    """Grammar and lowering switches applied to every statement."""

    feature_version: tuple[int, int] | None = None
    top_level_await: bool = True
    echo_expressions: bool = False


class ExecutorOptions(BaseModel):
    initial_bindings: dict[str, Any] = Field(default_factory=dict)
    timeout_ms: float = Field(default=30000, gt=0)
    dialect: Dialect = Field(default_factory=Dialect)
    continue_on_error: bool = False


# ── Runtime results ──────────────────────────────────────────────

ExecutionErrorType = Literal["parse", "runtime", "timeout"]


class ExecutionError(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ExecutionErrorType
    thrown: Any
    message: str
    line: int = Field(ge=1)

    @field_serializer("thrown", when_used="json")
    def _serialize_thrown(self, thrown: Any) -> str:
        return repr(thrown)


class ExecutionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    statement: str
    line: int = Field(ge=1)
    logs: str
    error: ExecutionError | None = None


class ExecutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    logs: str
    error: ExecutionError | None = None
