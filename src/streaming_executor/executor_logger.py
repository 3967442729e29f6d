"""Structured JSON logging for streaming runs.

Writes JSON-lines to disk so agents and humans can see, after the fact,
which statements ran, how long each took, and where a run failed. Each
log entry is a single JSON object on one line.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger("streaming_executor")


def configure_logging(
    log_dir: str | Path, level: int = logging.DEBUG
) -> None:
    """Set up executor logging to write JSON-lines to a file.

    Args:
        log_dir: Directory to write ``executor.log`` into.
        level: Logging level (default: DEBUG).
    """
    log_path = Path(log_dir) / "executor.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(str(log_path))
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    _logger.addHandler(handler)
    _logger.setLevel(level)


def _log(event: dict[str, Any]) -> None:
    _logger.info(json.dumps(event, default=str))


def log_run_start(run_id: str, continue_on_error: bool) -> None:
    _log({"event": "run_start", "run_id": run_id, "continue_on_error": continue_on_error})


def log_statement_start(run_id: str, line: int, statement: str) -> None:
    _log({
        "event": "statement_start",
        "run_id": run_id,
        "line": line,
        "statement_preview": statement[:200],
    })


def log_statement_complete(run_id: str, line: int, duration_ms: float) -> None:
    _log({
        "event": "statement_complete",
        "run_id": run_id,
        "line": line,
        "duration_ms": round(duration_ms, 2),
    })


def log_statement_error(run_id: str, line: int, error_type: str, message: str) -> None:
    _log({
        "event": "statement_error",
        "run_id": run_id,
        "line": line,
        "error_type": error_type,
        "error": message,
    })


def log_run_complete(
    run_id: str, statements: int, duration_ms: float, error_type: str | None
) -> None:
    _log({
        "event": "run_complete",
        "run_id": run_id,
        "statements": statements,
        "duration_ms": round(duration_ms, 2),
        "error_type": error_type,
    })
