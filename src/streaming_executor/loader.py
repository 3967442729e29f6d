"""YAML options loading."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from streaming_executor.errors import ConfigLoadError
from streaming_executor.models import ExecutorOptions


def load_options(path: str | Path) -> ExecutorOptions:
    """Load executor options from a YAML file.

    Parses YAML, then validates the structure via Pydantic. Recognised
    keys: ``timeout_ms``, ``continue_on_error``, ``initial_bindings`` and
    ``dialect`` (``feature_version``, ``top_level_await``,
    ``echo_expressions``). An empty file yields the defaults.

    Args:
        path: Path to the YAML options file.

    Returns:
        Validated ExecutorOptions.

    Raises:
        ConfigLoadError: If the file doesn't exist, YAML is invalid,
            or the structure doesn't match the expected schema.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigLoadError(f"Options file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(
            f"Options YAML must be a mapping, got {type(raw).__name__}"
        )

    try:
        return ExecutorOptions.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigLoadError(f"Options structure invalid: {e}") from e
