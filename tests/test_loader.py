"""Tests for YAML options loading."""

from __future__ import annotations

import pytest

from streaming_executor.errors import ConfigLoadError
from streaming_executor.loader import load_options


def test_load_full_options(tmp_path):
    yaml_content = """\
timeout_ms: 1500
continue_on_error: true
initial_bindings:
  greeting: hello
  limits: [1, 2, 3]
dialect:
  feature_version: [3, 11]
  top_level_await: false
  echo_expressions: true
"""
    path = tmp_path / "options.yaml"
    path.write_text(yaml_content)
    options = load_options(path)

    assert options.timeout_ms == 1500
    assert options.continue_on_error is True
    assert options.initial_bindings == {"greeting": "hello", "limits": [1, 2, 3]}
    assert options.dialect.feature_version == (3, 11)
    assert options.dialect.top_level_await is False
    assert options.dialect.echo_expressions is True


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "options.yaml"
    path.write_text("")
    options = load_options(path)
    assert options.timeout_ms == 30000
    assert options.continue_on_error is False


def test_accepts_string_path(tmp_path):
    path = tmp_path / "options.yaml"
    path.write_text("timeout_ms: 10\n")
    assert load_options(str(path)).timeout_ms == 10


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigLoadError, match="not found"):
        load_options(tmp_path / "nope.yaml")


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("timeout_ms: [unclosed\n")
    with pytest.raises(ConfigLoadError, match="Invalid YAML"):
        load_options(path)


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigLoadError, match="must be a mapping"):
        load_options(path)


def test_invalid_structure_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("timeout_ms: -5\n")
    with pytest.raises(ConfigLoadError, match="structure invalid"):
        load_options(path)
