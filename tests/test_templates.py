"""Tests for Jinja2 template rendering.

The system prompt for ``generate`` lists the names already bound in the
executor. StrictUndefined ensures missing variables fail loudly.
"""

from __future__ import annotations

import pytest
from jinja2 import UndefinedError

from streaming_executor.templates import render_system_prompt, render_template


def test_simple_variable():
    assert render_template("Hello {{ name }}", name="World") == "Hello World"


def test_missing_variable_raises():
    with pytest.raises(UndefinedError):
        render_template("{{ missing }}")


def test_system_prompt_lists_names_sorted():
    prompt = render_system_prompt(["zeta", "alpha"])
    assert "- alpha\n- zeta\n" in prompt
    assert prompt.index("alpha") < prompt.index("zeta")


def test_system_prompt_hides_dunder_names():
    prompt = render_system_prompt(["__builtins__", "__name__", "data"])
    assert "__builtins__" not in prompt
    assert "- data" in prompt


def test_system_prompt_without_names():
    prompt = render_system_prompt([])
    assert "already exist" not in prompt
    assert "```python" in prompt


def test_system_prompt_reflects_await_setting():
    assert "Top-level `await` is allowed." in render_system_prompt([])
    assert "Top-level `await` is not allowed." in render_system_prompt(
        [], top_level_await=False
    )
