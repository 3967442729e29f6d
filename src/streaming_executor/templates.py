"""Jinja2 rendering of the code-generation system prompt.

StrictUndefined ensures missing variables blow up immediately instead of
silently rendering empty strings.
"""

from __future__ import annotations

from collections.abc import Iterable

import jinja2

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

SYSTEM_PROMPT = """\
You write Python that is executed while you are still writing it.
Each top-level statement runs as soon as it is complete, in a namespace
that persists between statements.

Rules:
- Reply with a single ```python code block and nothing else.
- Use print() for anything the user should see.
- Top-level `await` is {{ "allowed" if top_level_await else "not allowed" }}.
- A statement that raises stops the program; later statements never run.
{% if names %}

These names already exist and can be used directly:
{% for name in names %}
- {{ name }}
{% endfor %}
{% endif %}
"""


def render_template(template_str: str, **variables: object) -> str:
    """Render a Jinja2 template string.

    Raises:
        jinja2.UndefinedError: If the template references a variable
            that isn't passed in.
    """
    return _ENV.from_string(template_str).render(**variables)


def render_system_prompt(names: Iterable[str], *, top_level_await: bool = True) -> str:
    """Build the system prompt for ``generate``.

    Args:
        names: Names already bound in the executor context. Dunder names
            are left out.
        top_level_await: Whether the executor accepts top-level await.
    """
    visible = sorted(n for n in names if not n.startswith("__"))
    return render_template(SYSTEM_PROMPT, names=visible, top_level_await=top_level_await)
