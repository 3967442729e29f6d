"""Lenient message parsing for claude-agent-sdk.

``llm_code_stream`` asks for partial messages, so the CLI interleaves a
``stream_event`` per token with system, rate-limit and other bookkeeping
messages for the whole length of the reply. The SDK's ``parse_message``
raises ``MessageParseError`` on any type it does not know, and
``process_query`` does ``yield parse_message(data)``, so one unknown type
arriving mid-reply ends ``query()`` then and there. The executor sees that as
end of input: the statement being written is flushed as an incomplete
statement and the rest of the program never runs. A non-streaming caller
would lose nothing it had not already received.

``apply`` swaps in a parser that returns ``None`` for such messages.
Consumers must skip ``None`` values.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

_log = logging.getLogger(__name__)

# client.py imports parse_message by name, so both references are replaced.
_TARGETS = (
    "claude_agent_sdk._internal.message_parser",
    "claude_agent_sdk._internal.client",
)

_patched = False


def apply() -> bool:
    """Install the lenient parser.

    Returns:
        True if this call installed it, False if it already was.
    """
    global _patched  # noqa: PLW0603
    if _patched:
        return False

    from claude_agent_sdk._errors import MessageParseError
    from claude_agent_sdk._internal import message_parser

    strict = message_parser.parse_message

    def lenient_parse_message(data: dict[str, Any]) -> object:
        try:
            return strict(data)
        except MessageParseError as exc:
            kind = data.get("type") if isinstance(data, dict) else None
            _log.debug("Dropping SDK message of type %r: %s", kind, exc)
            return None

    for name in _TARGETS:
        importlib.import_module(name).parse_message = lenient_parse_message  # type: ignore[attr-defined]

    _patched = True
    return True
