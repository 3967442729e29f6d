"""Tests for the lenient SDK message parser."""

from __future__ import annotations

import streaming_executor  # noqa: F401  (applies the patch)
from claude_agent_sdk._internal import client, message_parser

from streaming_executor import sdk_patch


def test_patch_applied_on_import():
    assert sdk_patch.apply() is False
    assert client.parse_message is message_parser.parse_message


def test_unknown_message_type_parses_to_none():
    assert message_parser.parse_message({"type": "not_a_real_message_type"}) is None


def test_known_message_still_parses():
    message = message_parser.parse_message(
        {
            "type": "result",
            "subtype": "success",
            "duration_ms": 1,
            "duration_api_ms": 1,
            "is_error": False,
            "num_turns": 1,
            "session_id": "s",
        }
    )
    assert type(message).__name__ == "ResultMessage"
