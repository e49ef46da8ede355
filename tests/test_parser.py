# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later
"""Tests for the message segmenter."""

import dataclasses
import typing

import pytest

from chat_paste_export.models import Message
from chat_paste_export.parser import message_ids, parse_conversation


@pytest.mark.parametrize("raw", ["", "   ", "\n\t\n"])
def test_blank_input(raw: str) -> None:
    """Test that blank input gives no messages."""
    assert parse_conversation(raw) == []


def test_no_markers_single_assistant_message() -> None:
    """Test that unmarked text becomes one assistant message."""
    messages = parse_conversation("\n  Just some notes.\nMore notes.  \n")

    assert len(messages) == 1
    assert messages[0].id == "msg-0"
    assert messages[0].role == "assistant"
    assert messages[0].content == "Just some notes.\nMore notes."
    assert messages[0].code_blocks == ()


def test_user_and_assistant() -> None:
    """Test the basic two-turn transcript."""
    messages = parse_conversation("User: hi\n\nAssistant: hello")

    assert [(m.id, m.role, m.content) for m in messages] == [
        ("msg-0", "user", "hi"),
        ("msg-1", "assistant", "hello"),
    ]


@pytest.mark.parametrize("token", ["User", "human", "YOU", "Me"])
def test_user_tokens(token: str) -> None:
    """Test every token that maps to the user role."""
    messages = parse_conversation(f"{token}: question")

    assert messages[0].role == "user"
    assert messages[0].content == "question"


@pytest.mark.parametrize("token", ["Assistant", "AI", "bot", "ChatGPT", "CLAUDE", "GPT", "System"])
def test_assistant_tokens(token: str) -> None:
    """Test every token that maps to the assistant role."""
    messages = parse_conversation(f"{token}: answer")

    assert messages[0].role == "assistant"
    assert messages[0].content == "answer"


def test_dash_separator_and_spacing() -> None:
    """Test dash separators and whitespace around the separator."""
    messages = parse_conversation("Human - what?\nClaude :   this.")

    assert [(m.role, m.content) for m in messages] == [("user", "what?"), ("assistant", "this.")]


def test_marker_must_start_a_line() -> None:
    """Test that a role word mid-line does not split."""
    messages = parse_conversation("I told the bot User: hi")

    assert len(messages) == 1
    assert messages[0].role == "assistant"
    assert messages[0].content == "I told the bot User: hi"


def test_token_must_be_followed_by_separator() -> None:
    """Test that words starting with a token are not markers."""
    messages = parse_conversation("Mexico: a country\nYour turn: go")

    assert len(messages) == 1
    assert messages[0].content == "Mexico: a country\nYour turn: go"


def test_text_before_first_marker_is_skipped() -> None:
    """Test that a preamble without a role is dropped."""
    messages = parse_conversation("Exported chat\n\nUser: hi\nAI: hey")

    assert [(m.id, m.role, m.content) for m in messages] == [
        ("msg-0", "user", "hi"),
        ("msg-1", "assistant", "hey"),
    ]


def test_multiline_content_keeps_fences() -> None:
    """Test that code stays in content and is extracted per message."""
    raw = (
        "User: write it\n"
        "Assistant: Here:\n"
        "```python\n"
        "print('hi')\n"
        "```\n"
        "Done.\n"
    )
    messages = parse_conversation(raw)

    assert messages[1].content == "Here:\n```python\nprint('hi')\n```\nDone."
    assert [(b.id, b.message_index, b.filename) for b in messages[1].code_blocks] == [
        ("code-1-0", 1, "main.py"),
    ]


def test_naming_resets_for_each_message() -> None:
    """Test that identical names in different messages are not renumbered."""
    raw = "AI: ```python\na\n```\nUser: again\nAI: ```python\nb\n```"
    messages = parse_conversation(raw)

    assert [b.filename for m in messages for b in m.code_blocks] == ["main.py", "main.py"]
    assert [b.id for m in messages for b in m.code_blocks] == ["code-0-0", "code-2-0"]


def test_fallback_message_extracts_code() -> None:
    """Test that unmarked input still has its code blocks extracted."""
    messages = parse_conversation("Some code:\n```sql\nSELECT 1;\n```\n")

    assert messages[0].code_blocks[0].language == "sql"
    assert messages[0].code_blocks[0].message_index == 0


def test_block_message_index_matches_a_message() -> None:
    """Test that every block points back at its owning message."""
    raw = "User: a\nAI: ```\nx\n```\nUser: b\nAI: ```js\ny\n```\n```\nz\n```"
    messages = parse_conversation(raw)

    for ordinal, message in enumerate(messages):
        assert message.id == f"msg-{ordinal}"
        assert all(block.message_index == ordinal for block in message.code_blocks)


def test_parse_is_deterministic() -> None:
    """Test that parsing identical input twice gives equal output."""
    raw = "User: hi\nAssistant: ```ts\nlet a = 1\n```"

    assert parse_conversation(raw) == parse_conversation(raw)


def test_messages_are_immutable() -> None:
    """Test that parsed messages cannot be modified."""
    message = parse_conversation("User: hi")[0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        message.content = "changed"  # type: ignore[misc]


def test_message_ids() -> None:
    """Test the default selection helper."""
    messages = parse_conversation("User: a\nAI: b\nUser: c")

    assert message_ids(messages) == ["msg-0", "msg-1", "msg-2"]


def test_leading_byte_order_mark() -> None:
    """Test that a BOM before the first role marker does not hide it."""
    messages = parse_conversation("\ufeffUser: hi\nAI: hello")

    assert [(m.id, m.role, m.content) for m in messages] == [
        ("msg-0", "user", "hi"),
        ("msg-1", "assistant", "hello"),
    ]


def test_byte_order_mark_only() -> None:
    """Test that a lone BOM counts as blank input."""
    assert parse_conversation("\ufeff\n") == []


def test_roles_match_declared_role_type() -> None:
    """Test that parsed roles are exactly the declared Role values."""
    roles = set(typing.get_args(typing.get_type_hints(Message)["role"]))
    messages = parse_conversation("User: a\nAI: b\nSystem: c\nHuman: d")

    assert roles == {"user", "assistant"}
    assert {m.role for m in messages} == roles
