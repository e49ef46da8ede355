# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Split pasted chat transcripts into role-labelled messages."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .codeblocks import extract_code_blocks
from .models import ASSISTANT, USER, Message, Role

LOGGER = logging.getLogger(__name__)

ROLE_TOKENS = (
    "User",
    "Human",
    "You",
    "Me",
    "Assistant",
    "AI",
    "Bot",
    "ChatGPT",
    "Claude",
    "GPT",
    "System",
)
USER_TOKENS = frozenset({"user", "human", "you", "me"})

BYTE_ORDER_MARK = "\ufeff"

_ROLE = "(" + "|".join(ROLE_TOKENS) + r")\s*[:\-]"

ROLE_PATTERN = re.compile("^" + _ROLE, re.IGNORECASE | re.MULTILINE)
# Zero-width split so the marker stays at the start of its own segment.
ROLE_SPLIT_PATTERN = re.compile("^(?=" + _ROLE + ")", re.IGNORECASE | re.MULTILINE)
ROLE_PREFIX_PATTERN = re.compile("^" + _ROLE + r"\s*", re.IGNORECASE)


def _role_for_token(token: str) -> Role:
    return USER if token.lower() in USER_TOKENS else ASSISTANT


def _single_assistant_message(raw_text: str) -> Message:
    return Message(
        id="msg-0",
        role=ASSISTANT,
        content=raw_text.strip(),
        code_blocks=tuple(extract_code_blocks(raw_text, 0)),
    )


def parse_conversation(raw_text: str) -> list[Message]:
    """Parse pasted conversation text into messages.

    Lines starting with a role marker such as ``User:``, ``Human -`` or
    ``ChatGPT:`` open a new message. Text without any marker becomes one
    assistant message. Never raises for string input.

    Args:
        raw_text: Transcript text as pasted

    Returns:
        Messages in order, ids ``msg-0``, ``msg-1``, ...
    """
    raw_text = raw_text.removeprefix(BYTE_ORDER_MARK)
    if not raw_text.strip():
        LOGGER.debug("Empty input, no messages")
        return []

    messages: list[Message] = []

    if ROLE_PATTERN.search(raw_text):
        for segment in ROLE_SPLIT_PATTERN.split(raw_text):
            trimmed = segment.strip()
            if not trimmed:
                continue

            match = ROLE_PREFIX_PATTERN.match(trimmed)
            if match is None:
                LOGGER.debug("Skipping %d chars before the first role marker", len(trimmed))
                continue

            index = len(messages)
            content = trimmed[match.end():].strip()
            messages.append(
                Message(
                    id=f"msg-{index}",
                    role=_role_for_token(match.group(1)),
                    content=content,
                    code_blocks=tuple(extract_code_blocks(content, index)),
                )
            )
    else:
        LOGGER.debug("No role markers found, treating input as a single assistant message")

    if not messages:
        messages.append(_single_assistant_message(raw_text))

    LOGGER.info(
        "Parsed %d message(s) with %d code block(s)",
        len(messages),
        sum(len(m.code_blocks) for m in messages),
    )
    return messages


def message_ids(messages: Iterable[Message]) -> list[str]:
    """Ids of all messages, the default selection after parsing."""
    return [message.id for message in messages]
