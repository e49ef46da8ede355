# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Plain-text exports of parsed conversations and their code blocks."""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from .models import ASSISTANT, CodeBlock, ExportFile, Message

LOGGER = logging.getLogger(__name__)

FULL_TEXT_FILENAME = "conversation-full.txt"
SELECTED_TEXT_FILENAME = "conversation-selected.txt"
RECENT_CODE_FILENAME = "recent-code.txt"
ALL_CODE_FILENAME = "all-code-blocks.txt"

MESSAGE_SEPARATOR = "\n\n---\n\n"
CODE_SEPARATOR = "\n\n\n"


def _format_messages(messages: Sequence[Message]) -> str:
    return MESSAGE_SEPARATOR.join(f"{m.label}:\n{m.content}" for m in messages)


def full_text(messages: Sequence[Message]) -> str:
    """Whole conversation as ``User:``/``Assistant:`` blocks separated by ``---``."""
    return _format_messages(messages)


def selected_text(messages: Sequence[Message], selected_ids: Collection[str]) -> str:
    """Like full_text, limited to selected ids, in conversation order."""
    return _format_messages([m for m in messages if m.id in selected_ids])


def all_code_blocks(messages: Sequence[Message]) -> list[CodeBlock]:
    return [block for message in messages for block in message.code_blocks]


def recent_code_blocks(messages: Sequence[Message]) -> list[CodeBlock]:
    """Code blocks of the latest assistant message, even if a user message follows it."""
    for message in reversed(messages):
        if message.role == ASSISTANT:
            return list(message.code_blocks)
    return []


def combined_code_export(blocks: Sequence[CodeBlock]) -> str:
    return CODE_SEPARATOR.join(
        f"// ===== {block.filename} ({block.language}) =====\n\n{block.code}" for block in blocks
    )


# --------------------------------------------------------------------------- #
# Export plan                                                                 #
# --------------------------------------------------------------------------- #


def recent_code_export(messages: Sequence[Message]) -> ExportFile | None:
    """Export for the latest assistant turn's code.

    A single block is exported as-is under its own filename; several
    blocks are combined into ``recent-code.txt``. Returns None when the
    latest assistant turn has no code.
    """
    blocks = recent_code_blocks(messages)
    if not blocks:
        return None
    if len(blocks) == 1:
        return ExportFile(filename=blocks[0].filename, content=blocks[0].code, kind="recent-code")
    return ExportFile(
        filename=RECENT_CODE_FILENAME,
        content=combined_code_export(blocks),
        kind="recent-code",
    )


def code_block_files(blocks: Sequence[CodeBlock]) -> list[ExportFile]:
    """One file per block, grouped under ``msg-<index>/``.

    Filenames are only unique within a message, so the message prefix
    keeps blocks from different messages apart.
    """
    return [
        ExportFile(
            filename=f"msg-{block.message_index}/{block.filename}",
            content=block.code,
            kind="code-block",
        )
        for block in blocks
    ]


def build_exports(
    messages: Sequence[Message], selected_ids: Collection[str] | None = None
) -> list[ExportFile]:
    """Return every export currently available for the conversation.

    Args:
        messages: Parsed conversation
        selected_ids: Ids of selected messages; None or empty disables the
            selected-sections export

    Returns:
        Exports in order: full, selected, recent code, all code
    """
    exports: list[ExportFile] = []

    if messages:
        exports.append(ExportFile(FULL_TEXT_FILENAME, full_text(messages), "full"))
    else:
        LOGGER.debug("No messages, full text export unavailable")

    if selected_ids:
        exports.append(
            ExportFile(SELECTED_TEXT_FILENAME, selected_text(messages, selected_ids), "selected")
        )
    else:
        LOGGER.debug("Nothing selected, selected text export unavailable")

    recent = recent_code_export(messages)
    if recent is not None:
        exports.append(recent)
    else:
        LOGGER.debug("No code in the most recent assistant message")

    blocks = all_code_blocks(messages)
    if blocks:
        exports.append(ExportFile(ALL_CODE_FILENAME, combined_code_export(blocks), "all-code"))
    else:
        LOGGER.debug("No code blocks found")

    LOGGER.info("%d export(s) available", len(exports))
    return exports
