# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Parse pasted AI chat transcripts and export their text and code blocks."""

__version__ = "0.1.0"

from .codeblocks import extract_code_blocks
from .formatters import (
    all_code_blocks,
    build_exports,
    code_block_files,
    combined_code_export,
    full_text,
    recent_code_blocks,
    recent_code_export,
    selected_text,
)
from .models import CodeBlock, ExportFile, Message
from .parser import message_ids, parse_conversation

__all__ = [
    "__version__",
    "CodeBlock",
    "ExportFile",
    "Message",
    "all_code_blocks",
    "build_exports",
    "code_block_files",
    "combined_code_export",
    "extract_code_blocks",
    "full_text",
    "message_ids",
    "parse_conversation",
    "recent_code_blocks",
    "recent_code_export",
    "selected_text",
]
