# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Typed records produced by the conversation parser.

Message and CodeBlock are created once per parse pass and never mutated;
ExportFile pairs a generated export string with its default filename.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Role = Literal["user", "assistant"]

USER: Role = "user"
ASSISTANT: Role = "assistant"

ROLE_LABELS = {USER: "User", ASSISTANT: "Assistant"}


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code region found inside one message."""

    id: str
    language: str
    filename: str
    code: str
    message_index: int


@dataclass(frozen=True)
class Message:
    """One role-labelled turn of a conversation."""

    id: str
    role: Role
    content: str
    code_blocks: tuple[CodeBlock, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return ROLE_LABELS.get(self.role, "Assistant")


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: str
    kind: str
