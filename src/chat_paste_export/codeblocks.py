# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Fenced code block extraction with language and filename inference."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import NamedTuple

from .models import CodeBlock

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "text"

# --------------------------------------------------------------------------- #
# Fence and comment patterns                                                  #
# --------------------------------------------------------------------------- #

# Opening fence line (language tag plus optional hint, no backticks), then a
# non-greedy body up to the nearest closing fence.
FENCE_PATTERN = re.compile(r"```([^`\n]*)\n([\s\S]*?)```")
LANGUAGE_TAG_PATTERN = re.compile(r"\w*")

# First body line written as //, #, /* */ or {/* */} comment.
FIRST_LINE_COMMENT_PATTERN = re.compile(r"(?://|#|/\*|\{/\*)(.*)")
COMMENT_CLOSERS = ("*/}", "*/")


# --------------------------------------------------------------------------- #
# Language table                                                              #
# --------------------------------------------------------------------------- #


class LanguageNaming(NamedTuple):
    extension: str
    candidates: tuple[str, ...]


_PY = LanguageNaming("py", ("main",))
_JS = LanguageNaming("js", ("index", "utils", "helpers"))
_TS = LanguageNaming("ts", ("index", "utils", "types"))
_SH = LanguageNaming("sh", ("setup", "run"))
_YML = LanguageNaming("yml", ("config", "docker-compose"))
_MD = LanguageNaming("md", ("README", "notes"))

LANGUAGE_TABLE: MappingProxyType[str, LanguageNaming] = MappingProxyType(
    {
        "text": LanguageNaming("txt", ("output", "notes", "snippet")),
        "txt": LanguageNaming("txt", ("output", "notes", "snippet")),
        "plaintext": LanguageNaming("txt", ("output", "notes", "snippet")),
        "python": _PY,
        "py": _PY,
        "javascript": _JS,
        "js": _JS,
        "typescript": _TS,
        "ts": _TS,
        "tsx": LanguageNaming("tsx", ("App", "Component", "Page")),
        "jsx": LanguageNaming("jsx", ("App", "Component", "Page")),
        "css": LanguageNaming("css", ("styles", "globals")),
        "scss": LanguageNaming("scss", ("styles",)),
        "html": LanguageNaming("html", ("index",)),
        "json": LanguageNaming("json", ("data", "config", "package")),
        "sql": LanguageNaming("sql", ("schema", "queries", "seed")),
        "bash": _SH,
        "shell": _SH,
        "sh": _SH,
        "zsh": _SH,
        "yaml": _YML,
        "yml": _YML,
        "toml": LanguageNaming("toml", ("config", "pyproject")),
        "rust": LanguageNaming("rs", ("main", "lib")),
        "go": LanguageNaming("go", ("main",)),
        "java": LanguageNaming("java", ("Main",)),
        "c": LanguageNaming("c", ("main",)),
        "cpp": LanguageNaming("cpp", ("main",)),
        "ruby": LanguageNaming("rb", ("main",)),
        "php": LanguageNaming("php", ("index",)),
        "markdown": _MD,
        "md": _MD,
        "dockerfile": LanguageNaming("", ("Dockerfile",)),
        "makefile": LanguageNaming("", ("Makefile",)),
    }
)

FALLBACK_CANDIDATES = ("code",)


# --------------------------------------------------------------------------- #
# Filename resolution                                                         #
# --------------------------------------------------------------------------- #


def _sniff_filename(code: str) -> str:
    """Return a filename named in a first-line comment, or an empty string."""
    first_line = code.split("\n", 1)[0].strip()
    match = FIRST_LINE_COMMENT_PATTERN.fullmatch(first_line)
    if match is None:
        return ""
    text = match.group(1).strip()
    for closer in COMMENT_CLOSERS:
        if text.endswith(closer):
            text = text[: -len(closer)].strip()
            break
    # Prose comments rarely contain a dot; paths nearly always do.
    return text if "." in text else ""


def _parse_fence_hint(info: str) -> str:
    """Return the filename hint trailing the language tag, or an empty string.

    ``// name`` is tried before ``# name``; a ``# ...`` part after a
    ``//`` hint is not part of the name.
    """
    text = info.strip()
    if text.startswith("//"):
        name = text[2:].lstrip(" \t")
        cut = name.find("#", 1)
        if cut != -1 and cut + 1 < len(name):
            name = name[:cut]
        return name.strip()
    if text.startswith("#"):
        return text[1:].strip()
    return ""


def synthesize_filename(language: str, local_ordinal: int) -> str:
    naming = LANGUAGE_TABLE.get(language.lower())
    if naming is None:
        naming = LanguageNaming(language or "txt", FALLBACK_CANDIDATES)
    basename = naming.candidates[min(local_ordinal, len(naming.candidates) - 1)]
    return f"{basename}.{naming.extension}" if naming.extension else basename


def number_filename(filename: str, number: int) -> str:
    """Insert ``-<number>`` before the extension of the last path segment.

    >>> number_filename("src/main.py", 2)
    'src/main-2.py'
    >>> number_filename("Dockerfile", 3)
    'Dockerfile-3'
    """
    head, sep, tail = filename.rpartition("/")
    stem, _, extension = tail.rpartition(".")
    if not stem:
        return f"{filename}-{number}"
    return f"{head}{sep}{stem}-{number}.{extension}"


def _unique_filename(filename: str, local_ordinal: int, taken: set[str]) -> str:
    if filename not in taken:
        return filename
    number = local_ordinal + 1
    candidate = number_filename(filename, number)
    while candidate in taken:
        number += 1
        candidate = number_filename(filename, number)
    LOGGER.debug("Filename %r already used in this message, renamed to %r", filename, candidate)
    return candidate


# --------------------------------------------------------------------------- #
# Extraction                                                                  #
# --------------------------------------------------------------------------- #


def extract_code_blocks(text: str, message_index: int) -> list[CodeBlock]:
    """Extract fenced code blocks from one message body.

    Filenames come from the inline fence hint, else a first-line comment
    that looks like a path, else the language table. Names are unique
    within the returned list only; each call starts with fresh naming
    state.

    Args:
        text: Message body, possibly containing ``` fences
        message_index: Ordinal of the owning message

    Returns:
        Code blocks in order of appearance
    """
    blocks: list[CodeBlock] = []
    taken: set[str] = set()

    for local_ordinal, match in enumerate(FENCE_PATTERN.finditer(text)):
        info = match.group(1)
        tag = LANGUAGE_TAG_PATTERN.match(info).group()
        language = tag or DEFAULT_LANGUAGE
        hint = _parse_fence_hint(info[len(tag):])
        code = match.group(2).strip()

        filename = hint or _sniff_filename(code) or synthesize_filename(language, local_ordinal)
        filename = _unique_filename(filename, local_ordinal, taken)
        taken.add(filename)

        blocks.append(
            CodeBlock(
                id=f"code-{message_index}-{local_ordinal}",
                language=language,
                filename=filename,
                code=code,
                message_index=message_index,
            )
        )
        LOGGER.debug(
            "Message %d block %d: language=%s, filename=%s, %d chars",
            message_index,
            local_ordinal,
            language,
            filename,
            len(code),
        )

    return blocks
