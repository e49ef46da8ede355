# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later
"""CLI interface for the chat transcript exporter."""

from __future__ import annotations

import codecs
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .formatters import build_exports, code_block_files, all_code_blocks
from .models import ExportFile, Message
from .parser import message_ids, parse_conversation

LOGGER = logging.getLogger(__name__)

DEFAULT_OUTDIR = Path("output")
CODE_SUBDIR = "code"

app = typer.Typer(
    name="chat-paste-export",
    help="Split pasted AI conversations into messages and export their text and code blocks.",
    no_args_is_help=True,
)

console = Console()


_LEVEL_NAMES = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _parse_log_level(log_level_str: str) -> int:
    """Parse log level from string (name or integer).

    Raises:
        ValueError: If log level is invalid
    """
    try:
        level_int = int(log_level_str)
    except ValueError:
        level_int = None
    if level_int is not None:
        if level_int < 0:
            raise ValueError("Log level must be non-negative")
        return level_int

    level_name = log_level_str.upper()
    if level_name in _LEVEL_NAMES:
        return _LEVEL_NAMES[level_name]

    raise ValueError(
        f"Invalid log level '{log_level_str}'. "
        f"Use log level names (CRITICAL, ERROR, WARNING, INFO, DEBUG) "
        f"or non-negative integers."
    )


def _setup_logging(verbose: int, quiet: int, log_level: str | None) -> int:
    """Configure logging from -v/-q counts or an explicit level.

    Each -v lowers and each -q raises the level by 10, starting from the
    explicit level or WARNING.
    """
    base_level = _parse_log_level(log_level) if log_level is not None else logging.WARNING
    level = max(0, base_level - (verbose - quiet) * 10)

    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)

    LOGGER.info("Log level set to %d (%s)", level, logging.getLevelName(level))
    return level


UTF16_BOMS = (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)


def _decode_input(data: bytes) -> str:
    """Decode UTF-16 when a UTF-16 BOM is present, UTF-8 (BOM optional) otherwise."""
    encoding = "utf-16" if data.startswith(UTF16_BOMS) else "utf-8-sig"
    return data.decode(encoding)


def _read_input(source: Path) -> str:
    if str(source) == "-":
        return sys.stdin.read()
    if not source.exists():
        console.print(f"[red]Error: File not found: {escape(str(source))}[/red]")
        raise typer.Exit(1)
    try:
        return _decode_input(source.read_bytes())
    except UnicodeDecodeError as exc:
        console.print(
            f"[red]Error: Input is not UTF-8 or UTF-16 text: {escape(str(source))} "
            f"({escape(str(exc))})[/red]"
        )
        raise typer.Exit(1) from exc


def _load_messages(source: Path) -> list[Message]:
    messages = parse_conversation(_read_input(source))
    if not messages:
        LOGGER.critical("No messages found in %s", source)
        raise typer.Exit(1)
    return messages


def _write_exports(exports: list[ExportFile], outdir: Path) -> list[Path]:
    """Write exports below outdir, skipping names that escape it or repeat."""
    root = outdir.resolve()
    written: list[Path] = []
    for export in exports:
        target = (root / export.filename).resolve()
        if root not in target.parents:
            LOGGER.warning("Skipping %s export %r: path leaves %s", export.kind, export.filename, root)
            continue
        if target in written:
            LOGGER.warning("Skipping %s export %r: file already written", export.kind, export.filename)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(export.content, encoding="utf-8")
        LOGGER.debug("Wrote %s (%d chars)", target, len(export.content))
        written.append(target)
    return written


@app.callback()
def main(
    verbose: int = typer.Option(
        0, "-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)."
    ),
    quiet: int = typer.Option(
        0, "-q", "--quiet", count=True, help="Decrease verbosity (-q: ERROR, -qq: CRITICAL)."
    ),
    log_level: Optional[str] = typer.Option(
        None, "-l", "--log-level", help="Explicit log level name or non-negative integer."
    ),
) -> None:
    """Split pasted AI conversations into messages and export their text and code blocks."""
    try:
        _setup_logging(verbose, quiet, log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def run(
    source: Path = typer.Argument(..., help="Transcript text file, or - for stdin"),
    outdir: Path = typer.Option(
        DEFAULT_OUTDIR, "-o", "--outdir", help="Output directory for export files"
    ),
    select: Optional[List[str]] = typer.Option(
        None, "-s", "--select", help="Message id to include in the selected export (repeatable)"
    ),
    split: bool = typer.Option(
        False, "--split", help="Also write every code block to its own file"
    ),
) -> None:
    """Parse a transcript and write every available export."""
    messages = _load_messages(source)
    known = set(message_ids(messages))
    selected_ids = known.intersection(select) if select else known

    unknown = set(select or ()).difference(known)
    if unknown:
        LOGGER.warning("Unknown message id(s) ignored: %s", ", ".join(sorted(unknown)))
    if not selected_ids:
        LOGGER.warning("No known message selected, skipping the selected export")

    exports = build_exports(messages, selected_ids)
    outdir.mkdir(exist_ok=True, parents=True)

    if split:
        code_files = code_block_files(all_code_blocks(messages))
    else:
        code_files = []

    try:
        written = _write_exports(exports, outdir)
        written += _write_exports(code_files, outdir / CODE_SUBDIR)
    except OSError as exc:
        console.print(f"[red]Error writing exports: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    for path in written:
        console.print(f"[green]✓[/green] {escape(str(path))}")
    console.print(
        f"\n[green]Wrote {len(written)} file(s) from {len(messages)} message(s)[/green]"
    )

    skipped = len(exports) + len(code_files) - len(written)
    if skipped:
        console.print(f"[yellow]Skipped {skipped} file(s); see the warnings above[/yellow]")


@app.command()
def show(
    source: Path = typer.Argument(..., help="Transcript text file, or - for stdin"),
) -> None:
    """List parsed messages and their code blocks."""
    messages = _load_messages(source)

    table = Table(title=f"{len(messages)} message(s)")
    table.add_column("Id")
    table.add_column("Role")
    table.add_column("Chars", justify="right")
    table.add_column("Code blocks")

    for message in messages:
        table.add_row(
            message.id,
            message.label,
            str(len(message.content)),
            escape(", ".join(block.filename for block in message.code_blocks)) or "-",
        )

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"chat-paste-export {__version__}")


if __name__ == "__main__":
    app()
