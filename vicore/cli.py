#!/usr/bin/env python3
"""vicore - inspect tags files and vi key sequences from the command line."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# "<ctrl+]>" style tokens for keys that aren't a single character
SPECIAL_KEY = re.compile(r"<([^<>]+)>|(.)", re.DOTALL)


def split_keys(sequence: str) -> list[str]:
    """Split ``"d3w"`` into ``["d", "3", "w"]`` and ``"<ctrl+]>"`` into one token."""
    return [special or char for special, char in SPECIAL_KEY.findall(sequence)]


def _default_tags_file() -> str:
    from .config import load_settings

    return load_settings().tags_file


def cmd_tags_lookup(args: argparse.Namespace) -> int:
    """Print every record for a symbol."""
    from .tags import TagIndex, TagNotFoundError

    index = TagIndex(args.tags)
    try:
        records = index.require(args.name)
    except TagNotFoundError as exc:
        err_console.print(f"[red]{escape_markup(str(exc))}[/red]")
        return 1

    table = Table(title=f"{args.name} ({len(records)})")
    table.add_column("#", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Address", style="magenta")
    table.add_column("Flags")
    for number, record in enumerate(records, start=1):
        table.add_row(str(number), record.filename, record.locate_expr, record.flags or "")
    console.print(table)
    return 0


def cmd_tags_match(args: argparse.Namespace) -> int:
    """Print symbol names matching a pattern."""
    from .tags import TagIndex

    names = TagIndex(args.tags).lookup_pattern(args.pattern)
    if not names:
        err_console.print(f"[red]Tag not found: {escape_markup(args.pattern)}[/red]")
        return 1
    for name in names:
        console.print(name, markup=False)
    return 0


def cmd_tags_locate(args: argparse.Namespace) -> int:
    """Resolve each record of a symbol to line:column in its file."""
    from .engine.document import DocumentWrapper
    from .tags import TagError, TagIndex, resolve

    index = TagIndex(args.tags)
    try:
        records = index.require(args.name)
    except TagError as exc:
        err_console.print(f"[red]{escape_markup(str(exc))}[/red]")
        return 1

    found = 0
    for record in records:
        path = Path(record.filename)
        if not path.is_absolute():
            path = index.path.parent / path
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            err_console.print(f"[red]{escape_markup(record.filename)}: {escape_markup(str(exc.strerror or exc))}[/red]")
            continue
        doc = DocumentWrapper.from_text(text, str(path))
        try:
            pos = resolve(record, doc)
        except TagError as exc:
            err_console.print(f"[red]{escape_markup(f'{record.filename}: {exc}')}[/red]")
            continue
        line, col = doc.location_of(pos)
        console.print(f"{record.filename}:{line + 1}:{col + 1}", markup=False)
        found += 1
    return 0 if found else 1


def cmd_keys(args: argparse.Namespace) -> int:
    """Run a key sequence through the dispatcher and describe the result."""
    from .engine import MOTIONS, SELECTION_MOTIONS, DispatchStatus, MotionDescriptor, resolve_keys

    table = SELECTION_MOTIONS if args.selection else MOTIONS
    result = resolve_keys(table, split_keys(args.sequence))
    if result.status in (DispatchStatus.PENDING, DispatchStatus.UNKNOWN):
        err_console.print(f"{result.status.name.lower()}: {result.keys or result.state.keys or args.sequence}", markup=False)
        return 1

    descriptor = result.value
    if result.status == DispatchStatus.DEFERRED:
        pending = result.value
        descriptor = pending.complete(args.arg) if args.arg is not None else pending.descriptor

    out = Table(show_header=False)
    out.add_row("status", result.status.name)
    out.add_row("keys", result.keys)
    if isinstance(descriptor, MotionDescriptor):
        out.add_row("motion", descriptor.name)
        out.add_row("type", descriptor.type.name)
        out.add_row("count", str(descriptor.count))
    console.print(out)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="vicore",
        description="Inspect tags files and vi key sequences",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tags commands
    tags_parser = subparsers.add_parser("tags", help="Query a tags file")
    tags_subparsers = tags_parser.add_subparsers(dest="tags_command", help="Tag commands")

    lookup_parser = tags_subparsers.add_parser("lookup", help="List the definitions of a symbol")
    lookup_parser.add_argument("name", help="Symbol name")

    match_parser = tags_subparsers.add_parser("match", help="List symbols matching a pattern")
    match_parser.add_argument("pattern", help="Pattern (^ $ [...] ? * supported)")

    locate_parser = tags_subparsers.add_parser("locate", help="Resolve a symbol to file:line:column")
    locate_parser.add_argument("name", help="Symbol name")

    for sub in (lookup_parser, match_parser, locate_parser):
        sub.add_argument("--tags", "-t", default=None, help="Tags file (default: from settings)")

    # keys command
    keys_parser = subparsers.add_parser("keys", help="Resolve a key sequence")
    keys_parser.add_argument("sequence", help='Keys, e.g. "3w", "gg", "<ctrl+]>"')
    keys_parser.add_argument(
        "--selection",
        "-s",
        action="store_true",
        help="Resolve against the selection motions (as after an operator)",
    )
    keys_parser.add_argument("--arg", help="Argument for a deferred motion (/ or ?)")

    # edit command
    edit_parser = subparsers.add_parser("edit", help="Open a file in the vi editor")
    edit_parser.add_argument("path", nargs="?", help="File to edit")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "tags":
        if getattr(args, "tags", None) is None:
            args.tags = _default_tags_file()
        if args.tags_command == "lookup":
            return cmd_tags_lookup(args)
        elif args.tags_command == "match":
            return cmd_tags_match(args)
        elif args.tags_command == "locate":
            return cmd_tags_locate(args)
        else:
            tags_parser.print_help()
            return 1

    if args.command == "keys":
        return cmd_keys(args)

    if args.command == "edit":
        from .app import ViEditorApp

        ViEditorApp(args.path).run()
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
