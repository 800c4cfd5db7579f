"""Tag navigation for an editing session.

Ties the tag index, the navigation stack and the locate executor to the
host: ``open_file`` opens a path and returns its buffer, and ``status``
receives user-facing messages ("Tag not found: foo", "Top of stack").
Failures are reported there rather than raised.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .exceptions import EmptyStackError, TagError
from .index import TagIndex
from .locate import resolve
from .stack import DEFAULT_MAX_DEPTH, NavigationStack

if TYPE_CHECKING:
    from ..engine.document import Buffer
    from .index import TagRecord

logger = logging.getLogger(__name__)

OpenFile = Callable[[str], "Buffer"]
StatusSink = Callable[[str], None]


def _log_status(message: str) -> None:
    logger.info(message)


def _same_file(a: str, b: str | None) -> bool:
    if b is None:
        return False
    return a == b or Path(a).resolve() == Path(b).resolve()


class TagNavigator:
    """Jump to tags and back within one session."""

    def __init__(
        self,
        index: TagIndex,
        open_file: OpenFile,
        status: StatusSink | None = None,
        stack: NavigationStack | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.index = index
        self.stack = stack if stack is not None else NavigationStack(index, max_depth)
        self._open_file = open_file
        self._status = status or _log_status

    def set_status_callback(self, status: StatusSink) -> None:
        self._status = status

    # ─────────────────────────────────────────────────────────────────
    # Jumping
    # ─────────────────────────────────────────────────────────────────

    def jump(self, name: str, doc: Buffer) -> Buffer | None:
        """Jump to the first definition of ``name``.

        Returns the buffer now showing the definition, or None if the
        symbol has no tags.
        """
        record = self.stack.jump_to_symbol(name, doc.filename, doc.current_pos)
        if record is None:
            self._status(f"Tag not found: {name}")
            return None
        return self.goto(record, doc)

    def jump_pattern(self, pattern: str, doc: Buffer) -> Buffer | None:
        """Jump to the first symbol whose name matches ``pattern``."""
        names = self.index.lookup_pattern(pattern)
        if not names:
            self._status(f"Tag not found: {pattern}")
            return None
        return self.jump(names[0], doc)

    def jump_to_word(self, doc: Buffer) -> Buffer | None:
        """Jump to the tag for the keyword under the cursor."""
        word = doc.word_at(doc.current_pos)
        if not word:
            self._status("No identifier under cursor")
            return None
        return self.jump(word, doc)

    def pop(self, doc: Buffer) -> Buffer | None:
        """Return to where the current tag was jumped from."""
        try:
            filename, pos = self.stack.pop()
        except EmptyStackError as exc:
            self._status(str(exc))
            return None
        if filename is None and doc.filename is not None:
            # The unnamed origin buffer was replaced by the jump
            self._status("Cannot return to unnamed buffer")
            return None
        target = self._buffer_for(filename, doc)
        if target is not None:
            target.goto_pos(pos)
        return target

    def goto(self, record: TagRecord, doc: Buffer) -> Buffer | None:
        """Open ``record``'s file and move to the definition.

        Returns None if the file cannot be opened. A locate failure is only
        reported; the file stays open with the cursor unmoved.
        """
        target = self._buffer_for(self.resolve_filename(record), doc)
        if target is None:
            return None
        try:
            resolve(record, target)
        except TagError as exc:
            self._status(str(exc))
        return target

    def resolve_filename(self, record: TagRecord) -> str:
        """Tag file names are relative to the directory holding the tags file."""
        path = Path(record.filename)
        if path.is_absolute():
            return str(path)
        return str(self.index.path.parent / path)

    def _buffer_for(self, filename: str | None, doc: Buffer) -> Buffer | None:
        if filename is None or _same_file(filename, doc.filename):
            return doc
        try:
            return self._open_file(filename)
        except (OSError, ValueError) as exc:
            # UnicodeDecodeError is a ValueError and has no strerror
            reason = getattr(exc, "strerror", None) or exc
            self._status(f"Cannot open {filename}: {reason}")
            return None

    # ─────────────────────────────────────────────────────────────────
    # Candidates
    # ─────────────────────────────────────────────────────────────────

    def next(self, doc: Buffer) -> Buffer | None:
        return self._move_to(self.stack.next_candidate(), doc)

    def prev(self, doc: Buffer) -> Buffer | None:
        return self._move_to(self.stack.prev_candidate(), doc)

    def first(self, doc: Buffer) -> Buffer | None:
        return self.select(1, doc)

    def last(self, doc: Buffer) -> Buffer | None:
        candidates = self.stack.current_candidates()
        return self.select(len(candidates) if candidates else 1, doc)

    def select(self, number: int, doc: Buffer) -> Buffer | None:
        return self._move_to(self.stack.select_candidate(number), doc)

    def _move_to(self, record: TagRecord | None, doc: Buffer) -> Buffer | None:
        if record is None:
            self._status("No tags" if self.stack.depth == 0 else "No more tags")
            return None
        return self.goto(record, doc)

    # ─────────────────────────────────────────────────────────────────
    # Listings
    # ─────────────────────────────────────────────────────────────────

    def describe_candidates(self) -> list[str]:
        """One line per candidate of the current frame; ``>`` marks the current one."""
        frame = self.stack.current_frame()
        if frame is None:
            return []
        lines = []
        for number, record in enumerate(frame.candidates, start=1):
            marker = ">" if number == frame.cursor else " "
            lines.append(f"{marker}{number:3} {record.symbol}  {record.filename}  {record.locate_expr}")
        return lines

    def describe_stack(self) -> list[str]:
        """One line per reachable frame, oldest first."""
        lines = []
        for number, frame in enumerate(self.stack.frames(), start=1):
            origin = frame.return_file or "[No Name]"
            lines.append(
                f"{number:3} {frame.cursor:2} {frame.symbol}  from {origin}:{frame.return_pos}"
            )
        return lines
