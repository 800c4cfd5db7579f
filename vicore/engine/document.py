"""Document wrapper for TextArea.

Provides the buffer operations the motion engine and the tag executor need
(offset-based cursor, line/offset conversion, literal search) on top of
Textual's TextArea widget. Motions and tags never touch the widget directly.
"""

from __future__ import annotations

import bisect
import re
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from textual.widgets import TextArea


# Word characters for vim's definition of a "word"
WORD_CHARS = re.compile(r"[a-zA-Z0-9_]")


def is_word_char(char: str) -> bool:
    return bool(char) and bool(WORD_CHARS.match(char))


def char_class(char: str) -> int:
    """Get character class: 0=whitespace, 1=word, 2=punctuation."""
    if not char or char.isspace():
        return 0
    if is_word_char(char):
        return 1
    return 2


class Buffer(Protocol):
    """What the engine requires from a text buffer."""

    filename: str | None

    @property
    def current_pos(self) -> int: ...

    @property
    def length(self) -> int: ...

    @property
    def line_count(self) -> int: ...

    def char_at(self, pos: int) -> str: ...

    def line_from_position(self, pos: int) -> int: ...

    def position_from_line(self, line: int) -> int: ...

    def line_end_position(self, line: int) -> int: ...

    def column_of(self, pos: int) -> int: ...

    def goto_pos(self, pos: int) -> None: ...

    def goto_line(self, line: int) -> None: ...

    def search_forward(
        self,
        text: str,
        start: int = 0,
        at_line_start: bool = False,
        at_line_end: bool = False,
    ) -> int | None: ...

    def search_backward(self, text: str, start: int) -> int | None: ...

    def word_start_position(self, pos: int) -> int: ...

    def word_end_position(self, pos: int) -> int: ...

    def word_at(self, pos: int) -> str: ...


class PlainTextArea:
    """Headless stand-in for TextArea: just text and a cursor.

    Used where there is no widget, e.g. resolving tags from the command line.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.cursor_location: tuple[int, int] = (0, 0)

    def move_cursor(self, location: tuple[int, int]) -> None:
        self.cursor_location = location


class DocumentWrapper:
    """Wraps a TextArea to provide offset-based buffer operations.

    Positions are character offsets into ``text``; lines are 0-indexed.
    Everything that moves the cursor clamps to the document, so motions can
    overshoot freely.
    """

    def __init__(self, text_area: TextArea | PlainTextArea, filename: str | None = None) -> None:
        self._ta = text_area
        self.filename = filename

    @classmethod
    def from_text(cls, text: str, filename: str | None = None) -> DocumentWrapper:
        """Wrap a string in a headless buffer."""
        return cls(PlainTextArea(text), filename)

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def text_area(self) -> TextArea | PlainTextArea:
        return self._ta

    @property
    def text(self) -> str:
        """Full document text."""
        return self._ta.text

    @property
    def lines(self) -> list[str]:
        """Document as list of lines."""
        return self.text.split("\n")

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def current_pos(self) -> int:
        """Cursor as an offset into the text."""
        row, col = self._ta.cursor_location
        return self.position_of(row, col)

    @property
    def current_line(self) -> int:
        return self._ta.cursor_location[0]

    # ─────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────

    def _line_starts(self) -> list[int]:
        starts = [0]
        for line in self.lines[:-1]:
            starts.append(starts[-1] + len(line) + 1)
        return starts

    def clamp(self, pos: int) -> int:
        return max(0, min(pos, self.length))

    def location_of(self, pos: int) -> tuple[int, int]:
        """Convert an offset to a (row, col) location."""
        pos = self.clamp(pos)
        starts = self._line_starts()
        row = bisect.bisect_right(starts, pos) - 1
        return (row, pos - starts[row])

    def position_of(self, row: int, col: int) -> int:
        """Convert a (row, col) location to an offset, clamped to the line."""
        lines = self.lines
        row = max(0, min(row, len(lines) - 1))
        col = max(0, min(col, len(lines[row])))
        return self._line_starts()[row] + col

    def line_from_position(self, pos: int) -> int:
        return self.location_of(pos)[0]

    def column_of(self, pos: int) -> int:
        return self.location_of(pos)[1]

    def position_from_line(self, line: int) -> int:
        """Offset of the first character of ``line`` (clamped)."""
        return self.position_of(line, 0)

    def line_end_position(self, line: int) -> int:
        """Offset just past the last character of ``line`` (before the newline)."""
        lines = self.lines
        line = max(0, min(line, len(lines) - 1))
        return self.position_of(line, len(lines[line]))

    def char_at(self, pos: int) -> str:
        """Character at ``pos``, or "" outside the document."""
        text = self.text
        if 0 <= pos < len(text):
            return text[pos]
        return ""

    # ─────────────────────────────────────────────────────────────────
    # Cursor movement
    # ─────────────────────────────────────────────────────────────────

    def goto_pos(self, pos: int) -> None:
        """Move the cursor to an offset."""
        self._ta.move_cursor(self.location_of(pos))

    def goto_line(self, line: int) -> None:
        """Move the cursor to the start of a 0-indexed line."""
        self.goto_pos(self.position_from_line(line))

    # ─────────────────────────────────────────────────────────────────
    # Search
    # ─────────────────────────────────────────────────────────────────

    def search_forward(
        self,
        text: str,
        start: int = 0,
        at_line_start: bool = False,
        at_line_end: bool = False,
    ) -> int | None:
        """Find ``text`` literally at or after ``start``.

        Args:
            text: Literal string to find
            start: Offset to start searching from
            at_line_start: Match must begin at the start of a line
            at_line_end: Match must end at the end of a line

        Returns:
            Offset of the match or None if not found
        """
        haystack = self.text
        idx = haystack.find(text, max(0, start))
        while idx != -1:
            end = idx + len(text)
            starts_ok = not at_line_start or idx == 0 or haystack[idx - 1] == "\n"
            ends_ok = not at_line_end or end == len(haystack) or haystack[end] == "\n"
            if starts_ok and ends_ok:
                return idx
            idx = haystack.find(text, idx + 1)
        return None

    def search_backward(self, text: str, start: int) -> int | None:
        """Find the last literal occurrence of ``text`` starting before ``start``."""
        if start <= 0:
            return None
        idx = self.text.rfind(text, 0, start - 1 + len(text))
        return idx if idx != -1 else None

    # ─────────────────────────────────────────────────────────────────
    # Words
    # ─────────────────────────────────────────────────────────────────

    def word_start_position(self, pos: int) -> int:
        """Start of the run of same-class characters containing ``pos``."""
        cls = char_class(self.char_at(pos))
        while pos > 0 and self.char_at(pos - 1) != "\n" and char_class(self.char_at(pos - 1)) == cls:
            pos -= 1
        return pos

    def word_end_position(self, pos: int) -> int:
        """Offset just past the run of same-class characters containing ``pos``."""
        cls = char_class(self.char_at(pos))
        length = self.length
        while pos < length and self.char_at(pos) != "\n" and char_class(self.char_at(pos)) == cls:
            pos += 1
        return pos

    def word_at(self, pos: int) -> str:
        """The keyword under ``pos``, or the next one on the same line."""
        line_end = self.line_end_position(self.line_from_position(pos))
        while pos < line_end and not is_word_char(self.char_at(pos)):
            pos += 1
        if pos >= line_end:
            return ""
        return self.text[self.word_start_position(pos):self.word_end_position(pos)]
