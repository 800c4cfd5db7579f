"""Vim motion table.

Motions move the buffer cursor without modifying text. Each key maps to a
``MotionDescriptor`` (movement class, action, default repeat count); the
dispatcher substitutes the typed count per invocation and never touches the
templates registered here.

Actions take ``(doc, state, count)``. Deferred actions (``/`` and ``?``)
additionally take the search string the user types afterwards.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable

from .document import char_class
from .keymap import KeyTable
from .state import MotionType

if TYPE_CHECKING:
    from .document import Buffer
    from .state import VimState


MotionFunc = Callable[..., Any]
StepFunc = Callable[["Buffer", "VimState"], None]
DescriptorWrapper = Callable[["MotionDescriptor"], "MotionDescriptor"]

BRACKET_PAIRS = {
    "(": ")",
    ")": "(",
    "[": "]",
    "]": "[",
    "{": "}",
    "}": "{",
}


@dataclass(frozen=True)
class MotionDescriptor:
    """A motion template: movement class, action and default count.

    ``wrappers`` is only used by deferred motions: derivations (such as the
    range-producing variant) that must be applied once the deferred argument
    is known.
    """

    type: MotionType
    action: MotionFunc
    count: int = 1
    name: str = ""
    wrappers: tuple[DescriptorWrapper, ...] = ()

    @property
    def deferred(self) -> bool:
        return self.type == MotionType.DEFERRED

    def with_count(self, count: int) -> MotionDescriptor:
        """Copy of this descriptor with a different repeat count."""
        return replace(self, count=count)

    def run(self, doc: Buffer, state: VimState, *args: Any) -> Any:
        """Invoke the action with this descriptor's count."""
        return self.action(doc, state, self.count, *args)


def repeat(step: StepFunc) -> MotionFunc:
    """Wrap a single-step movement into one which takes a repeat count."""

    def motion(doc: Buffer, state: VimState, count: int) -> None:
        if count is None or count < 1:
            count = 1
        for _ in range(count):
            step(doc, state)

    motion.__name__ = step.__name__
    return motion


def _line_bounds(doc: Buffer, pos: int) -> tuple[int, int]:
    line = doc.line_from_position(pos)
    return doc.position_from_line(line), doc.line_end_position(line)


def _first_non_blank(doc: Buffer, line: int) -> int:
    pos = doc.position_from_line(line)
    end = doc.line_end_position(line)
    while pos < end and doc.char_at(pos).isspace():
        pos += 1
    return pos


# ─────────────────────────────────────────────────────────────────
# Basic Cursor Motions (h, j, k, l)
# ─────────────────────────────────────────────────────────────────


def char_left(doc: Buffer, state: VimState) -> None:
    """Move one character left, stopping at the start of the line."""
    pos = doc.current_pos
    start, _end = _line_bounds(doc, pos)
    if pos > start:
        doc.goto_pos(pos - 1)


def char_right(doc: Buffer, state: VimState) -> None:
    """Move one character right, stopping on the last character of the line."""
    pos = doc.current_pos
    _start, end = _line_bounds(doc, pos)
    if pos + 1 < end:
        doc.goto_pos(pos + 1)


def _move_vertical(doc: Buffer, delta: int) -> None:
    pos = doc.current_pos
    line = doc.line_from_position(pos)
    target = line + delta
    if target < 0 or target >= doc.line_count:
        return
    col = doc.column_of(pos)
    start = doc.position_from_line(target)
    end = doc.line_end_position(target)
    doc.goto_pos(min(start + col, max(start, end - 1)))


def line_down(doc: Buffer, state: VimState) -> None:
    _move_vertical(doc, 1)


def line_up(doc: Buffer, state: VimState) -> None:
    _move_vertical(doc, -1)


# ─────────────────────────────────────────────────────────────────
# Word Motions (w, b, e, ge)
# ─────────────────────────────────────────────────────────────────


def word_right(doc: Buffer, state: VimState) -> None:
    """Move to the start of the next word (w)."""
    pos = doc.current_pos
    length = doc.length
    cls = char_class(doc.char_at(pos))
    if cls:
        while pos < length and char_class(doc.char_at(pos)) == cls:
            pos += 1
    while pos < length and doc.char_at(pos).isspace():
        pos += 1
    doc.goto_pos(pos)


def word_left(doc: Buffer, state: VimState) -> None:
    """Move to the start of the previous word (b)."""
    pos = doc.current_pos
    if pos == 0:
        return
    pos -= 1
    while pos > 0 and doc.char_at(pos).isspace():
        pos -= 1
    cls = char_class(doc.char_at(pos))
    while pos > 0 and char_class(doc.char_at(pos - 1)) == cls:
        pos -= 1
    doc.goto_pos(pos)


def word_end(doc: Buffer, state: VimState) -> None:
    """Move to the end of the current or next word (e)."""
    pos = doc.current_pos
    length = doc.length
    if pos + 1 >= length:
        return
    pos += 1
    while pos < length and doc.char_at(pos).isspace():
        pos += 1
    if pos >= length:
        return
    cls = char_class(doc.char_at(pos))
    while pos + 1 < length and char_class(doc.char_at(pos + 1)) == cls:
        pos += 1
    doc.goto_pos(pos)


def word_end_back(doc: Buffer, state: VimState) -> None:
    """Move to the end of the previous word (ge)."""
    pos = doc.current_pos
    cls = char_class(doc.char_at(pos))
    if cls:
        while pos > 0 and char_class(doc.char_at(pos)) == cls:
            pos -= 1
    while pos > 0 and doc.char_at(pos).isspace():
        pos -= 1
    doc.goto_pos(pos)


# ─────────────────────────────────────────────────────────────────
# Line Position Motions (0, ^, $)
# ─────────────────────────────────────────────────────────────────


def line_start(doc: Buffer, state: VimState, count: int) -> None:
    """Move to column 0 (0)."""
    doc.goto_pos(doc.position_from_line(doc.line_from_position(doc.current_pos)))


def line_beg(doc: Buffer, state: VimState, count: int) -> None:
    """Move to the first non-blank character (^)."""
    doc.goto_pos(_first_non_blank(doc, doc.line_from_position(doc.current_pos)))


def line_end(doc: Buffer, state: VimState, count: int) -> None:
    """Move to the last character of the line ($)."""
    start, end = _line_bounds(doc, doc.current_pos)
    doc.goto_pos(max(start, end - 1))


# ─────────────────────────────────────────────────────────────────
# Document Position Motions (gg, G)
# ─────────────────────────────────────────────────────────────────


def goto_line(doc: Buffer, state: VimState, count: int) -> None:
    """Go to line ``count`` (1-based), or the last line when count < 1 (G)."""
    if count is None or count < 1:
        line = doc.line_count - 1
    else:
        line = min(count, doc.line_count) - 1
    doc.goto_pos(_first_non_blank(doc, line))


def goto_first_line(doc: Buffer, state: VimState, count: int) -> None:
    """Go to line ``count`` (1-based), default the first line (gg)."""
    goto_line(doc, state, max(1, count or 1))


# ─────────────────────────────────────────────────────────────────
# Bracket Matching (%)
# ─────────────────────────────────────────────────────────────────


def match_brace(doc: Buffer, state: VimState, count: int) -> None:
    """Jump to the bracket matching the one under or after the cursor (%)."""
    pos = doc.current_pos
    _start, end = _line_bounds(doc, pos)
    while pos < end and doc.char_at(pos) not in BRACKET_PAIRS:
        pos += 1
    if pos >= end:
        return

    ch = doc.char_at(pos)
    target = BRACKET_PAIRS[ch]
    step = 1 if ch in "([{" else -1
    depth = 0
    length = doc.length
    while 0 <= pos < length:
        c = doc.char_at(pos)
        if c == ch:
            depth += 1
        elif c == target:
            depth -= 1
            if depth == 0:
                doc.goto_pos(pos)
                return
        pos += step


# ─────────────────────────────────────────────────────────────────
# Search Motions (n, N, *, #, /, ?)
# ─────────────────────────────────────────────────────────────────


def _search(doc: Buffer, pattern: str, direction: int) -> bool:
    """Search literally, wrapping around the document. Returns True on a hit."""
    if not pattern:
        return False
    pos = doc.current_pos
    if direction >= 0:
        found = doc.search_forward(pattern, pos + 1)
        if found is None:
            found = doc.search_forward(pattern, 0)
    else:
        found = doc.search_backward(pattern, pos)
        if found is None:
            found = doc.search_backward(pattern, doc.length + 1)
    if found is None:
        return False
    doc.goto_pos(found)
    return True


def search_next(doc: Buffer, state: VimState) -> None:
    _search(doc, state.last_search, state.last_search_direction)


def search_prev(doc: Buffer, state: VimState) -> None:
    _search(doc, state.last_search, -state.last_search_direction)


def search_word_next(doc: Buffer, state: VimState) -> None:
    word = doc.word_at(doc.current_pos)
    if word:
        state.remember_search(word, 1)
        _search(doc, word, 1)


def search_word_prev(doc: Buffer, state: VimState) -> None:
    word = doc.word_at(doc.current_pos)
    if word:
        state.remember_search(word, -1)
        _search(doc, word, -1)


def search_fwd(doc: Buffer, state: VimState, count: int, pattern: str) -> None:
    """Search forward for a typed string (/), ``count`` times."""
    state.remember_search(pattern, 1)
    for _ in range(max(1, count or 1)):
        if not _search(doc, pattern, 1):
            break


def search_back(doc: Buffer, state: VimState, count: int, pattern: str) -> None:
    """Search backward for a typed string (?), ``count`` times."""
    state.remember_search(pattern, -1)
    for _ in range(max(1, count or 1)):
        if not _search(doc, pattern, -1):
            break


# ─────────────────────────────────────────────────────────────────
# Marks (')
# ─────────────────────────────────────────────────────────────────


def restore_mark(name: str) -> MotionDescriptor:
    """Linewise motion to the line holding mark ``name``."""

    def goto_mark(doc: Buffer, state: VimState, count: int) -> None:
        pos = state.get_mark(name)
        if pos is None:
            return
        doc.goto_pos(doc.position_from_line(doc.line_from_position(pos)))

    return MotionDescriptor(MotionType.LINEWISE, goto_mark, 1, name=f"'{name}")


# ─────────────────────────────────────────────────────────────────
# Motion Registry
# ─────────────────────────────────────────────────────────────────

REGISTERS = KeyTable(
    {letter: restore_mark(letter) for letter in string.ascii_letters},
    name="marks",
)

MOTION_ZERO = MotionDescriptor(MotionType.EXCLUSIVE, line_start, 1, name="0")

MOTIONS = KeyTable(
    {
        "h": MotionDescriptor(MotionType.EXCLUSIVE, repeat(char_left), 1, name="h"),
        "l": MotionDescriptor(MotionType.EXCLUSIVE, repeat(char_right), 1, name="l"),
        "j": MotionDescriptor(MotionType.LINEWISE, repeat(line_down), 1, name="j"),
        "k": MotionDescriptor(MotionType.LINEWISE, repeat(line_up), 1, name="k"),
        "w": MotionDescriptor(MotionType.EXCLUSIVE, repeat(word_right), 1, name="w"),
        "b": MotionDescriptor(MotionType.EXCLUSIVE, repeat(word_left), 1, name="b"),
        "e": MotionDescriptor(MotionType.INCLUSIVE, repeat(word_end), 1, name="e"),
        "$": MotionDescriptor(MotionType.INCLUSIVE, line_end, 1, name="$"),
        "^": MotionDescriptor(MotionType.EXCLUSIVE, line_beg, 1, name="^"),
        "0": MOTION_ZERO,
        "G": MotionDescriptor(MotionType.LINEWISE, goto_line, -1, name="G"),
        "g": KeyTable(
            {
                "g": MotionDescriptor(MotionType.LINEWISE, goto_first_line, 1, name="gg"),
                "e": MotionDescriptor(MotionType.INCLUSIVE, repeat(word_end_back), 1, name="ge"),
            },
            name="g",
        ),
        "'": REGISTERS,
        "%": MotionDescriptor(MotionType.INCLUSIVE, match_brace, 1, name="%"),
        # Search motions
        "n": MotionDescriptor(MotionType.EXCLUSIVE, repeat(search_next), 1, name="n"),
        "N": MotionDescriptor(MotionType.EXCLUSIVE, repeat(search_prev), 1, name="N"),
        "*": MotionDescriptor(MotionType.EXCLUSIVE, repeat(search_word_next), 1, name="*"),
        "#": MotionDescriptor(MotionType.EXCLUSIVE, repeat(search_word_prev), 1, name="#"),
        "/": MotionDescriptor(MotionType.DEFERRED, search_fwd, 1, name="/"),
        "?": MotionDescriptor(MotionType.DEFERRED, search_back, 1, name="?"),
    },
    counted=True,
    name="motions",
)
