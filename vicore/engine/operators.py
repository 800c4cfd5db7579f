"""Vim operators.

Operators act on a range of text (defined by a selection motion or text
object). They're the d in "dw", the c in "ciw", the y in "y$".

The engine does not edit text itself: resolving an operator sequence yields
an ``OperatorRange`` which the host applies to its buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .binder import bind_motions
from .keymap import KeyTable
from .motions import MotionDescriptor
from .state import MotionType

if TYPE_CHECKING:
    from .document import Buffer
    from .state import VimState


@dataclass(frozen=True)
class OperatorRange:
    """The range an operator resolved to.

    ``start``/``end`` are the raw positions returned by the selection motion;
    use ``span`` for the half-open range the operator should affect.
    """

    operator: str
    start: int
    end: int
    type: MotionType = MotionType.EXCLUSIVE

    @property
    def linewise(self) -> bool:
        return self.type == MotionType.LINEWISE

    @property
    def enter_insert(self) -> bool:
        return self.operator == "change"

    def span(self, doc: Buffer) -> tuple[int, int]:
        """Half-open ``(start, end)`` offsets, applying the movement class."""
        start, end = min(self.start, self.end), max(self.start, self.end)
        if self.type == MotionType.LINEWISE:
            first = doc.line_from_position(start)
            last = doc.line_from_position(end)
            start = doc.position_from_line(first)
            end = doc.line_end_position(last)
            if last < doc.line_count - 1:
                end += 1  # Take the newline with the last line
            return start, end
        if self.type == MotionType.INCLUSIVE and end < doc.length:
            end += 1
        return start, end


# ─────────────────────────────────────────────────────────────────
# Current Line (dd, cc, yy)
# ─────────────────────────────────────────────────────────────────


def current_lines(doc: Buffer, state: VimState, count: int) -> tuple[int, int]:
    """The current line and the ``count - 1`` lines below it."""
    line = doc.line_from_position(doc.current_pos)
    last = min(line + max(1, count or 1) - 1, doc.line_count - 1)
    return doc.position_from_line(line), doc.position_from_line(last)


CURRENT_LINE = MotionDescriptor(MotionType.LINEWISE, current_lines, 1, name="line")


# ─────────────────────────────────────────────────────────────────
# Operator Registry
# ─────────────────────────────────────────────────────────────────

OPERATORS: dict[str, str] = {
    "d": "delete",
    "c": "change",
    "y": "yank",
}


def make_operator_handler(
    operator: str, doc: Buffer, state: VimState
) -> Callable[[MotionDescriptor], Callable[[], OperatorRange]]:
    """Handler for ``bind_motions`` which computes an ``OperatorRange``."""

    def handler(descriptor: MotionDescriptor) -> Callable[[], OperatorRange]:
        def run() -> OperatorRange:
            start, end = descriptor.run(doc, state)
            # Operators leave the cursor at the start of the range
            doc.goto_pos(min(start, end))
            return OperatorRange(operator, start, end, descriptor.type)

        return run

    return handler


def build_operator_tables(doc: Buffer, state: VimState) -> dict[str, KeyTable]:
    """One bound key table per operator key, e.g. ``{"d": <table>}``."""
    return {
        key: bind_motions({key: CURRENT_LINE}, make_operator_handler(operator, doc, state), name=key)
        for key, operator in OPERATORS.items()
    }
