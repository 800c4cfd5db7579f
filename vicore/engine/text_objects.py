"""Selection motions and text objects.

Selection motions are what an operator consumes: the ``w`` in ``dw``, the
``iw`` in ``diw``. Each is a ``MotionDescriptor`` whose action returns a
``(start, end)`` offset pair with ``start <= end``.

Every plain motion gets a selection variant through ``simple_to_range``;
``aw`` and ``iw`` are defined directly.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from .keymap import KeyTable
from .motions import MOTIONS, MotionDescriptor
from .state import MotionType

if TYPE_CHECKING:
    from .document import Buffer
    from .state import VimState


def simple_to_range(descriptor: MotionDescriptor) -> MotionDescriptor:
    """Convert a cursor motion into one which returns the range it covered.

    The returned action records the cursor, runs the motion, records the
    cursor again and returns both positions in ascending order. Deferred
    motions cannot be converted until their argument is known, so the
    conversion is queued on ``wrappers`` instead.
    """
    if descriptor.deferred:
        return replace(descriptor, wrappers=descriptor.wrappers + (simple_to_range,))

    move = descriptor.action

    def select(doc: Buffer, state: VimState, count: int, *args) -> tuple[int, int]:
        start = doc.current_pos
        move(doc, state, count, *args)
        end = doc.current_pos
        if start > end:
            start, end = end, start
        return start, end

    return replace(descriptor, action=select)


# ─────────────────────────────────────────────────────────────────
# Word Objects (iw, aw)
# ─────────────────────────────────────────────────────────────────


def textobj_inner_word(doc: Buffer, state: VimState, count: int) -> tuple[int, int]:
    """The word under the cursor (iw)."""
    pos = doc.current_pos
    return doc.word_start_position(pos), doc.word_end_position(pos)


def textobj_outer_word(doc: Buffer, state: VimState, count: int) -> tuple[int, int]:
    """The word under the cursor plus trailing whitespace (aw)."""
    pos = doc.current_pos
    start = doc.word_start_position(pos)
    end = doc.word_end_position(pos)
    length = doc.length
    while end < length and doc.char_at(end) in " \t":
        end += 1
    return start, end


# ─────────────────────────────────────────────────────────────────
# Selection Registry
# ─────────────────────────────────────────────────────────────────

TEXT_OBJECTS = {
    "a": KeyTable(
        {"w": MotionDescriptor(MotionType.EXCLUSIVE, textobj_outer_word, 1, name="aw")},
        name="a",
    ),
    "i": KeyTable(
        {"w": MotionDescriptor(MotionType.EXCLUSIVE, textobj_inner_word, 1, name="iw")},
        name="i",
    ),
}

SELECTION_MOTIONS = KeyTable(
    TEXT_OBJECTS,
    fallback=MOTIONS.derive(simple_to_range, name="selection-base"),
    counted=True,
    name="selection",
)
