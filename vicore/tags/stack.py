"""Tag navigation stack.

Each successful jump pushes a frame holding the candidate records for the
symbol, which candidate is current and where the jump came from. ``pop``
returns to that origin. Jumping from a popped-back position discards the
frames above it, like a browser history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import EmptyStackError

if TYPE_CHECKING:
    from .index import TagIndex, TagRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 20


@dataclass
class NavigationFrame:
    """One level of the tag stack."""

    candidates: tuple[TagRecord, ...]
    return_file: str | None
    return_pos: int
    cursor: int = 1  # 1-based index into candidates

    @property
    def current(self) -> TagRecord:
        return self.candidates[self.cursor - 1]

    @property
    def symbol(self) -> str:
        return self.candidates[0].symbol


class NavigationStack:
    """Stack of navigation frames over a ``TagIndex``.

    ``depth`` frames are reachable; frames above it were popped and are
    discarded by the next jump. At most ``max_depth`` frames are kept, the
    oldest being dropped first.
    """

    def __init__(self, index: TagIndex, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.index = index
        self.max_depth = max_depth
        self._frames: list[NavigationFrame] = []
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def frames(self) -> list[NavigationFrame]:
        """Reachable frames, oldest first."""
        return self._frames[: self._depth]

    def current_frame(self) -> NavigationFrame | None:
        if self._depth == 0:
            return None
        return self._frames[self._depth - 1]

    # ─────────────────────────────────────────────────────────────────
    # Push / pop
    # ─────────────────────────────────────────────────────────────────

    def jump_to_symbol(
        self, name: str, current_file: str | None, current_pos: int
    ) -> TagRecord | None:
        """Push a frame for ``name`` and return its first record.

        Returns None, leaving the stack untouched, if ``name`` has no tags.
        """
        records = self.index.lookup_exact(name)
        if not records:
            return None

        del self._frames[self._depth:]
        if len(self._frames) >= self.max_depth:
            self._frames.pop(0)
        self._frames.append(
            NavigationFrame(candidates=records, return_file=current_file, return_pos=current_pos)
        )
        self._depth = len(self._frames)
        logger.debug("Tag jump to %s (%d candidates), depth %d", name, len(records), self._depth)
        return records[0]

    def pop(self) -> tuple[str | None, int]:
        """Leave the current frame and return ``(return_file, return_pos)``.

        Raises:
            EmptyStackError: If there is no frame to pop.
        """
        frame = self.current_frame()
        if frame is None:
            raise EmptyStackError()
        self._depth -= 1
        logger.debug("Tag pop from %s, depth %d", frame.symbol, self._depth)
        return frame.return_file, frame.return_pos

    # ─────────────────────────────────────────────────────────────────
    # Candidates
    # ─────────────────────────────────────────────────────────────────

    def current_candidates(self) -> tuple[TagRecord, ...] | None:
        frame = self.current_frame()
        return frame.candidates if frame is not None else None

    def next_candidate(self) -> TagRecord | None:
        """Advance to the next candidate, or return None at the last one."""
        frame = self.current_frame()
        if frame is None or frame.cursor >= len(frame.candidates):
            return None
        frame.cursor += 1
        return frame.current

    def prev_candidate(self) -> TagRecord | None:
        """Go back to the previous candidate, or return None at the first one."""
        frame = self.current_frame()
        if frame is None or frame.cursor <= 1:
            return None
        frame.cursor -= 1
        return frame.current

    def select_candidate(self, number: int) -> TagRecord | None:
        """Make candidate ``number`` (1-based) current; None if out of range."""
        frame = self.current_frame()
        if frame is None or not 1 <= number <= len(frame.candidates):
            return None
        frame.cursor = number
        return frame.current
