"""Vim state management.

Tracks the current mode, marks, last search and the command line that the
engine accumulates between keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class VimMode(Enum):
    """Vim editing modes handled by the engine."""

    NORMAL = "NORMAL"
    INSERT = "INSERT"
    COMMAND = "COMMAND"
    SEARCH = "SEARCH"  # Waiting for the argument of a deferred motion


class MotionType(Enum):
    """Movement classes.

    The class decides how a motion's end position combines with an
    operator; the dispatcher only carries it along.
    """

    LINEWISE = auto()   # Operates on whole lines
    INCLUSIVE = auto()  # Range includes the final character
    EXCLUSIVE = auto()  # Range excludes the final character
    DEFERRED = auto()   # Needs more input (search string) before it can run


@dataclass
class Register:
    """A register holding yanked/deleted text."""

    content: str = ""
    linewise: bool = False


@dataclass
class VimState:
    """Per-session editing state.

    One instance per editing session; nothing here is shared between
    sessions, so two engines never see each other's marks or searches.
    """

    mode: VimMode = VimMode.NORMAL

    # Marks set with m{letter}, stored as buffer offsets
    marks: dict[str, int] = field(default_factory=dict)

    # Last search
    last_search: str = ""
    last_search_direction: int = 1  # 1 = forward, -1 = backward

    # Text typed after ':' or after a deferred motion key
    input_buffer: str = ""

    # Unnamed register, filled by the host when it applies a yank or delete
    register: Register = field(default_factory=Register)

    def enter_mode(self, mode: VimMode) -> None:
        """Transition to a new mode, clearing any half-typed input."""
        self.mode = mode
        self.input_buffer = ""

    def set_mark(self, name: str, pos: int) -> None:
        self.marks[name] = pos

    def get_mark(self, name: str) -> int | None:
        return self.marks.get(name)

    def remember_search(self, pattern: str, direction: int) -> None:
        """Store the pattern used by n/N."""
        self.last_search = pattern
        self.last_search_direction = 1 if direction >= 0 else -1
