"""Vim command mode handler.

Handles the tag ex commands: :tag, :pop, :tnext, :tprevious, :tfirst,
:tlast, :tselect and :tags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..tags.navigator import TagNavigator
    from .document import Buffer


class CommandAction(Enum):
    """Actions that can result from command execution."""

    NONE = "none"
    JUMP = "jump"  # The cursor (and possibly the buffer) moved
    LIST = "list"  # ``lines`` holds a listing to show


@dataclass
class CommandResult:
    """Result of executing a command."""

    action: CommandAction = CommandAction.NONE
    message: str = ""
    error: bool = False
    buffer: Buffer | None = None  # Buffer showing the cursor after a jump
    lines: list[str] = field(default_factory=list)


# Full name -> abbreviations accepted for it
TAG_COMMANDS: dict[str, tuple[str, ...]] = {
    "tag": ("ta",),
    "pop": ("po",),
    "tnext": ("tn",),
    "tprevious": ("tp", "tN", "tNext"),
    "tfirst": ("tr", "trewind", "tf"),
    "tlast": ("tl",),
    "tselect": ("ts",),
    "tags": (),
}

_ALIASES = {alias: name for name, aliases in TAG_COMMANDS.items() for alias in (name, *aliases)}


class VimCommandHandler:
    """Handles vim ex-style commands."""

    def __init__(self, navigator: TagNavigator | None = None) -> None:
        self.navigator = navigator
        self._command_buffer: str = ""
        self._on_complete: Callable[[CommandResult], None] | None = None

    @property
    def buffer(self) -> str:
        """Get the current command buffer."""
        return self._command_buffer

    def set_callback(self, callback: Callable[[CommandResult], None]) -> None:
        """Set callback for command completion."""
        self._on_complete = callback

    def start(self) -> None:
        """Start command mode."""
        self._command_buffer = ""

    def add_char(self, char: str) -> None:
        """Add a character to the command buffer."""
        if len(char) == 1:
            self._command_buffer += char

    def backspace(self) -> bool:
        """Remove last character. Returns False if buffer is now empty."""
        if self._command_buffer:
            self._command_buffer = self._command_buffer[:-1]
            return True
        return False

    def cancel(self) -> None:
        """Cancel command mode."""
        self._command_buffer = ""
        if self._on_complete:
            self._on_complete(CommandResult(action=CommandAction.NONE))

    def execute(self, doc: Buffer) -> CommandResult:
        """Execute the current command against ``doc``."""
        cmd = self._command_buffer.strip()
        self._command_buffer = ""

        result = self.run(cmd, doc)

        if self._on_complete:
            self._on_complete(result)

        return result

    def run(self, cmd: str, doc: Buffer) -> CommandResult:
        """Parse and execute a command string."""
        if not cmd:
            return CommandResult()

        parts = cmd.split(None, 1)
        name = _ALIASES.get(parts[0])
        args = parts[1].strip() if len(parts) > 1 else ""

        if name is None:
            return CommandResult(error=True, message=f"Unknown command: {cmd}")

        navigator = self.navigator
        if navigator is None:
            return CommandResult(error=True, message="No tags file")

        if name == "tag":
            if not args:
                return CommandResult(error=True, message="Argument required")
            if args.startswith("/"):
                return self._jumped(navigator.jump_pattern(args[1:], doc))
            return self._jumped(navigator.jump(args, doc))

        if name == "pop":
            return self._jumped(navigator.pop(doc))

        if name == "tnext":
            return self._jumped(navigator.next(doc))

        if name == "tprevious":
            return self._jumped(navigator.prev(doc))

        if name == "tfirst":
            return self._jumped(navigator.first(doc))

        if name == "tlast":
            return self._jumped(navigator.last(doc))

        if name == "tselect":
            if args:
                if not args.isdigit():
                    return CommandResult(error=True, message=f"Invalid argument: {args}")
                return self._jumped(navigator.select(int(args), doc))
            return self._listing(navigator.describe_candidates())

        # tags
        return self._listing(navigator.describe_stack())

    @staticmethod
    def _jumped(buffer: Buffer | None) -> CommandResult:
        # The navigator has already reported the failure through its status sink
        if buffer is None:
            return CommandResult(error=True)
        return CommandResult(action=CommandAction.JUMP, buffer=buffer)

    @staticmethod
    def _listing(lines: list[str]) -> CommandResult:
        if not lines:
            return CommandResult(error=True, message="No tags")
        return CommandResult(action=CommandAction.LIST, message="\n".join(lines), lines=lines)
