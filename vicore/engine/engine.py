"""Vim emulation engine.

The VimEngine is the main controller that:
- Handles key tokens from the host
- Feeds them through the count-prefix dispatcher
- Runs motions, and turns operator sequences into ranges for the host
- Collects the argument of deferred motions (/ and ?) and the : command line
- Jumps to tags and back through a TagNavigator
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from .command import CommandAction, VimCommandHandler
from .dispatch import DispatchState, DispatchStatus, PendingMotion, feed
from .keymap import KeyTable
from .motions import MOTIONS, MotionDescriptor
from .operators import OperatorRange, build_operator_tables
from .state import VimMode, VimState

if TYPE_CHECKING:
    from ..tags.navigator import TagNavigator
    from .document import Buffer

logger = logging.getLogger(__name__)

ESCAPE_KEYS = ("escape", "ctrl+[", "ctrl+c")


@dataclass
class KeyResult:
    """Result of processing a key event."""

    consumed: bool = True           # Was the key handled?
    enter_insert: bool = False      # Should we enter insert mode?
    operation: OperatorRange | None = None  # Range for the host to delete/change/yank
    command_action: CommandAction | None = None  # Action from command mode
    message: str = ""               # Message to display to user
    error: bool = False
    buffer_changed: bool = False    # A tag command switched to another buffer


@dataclass(frozen=True)
class NormalCommand:
    """A normal-mode key that isn't a motion or operator (i, a, m{x}, ...)."""

    func: Callable[[int | None], KeyResult]
    name: str = ""


class VimEngine:
    """Main vim emulation controller.

    This class sits between key events and the buffer. It moves the cursor
    itself but never edits text: operators come back as ``KeyResult.operation``.
    """

    def __init__(
        self,
        doc: Buffer,
        navigator: TagNavigator | None = None,
        state: VimState | None = None,
    ) -> None:
        self._state = state if state is not None else VimState()
        self._navigator = navigator
        self._command_handler = VimCommandHandler(navigator)
        self._pending: PendingMotion | None = None

        # Callbacks for mode changes and command line updates
        self._on_mode_change: Callable[[VimMode], None] | None = None
        self._on_command_update: Callable[[str], None] | None = None

        self._set_doc(doc)

    @property
    def mode(self) -> VimMode:
        """Current vim mode."""
        return self._state.mode

    @property
    def state(self) -> VimState:
        """Current vim state."""
        return self._state

    @property
    def doc(self) -> Buffer:
        """The buffer keys currently act on."""
        return self._doc

    @property
    def navigator(self) -> TagNavigator | None:
        return self._navigator

    @property
    def normal_table(self) -> KeyTable:
        return self._normal_table

    @property
    def pending_keys(self) -> str:
        """Keys typed so far in an unfinished normal-mode sequence."""
        return self._dispatch.keys

    @property
    def command_text(self) -> str:
        """Command line contents including the prompt character."""
        if self._state.mode == VimMode.COMMAND:
            return ":" + self._command_handler.buffer
        if self._state.mode == VimMode.SEARCH and self._pending is not None:
            prompt = "?" if self._pending.direction < 0 else "/"
            return prompt + self._state.input_buffer
        return ""

    def set_mode_callback(self, callback: Callable[[VimMode], None]) -> None:
        """Set callback for mode changes."""
        self._on_mode_change = callback

    def set_command_update_callback(self, callback: Callable[[str], None]) -> None:
        """Set callback for command line updates."""
        self._on_command_update = callback

    def _notify_mode_change(self) -> None:
        if self._on_mode_change:
            self._on_mode_change(self._state.mode)

    def _notify_command_update(self) -> None:
        if self._on_command_update:
            self._on_command_update(self.command_text)

    def _set_mode(self, mode: VimMode) -> None:
        self._state.enter_mode(mode)
        self._notify_mode_change()

    def _set_doc(self, doc: Buffer) -> None:
        """Switch buffers; operator tables are bound to the buffer."""
        self._doc = doc
        self._normal_table = self._build_normal_table()
        self._dispatch = DispatchState.initial(self._normal_table)

    def _build_normal_table(self) -> KeyTable:
        entries: dict[str, Any] = dict(build_operator_tables(self._doc, self._state))
        entries["m"] = KeyTable(
            {
                letter: NormalCommand(lambda count, letter=letter: self._set_mark(letter), f"m{letter}")
                for letter in string.ascii_letters
            },
            name="m",
        )
        entries["i"] = NormalCommand(lambda count: self._insert(append=False), "i")
        entries["a"] = NormalCommand(lambda count: self._insert(append=True), "a")
        entries[":"] = NormalCommand(lambda count: self.enter_command_mode(), ":")
        entries["ctrl+]"] = NormalCommand(lambda count: self._tag_jump(), "ctrl+]")
        entries["ctrl+t"] = NormalCommand(lambda count: self._tag_pop(), "ctrl+t")
        return MOTIONS.layered(entries, counted=True, name="normal")

    # ─────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────

    def handle_key(self, key: str) -> KeyResult:
        """Process a key event.

        Args:
            key: The key that was pressed (e.g., "j", "d", "escape", "ctrl+]")

        Returns:
            KeyResult indicating how the key was handled
        """
        mode = self._state.mode

        if mode == VimMode.INSERT:
            return self._handle_insert_mode(key)
        elif mode == VimMode.NORMAL:
            return self._handle_normal_mode(key)
        elif mode == VimMode.SEARCH:
            return self._handle_search_input(key)
        elif mode == VimMode.COMMAND:
            return self._handle_command_mode(key)

        return KeyResult(consumed=False)

    def feed_keys(self, keys: list[str] | str) -> list[KeyResult]:
        """Handle several keys in order; a string is split into characters."""
        return [self.handle_key(key) for key in keys]

    def enter_insert_mode(self) -> None:
        """Enter insert mode."""
        self._set_mode(VimMode.INSERT)

    def exit_insert_mode(self) -> None:
        """Exit insert mode, return to normal mode."""
        self._set_mode(VimMode.NORMAL)

    def reset(self) -> None:
        """Drop any half-typed sequence, search or command line."""
        self._dispatch = self._dispatch.reset()
        self._pending = None
        self._command_handler.start()
        self._set_mode(VimMode.NORMAL)

    # ─────────────────────────────────────────────────────────────────
    # Insert Mode
    # ─────────────────────────────────────────────────────────────────

    def _handle_insert_mode(self, key: str) -> KeyResult:
        """Handle keys in insert mode."""
        if key in ESCAPE_KEYS:
            self.exit_insert_mode()
            return KeyResult(consumed=True)

        # Let the host handle all other keys in insert mode
        return KeyResult(consumed=False)

    # ─────────────────────────────────────────────────────────────────
    # Normal Mode
    # ─────────────────────────────────────────────────────────────────

    def _handle_normal_mode(self, key: str) -> KeyResult:
        """Handle keys in normal mode."""
        if key in ESCAPE_KEYS:
            self._dispatch = self._dispatch.reset()
            return KeyResult(consumed=True)

        result = feed(self._dispatch, key)
        self._dispatch = result.state

        if result.status == DispatchStatus.PENDING:
            return KeyResult(consumed=True)

        if result.status == DispatchStatus.UNKNOWN:
            # A lone unbound key is left to the host
            return KeyResult(consumed=len(result.keys) > len(key))

        if result.status == DispatchStatus.DEFERRED:
            self._pending = result.value
            self._set_mode(VimMode.SEARCH)
            self._notify_command_update()
            return KeyResult(consumed=True)

        return self._execute(result.value, result.count)

    def _execute(self, value: Any, count: int | None) -> KeyResult:
        """Run whatever a key sequence resolved to."""
        if isinstance(value, MotionDescriptor):
            value.run(self._doc, self._state)
            return KeyResult(consumed=True)

        if isinstance(value, NormalCommand):
            return value.func(count)

        if callable(value):
            # Bound operator: computes the range, leaves the editing to the host
            operation = value()
            if operation.enter_insert:
                self._set_mode(VimMode.INSERT)
            return KeyResult(consumed=True, operation=operation, enter_insert=operation.enter_insert)

        logger.debug("Ignoring unsupported key table entry %r", value)
        return KeyResult(consumed=True)

    def _set_mark(self, name: str) -> KeyResult:
        self._state.set_mark(name, self._doc.current_pos)
        return KeyResult(consumed=True)

    def _insert(self, append: bool) -> KeyResult:
        if append:
            pos = self._doc.current_pos
            line_end = self._doc.line_end_position(self._doc.line_from_position(pos))
            self._doc.goto_pos(min(pos + 1, line_end))
        self.enter_insert_mode()
        return KeyResult(consumed=True, enter_insert=True)

    # ─────────────────────────────────────────────────────────────────
    # Deferred Motions (/ and ?)
    # ─────────────────────────────────────────────────────────────────

    def _handle_search_input(self, key: str) -> KeyResult:
        """Collect the argument of a deferred motion."""
        if key in ESCAPE_KEYS:
            self._pending = None
            self._set_mode(VimMode.NORMAL)
            return KeyResult(consumed=True)

        if key == "enter":
            pending = self._pending
            argument = self._state.input_buffer or self._state.last_search
            self._pending = None
            self._set_mode(VimMode.NORMAL)
            if pending is None or not argument:
                return KeyResult(consumed=True)
            return self._execute(pending.complete(argument), None)

        if key == "backspace":
            if not self._state.input_buffer:
                self._pending = None
                self._set_mode(VimMode.NORMAL)
            else:
                self._state.input_buffer = self._state.input_buffer[:-1]
                self._notify_command_update()
            return KeyResult(consumed=True)

        if len(key) == 1:
            self._state.input_buffer += key
            self._notify_command_update()

        return KeyResult(consumed=True)

    # ─────────────────────────────────────────────────────────────────
    # Tags
    # ─────────────────────────────────────────────────────────────────

    def _switch_to(self, buffer: Buffer | None) -> KeyResult:
        if buffer is None:
            return KeyResult(consumed=True, error=True)
        changed = buffer is not self._doc
        if changed:
            self._set_doc(buffer)
        return KeyResult(consumed=True, buffer_changed=changed)

    def _tag_jump(self) -> KeyResult:
        if self._navigator is None:
            return KeyResult(consumed=True, error=True, message="No tags file")
        return self._switch_to(self._navigator.jump_to_word(self._doc))

    def _tag_pop(self) -> KeyResult:
        if self._navigator is None:
            return KeyResult(consumed=True, error=True, message="No tags file")
        return self._switch_to(self._navigator.pop(self._doc))

    # ─────────────────────────────────────────────────────────────────
    # Command Mode
    # ─────────────────────────────────────────────────────────────────

    def enter_command_mode(self) -> KeyResult:
        """Enter command mode."""
        self._command_handler.start()
        self._set_mode(VimMode.COMMAND)
        self._notify_command_update()
        return KeyResult(consumed=True)

    def _handle_command_mode(self, key: str) -> KeyResult:
        """Handle keys in command mode."""
        # Escape cancels command mode
        if key in ESCAPE_KEYS:
            self._command_handler.cancel()
            self._set_mode(VimMode.NORMAL)
            return KeyResult(consumed=True)

        # Enter executes the command
        if key == "enter":
            result = self._command_handler.execute(self._doc)
            self._set_mode(VimMode.NORMAL)
            key_result = self._switch_to(result.buffer) if result.buffer is not None else KeyResult()
            key_result.command_action = result.action
            key_result.message = result.message
            key_result.error = result.error
            return key_result

        # Backspace
        if key == "backspace":
            if not self._command_handler.backspace():
                # Buffer is empty, exit command mode
                self._set_mode(VimMode.NORMAL)
            else:
                self._notify_command_update()
            return KeyResult(consumed=True)

        # Regular character input
        if len(key) == 1:
            self._command_handler.add_char(key)
            self._notify_command_update()

        return KeyResult(consumed=True)
