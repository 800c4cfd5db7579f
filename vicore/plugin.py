"""Vi mode plugin for Textual.

Routes key events from a TextArea through the VimEngine, applies the ranges
operators resolve to, and wires tag navigation to the same TextArea.
Toggle with ``toggle()``; disabled by default.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from textual.events import Key

from .config import SettingsStore, ViSettings
from .engine import DocumentWrapper, VimEngine, VimMode
from .engine.command import CommandAction
from .engine.state import Register
from .tags import TagIndex, TagNavigator

if TYPE_CHECKING:
    from textual.app import App
    from textual.widgets import TextArea

    from .engine.operators import OperatorRange

logger = logging.getLogger(__name__)


class ViModePlugin:
    """Plugin providing vi mode for one TextArea.

    Features:
    - Normal/Insert/Command modes
    - Vi motions (h/j/k/l, w/b/e, gg/G, marks, /, ?, n/N, *, #, %)
    - Operators (d, c, y) with counts and text objects (iw, aw)
    - Tag jumps: ctrl+], ctrl+t and :tag, :pop, :tnext, :tprevious, ...
    """

    name = "vi_mode"

    def __init__(self, settings: ViSettings | None = None, store: SettingsStore | None = None) -> None:
        self._store = store
        self.settings = settings or (store.load() if store is not None else ViSettings())
        self.enabled: bool = self.settings.vim_enabled
        self.engine: VimEngine | None = None
        self.register_content = Register()
        self._app: App | None = None
        self._text_area: TextArea | None = None
        # Buffers swapped out by tag jumps: resolved path -> (text, cursor)
        self._buffers: dict[Path, tuple[str, tuple[int, int]]] = {}

    def register(self, app: App, text_area: TextArea, filename: str | None = None) -> None:
        """Initialize the vi engine for ``text_area``."""
        self._app = app
        self._text_area = text_area
        self._buffers.clear()

        index = TagIndex(self.settings.tags_file)
        navigator = TagNavigator(
            index,
            self.open_file,
            status=self._notify_error,
            max_depth=self.settings.tag_stack_depth,
        )
        self.engine = VimEngine(DocumentWrapper(text_area, filename), navigator)
        self.engine.set_mode_callback(self._on_mode_change)

        if self.enabled:
            text_area.read_only = True

    def on_key(self, app: App, event: Any) -> bool:
        """Handle key events when vi mode is enabled.

        Returns True if the key was consumed.
        """
        if not self.enabled or self.engine is None or self._text_area is None:
            return False

        if not isinstance(event, Key):
            return False

        # Only handle keys when the editor has focus
        if not self._text_area.has_focus:
            return False

        result = self.engine.handle_key(self._convert_key(event))

        if not result.consumed:
            return False

        if result.operation is not None:
            self._apply_operation(result.operation)

        if result.command_action == CommandAction.LIST:
            app.notify(result.message, timeout=10)
        elif result.message:
            app.notify(result.message, severity="error" if result.error else "information")

        return True

    def _convert_key(self, event: Key) -> str:
        """Convert a Textual Key event to vi key format."""
        key = event.key

        # Handle special keys
        if key == "ctrl+left_square_bracket":
            return "ctrl+["
        if key == "ctrl+right_square_bracket":
            return "ctrl+]"
        if key == "escape":
            return "escape"
        if key in ("enter", "return"):
            return "enter"
        if key in ("backspace", "ctrl+h"):
            return "backspace"

        # Handle character keys
        if event.character and len(event.character) == 1 and not key.startswith("ctrl+"):
            return event.character

        return key

    # ─────────────────────────────────────────────────────────────────
    # Editing
    # ─────────────────────────────────────────────────────────────────

    def _apply_operation(self, operation: OperatorRange) -> None:
        """Delete, change or yank the range an operator resolved to."""
        if self.engine is None or self._text_area is None:
            return
        doc = self.engine.doc
        start, end = operation.span(doc)
        text = self._text_area.text[start:end]
        self.register_content = Register(text, operation.linewise)
        self.engine.state.register = self.register_content

        if operation.operator in ("delete", "change"):
            was_read_only = self._text_area.read_only
            self._text_area.read_only = False
            self._text_area.delete(doc.location_of(start), doc.location_of(end))
            self._text_area.read_only = was_read_only
            doc.goto_pos(start)

    def open_file(self, path: str) -> DocumentWrapper:
        """Load ``path`` into the TextArea; used for tag jumps to other files.

        The buffer being replaced is kept in memory, so jumping back to it
        restores unsaved edits instead of re-reading the file.
        """
        if self._text_area is None:
            raise RuntimeError("ViModePlugin is not registered")

        key = Path(path).resolve()
        cached = self._buffers.get(key)
        if cached is None:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
            cursor = (0, 0)
        else:
            text, cursor = cached

        current = self.engine.doc.filename if self.engine is not None else None
        if current is not None:
            self._buffers[Path(current).resolve()] = (
                self._text_area.text,
                self._text_area.cursor_location,
            )
        self._buffers.pop(key, None)

        self._text_area.load_text(text)
        self._text_area.move_cursor(cursor)
        logger.debug("Opened %s%s", path, " (cached)" if cached is not None else "")
        return DocumentWrapper(self._text_area, path)

    # ─────────────────────────────────────────────────────────────────
    # Hooks
    # ─────────────────────────────────────────────────────────────────

    def _notify_error(self, message: str) -> None:
        if self._app is not None:
            self._app.notify(message, severity="warning")

    def _on_mode_change(self, mode: VimMode) -> None:
        """Only insert mode lets the TextArea edit text."""
        if self.enabled and self._text_area is not None:
            self._text_area.read_only = mode != VimMode.INSERT

    def toggle(self, app: App) -> None:
        """Toggle vi mode on/off and persist the setting."""
        self.enabled = not self.enabled
        self.settings.vim_enabled = self.enabled

        store = self._store or SettingsStore()
        store.set("vim_enabled", self.enabled)

        if self.engine is not None:
            self.engine.reset()
        if self._text_area is not None:
            self._text_area.read_only = self.enabled
        app.notify("Editor: Vi" if self.enabled else "Editor: Default")
