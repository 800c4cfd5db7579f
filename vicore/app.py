"""Minimal Textual editor hosting the vi mode plugin."""

from __future__ import annotations

from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.widgets import Footer, TextArea

from .config import SettingsStore
from .plugin import ViModePlugin


class ViTextArea(TextArea):
    """TextArea that offers every key to the vi plugin first."""

    plugin: ViModePlugin | None = None

    async def _on_key(self, event: Key) -> None:
        if self.plugin is not None and self.plugin.on_key(self.app, event):
            event.prevent_default()
            event.stop()
            return

        # For all other keys, use default TextArea behavior
        await super()._on_key(event)


class ViEditorApp(App):
    """Single-file editor with vi keys and tag navigation."""

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+s", "save", "Save"),
        Binding("ctrl+g", "toggle_vi", "Toggle Vi"),
    ]

    def __init__(self, path: str | None = None, store: SettingsStore | None = None) -> None:
        super().__init__()
        self.path = path
        store = store or SettingsStore()
        settings = store.load()
        # The editor exists to host vi mode; start with it on
        settings.vim_enabled = True
        self.plugin = ViModePlugin(settings, store)

    def compose(self) -> ComposeResult:
        text = ""
        if self.path and Path(self.path).exists():
            text = Path(self.path).read_text(encoding="utf-8")
        editor = ViTextArea(text, id="editor")
        editor.plugin = self.plugin
        yield editor
        yield Footer()

    def on_mount(self) -> None:
        editor = self.query_one("#editor", ViTextArea)
        self.plugin.register(self, editor, self.path)
        editor.focus()

    def action_save(self) -> None:
        """Write the buffer currently shown back to its file."""
        engine = self.plugin.engine
        path = engine.doc.filename if engine is not None else self.path
        if not path:
            self.notify("No file name", severity="error")
            return
        editor = self.query_one("#editor", ViTextArea)
        try:
            Path(path).write_text(editor.text, encoding="utf-8")
        except OSError as exc:
            self.notify(f"Cannot write {path}: {exc.strerror or exc}", severity="error")
            return
        self.notify(f"Wrote {path}")

    def action_toggle_vi(self) -> None:
        self.plugin.toggle(self)
