"""Configuration management for vicore.

Settings live in a JSON file under ``~/.vicore`` (override the directory
with ``VICORE_CONFIG_DIR``).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Shared config directory - can be overridden via environment variable for testing
CONFIG_DIR = Path(os.environ.get("VICORE_CONFIG_DIR", Path.home() / ".vicore"))
SETTINGS_PATH = CONFIG_DIR / "settings.json"


class JSONFileStore:
    """Base class for JSON file-backed stores."""

    def __init__(self, file_path: Path):
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        """Get the store's file path."""
        return self._file_path

    def _read_json(self) -> Any:
        """Read and parse JSON from file.

        Returns:
            Parsed JSON data, or None if file doesn't exist or is invalid.
        """
        if not self._file_path.exists():
            return None
        try:
            with open(self._file_path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._file_path, exc)
            return None

    def _write_json(self, data: Any) -> None:
        """Write data as JSON to file atomically (temp file + rename)."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=".tmp_",
            suffix=".json",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self._file_path)
        except Exception:
            # Clean up temp file on failure
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


@dataclass
class ViSettings:
    """User settings for the vi layer."""

    tags_file: str = "tags"
    tag_stack_depth: int = 20
    vim_enabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ViSettings:
        """Build settings from stored JSON, keeping defaults for bad values."""
        settings = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            default = getattr(settings, f.name)
            if not _valid(value, default):
                logger.warning("Invalid setting %s=%r, using %r", f.name, value, default)
                continue
            setattr(settings, f.name, value)
        return settings

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _valid(value: Any, default: Any) -> bool:
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool) and value >= 1
    return isinstance(value, type(default)) and bool(value)


class SettingsStore(JSONFileStore):
    """Store for ``ViSettings``, kept as a JSON object in settings.json.

    Keys it doesn't know about are preserved on save.
    """

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or SETTINGS_PATH)

    def load_all(self) -> dict[str, Any]:
        data = self._read_json()
        return data if isinstance(data, dict) else {}

    def load(self) -> ViSettings:
        return ViSettings.from_dict(self.load_all())

    def save(self, settings: ViSettings) -> None:
        data = self.load_all()
        data.update(settings.to_dict())
        self._write_json(data)

    def set(self, key: str, value: Any) -> None:
        data = self.load_all()
        data[key] = value
        self._write_json(data)


def load_settings() -> ViSettings:
    """Load settings from the default settings file."""
    return SettingsStore().load()


def save_settings(settings: ViSettings) -> None:
    """Save settings to the default settings file."""
    SettingsStore().save(settings)
