"""Tests for settings persistence."""

from __future__ import annotations

import json

import pytest

from vicore.config import SettingsStore, ViSettings


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


class TestViSettings:
    """Tests for ViSettings.from_dict."""

    def test_defaults(self):
        settings = ViSettings()
        assert settings.tags_file == "tags"
        assert settings.tag_stack_depth == 20
        assert settings.vim_enabled is False

    def test_from_dict(self):
        settings = ViSettings.from_dict({"tags_file": "TAGS", "tag_stack_depth": 5, "vim_enabled": True})
        assert settings == ViSettings("TAGS", 5, True)

    @pytest.mark.parametrize(
        "data",
        [
            {"tag_stack_depth": 0},
            {"tag_stack_depth": True},
            {"tag_stack_depth": "10"},
            {"vim_enabled": "yes"},
            {"tags_file": ""},
            {"tags_file": 3},
        ],
    )
    def test_invalid_values_keep_defaults(self, data, caplog):
        with caplog.at_level("WARNING", logger="vicore.config"):
            assert ViSettings.from_dict(data) == ViSettings()
        assert "Invalid setting" in caplog.text

    def test_unknown_keys_ignored(self):
        assert ViSettings.from_dict({"theme": "dark"}) == ViSettings()


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_missing_file_gives_defaults(self, store):
        assert store.load() == ViSettings()
        assert store.load_all() == {}

    def test_round_trip(self, store):
        store.save(ViSettings(tags_file="TAGS", tag_stack_depth=3, vim_enabled=True))
        assert store.load() == ViSettings("TAGS", 3, True)

    def test_save_preserves_unknown_keys(self, store):
        store.file_path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
        store.save(ViSettings(tags_file="TAGS"))
        data = json.loads(store.file_path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert data["tags_file"] == "TAGS"

    def test_set(self, store):
        store.set("vim_enabled", True)
        assert store.load().vim_enabled is True

    def test_corrupt_file(self, store, caplog):
        store.file_path.write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING", logger="vicore.config"):
            assert store.load() == ViSettings()
        assert "Ignoring unreadable settings file" in caplog.text

    def test_non_object_json(self, store):
        store.file_path.write_text("[1, 2]", encoding="utf-8")
        assert store.load_all() == {}

    def test_creates_parent_directory(self, tmp_path):
        store = SettingsStore(tmp_path / "nested" / "dir" / "settings.json")
        store.save(ViSettings())
        assert store.file_path.exists()

    def test_no_temp_files_left(self, store):
        store.save(ViSettings())
        store.set("vim_enabled", True)
        assert [p.name for p in store.file_path.parent.iterdir()] == ["settings.json"]
