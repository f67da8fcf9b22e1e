"""
Tests for core.settings.
"""
import json

import pytest

from core.settings import DEFAULT_SETTINGS, Settings


class TestSettings:

    def test_missing_file_created_with_defaults(self, tmp_path):
        path = tmp_path / "config" / "settings.json"
        settings = Settings.load(path)
        assert path.exists()
        assert settings.values == DEFAULT_SETTINGS
        assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_SETTINGS

    def test_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"general": {"prefer_flats": True}, "unknown": {"x": 1}}), encoding="utf-8")
        settings = Settings.load(path)
        assert settings.get("general", "prefer_flats") is True
        assert settings.get("general", "undo_limit") == 100
        assert settings.get("fretboard", "fret_count") == 24

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        settings = Settings.load(path)
        assert settings.values == DEFAULT_SETTINGS
        # Left untouched for the user to fix
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_non_mapping_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert Settings.load(path).values == DEFAULT_SETTINGS

    def test_set_and_save(self, tmp_path):
        path = tmp_path / "settings.json"
        settings = Settings.load(path)
        settings.set("audio", "volume_db", -6.0)
        settings.save()
        assert Settings.load(path).get("audio", "volume_db") == -6.0

    def test_unknown_keys(self, tmp_path):
        settings = Settings.load(tmp_path / "settings.json")
        with pytest.raises(KeyError):
            settings.get("general", "nope")
        with pytest.raises(KeyError):
            settings.set("nope", "x", 1)

    def test_save_without_path(self):
        with pytest.raises(IOError):
            Settings({}).save()
