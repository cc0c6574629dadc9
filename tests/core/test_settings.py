"""Tests for the persistent settings store."""

import json

from sideloader.core.settings import SettingsStore, default_settings


class TestSettingsStore:
    def test_defaults_without_file(self, tmp_path):
        store = SettingsStore(str(tmp_path / "settings.json"))
        assert store.auto_reinstall is False
        assert store.no_device_mode is False
        assert store.adb_path == ""
        assert set(store.as_dict()) == set(default_settings())

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        store = SettingsStore(str(path))
        store.auto_reinstall = True
        store.set("adb_path", "/opt/adb")
        assert store.save() is True

        reloaded = SettingsStore(str(path))
        assert reloaded.auto_reinstall is True
        assert reloaded.get("adb_path") == "/opt/adb"

    def test_unknown_keys_survive(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"window_geometry": "800x600"}), encoding="utf-8")

        store = SettingsStore(str(path))
        store.save()

        assert json.loads(path.read_text(encoding="utf-8"))["window_geometry"] == "800x600"

    def test_corrupt_file_keeps_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        store = SettingsStore(str(path))

        assert store.auto_reinstall is False
        assert "Failed to load settings" in caplog.text

    def test_non_dict_file_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert SettingsStore(str(path)).as_dict() == default_settings()

    def test_get_default(self, tmp_path):
        store = SettingsStore(str(tmp_path / "settings.json"))
        assert store.get("missing", 42) == 42

    def test_save_failure_reported(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        store = SettingsStore(str(blocker / "settings.json"))
        assert store.save() is False
