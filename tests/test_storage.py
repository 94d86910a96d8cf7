"""Tests for the key/value stores and the settings loaders."""

import json
import os

from focus_flow.storage import (
    ADVANCED_SETTINGS_KEY,
    DATA_DIR_ENV,
    PREFERENCES_KEY,
    JsonFileStore,
    MemoryStore,
    default_data_dir,
    has_advanced_settings,
    load_advanced_settings,
    load_preferences,
    set_posture,
    update_advanced_settings,
)


def test_memory_store_round_trips_json():
    store = MemoryStore({"a": {"x": [1, 2]}})
    assert store.get("a") == {"x": [1, 2]}
    value = store.get("a")
    value["x"].append(3)
    assert store.get("a") == {"x": [1, 2]}
    assert store.has("a")
    store.delete("a")
    assert not store.has("a")


def test_file_store_writes_one_file_per_key(tmp_path):
    store = JsonFileStore(str(tmp_path / "data"))
    store.set("focus-flow-stats", [{"date": "2024-01-01", "sessions": []}])
    path = tmp_path / "data" / "focus-flow-stats.json"
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))[0]["date"] == "2024-01-01"
    assert store.get("focus-flow-stats") == [{"date": "2024-01-01", "sessions": []}]
    store.delete("focus-flow-stats")
    store.delete("focus-flow-stats")
    assert store.get("focus-flow-stats") is None


def test_file_store_corrupt_file_reads_as_absent(tmp_path, capsys):
    store = JsonFileStore(str(tmp_path))
    (tmp_path / f"{PREFERENCES_KEY}.json").write_text("{broken", encoding="utf-8")
    assert store.get(PREFERENCES_KEY) is None
    assert "load error" in capsys.readouterr().out
    assert load_preferences(store)["sound"] is True


def test_default_data_dir_env(monkeypatch, tmp_path):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    assert default_data_dir() == str(tmp_path)
    monkeypatch.delenv(DATA_DIR_ENV)
    assert default_data_dir().endswith(".focus_flow")


def test_preferences_merge_over_defaults(store):
    store.set(PREFERENCES_KEY, {"notifications": True, "postures": "bad"})
    prefs = load_preferences(store)
    assert prefs["notifications"] is True
    assert prefs["sound"] is True
    assert prefs["postures"] == {"sitting": True, "standing": True}


def test_set_posture_keeps_one_enabled(store):
    assert set_posture(store, "standing", False)["postures"] == {"sitting": True, "standing": False}
    prefs = set_posture(store, "sitting", False)
    assert prefs["postures"]["sitting"] is True
    assert load_preferences(store)["postures"]["sitting"] is True


def test_advanced_settings_defaults_and_repair(store):
    assert not has_advanced_settings(store)
    settings = load_advanced_settings(store)
    assert settings["enabled"] is False
    assert settings["workSchedule"]["sessionCount"] == 6

    store.set(ADVANCED_SETTINGS_KEY, {"enabled": True, "workSchedule": None,
                                      "enabledExtraExercises": "101"})
    settings = load_advanced_settings(store)
    assert settings["enabled"] is True
    assert settings["workSchedule"]["startHour"] == 10
    assert settings["enabledExtraExercises"] == []
    assert settings["customExercises"] == []


def test_update_advanced_settings_does_not_touch_defaults(store):
    update_advanced_settings(store, enabled=True)
    assert has_advanced_settings(store)
    load_advanced_settings(store)["workSchedule"]["startHour"] = 3
    assert load_advanced_settings(MemoryStore())["workSchedule"]["startHour"] == 10


def test_file_store_undecodable_file_reads_as_absent(tmp_path, capsys):
    store = JsonFileStore(str(tmp_path))
    (tmp_path / f"{PREFERENCES_KEY}.json").write_bytes(b'{"sound": "\xff\xfe"}')
    assert store.get(PREFERENCES_KEY) is None
    assert "load error" in capsys.readouterr().out
    assert load_preferences(store) == load_preferences(MemoryStore())
