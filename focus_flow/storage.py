"""
Key/value persistence for Focus Flow.

Every entity lives under a fixed key. ``JsonFileStore`` keeps one JSON file
per key inside the data directory; ``MemoryStore`` keeps everything in a dict
and is what the tests use. Loaders shallow-merge stored dicts over defaults so
new settings appear automatically in old files.
"""
from __future__ import annotations

import json
import os
from typing import Any, Optional

# ─── Keys ─────────────────────────────────────────────────────
PREFERENCES_KEY = "focus-flow-preferences"
ADVANCED_SETTINGS_KEY = "focus-flow-advanced-settings"
COMPLETED_SESSIONS_KEY = "focus-flow-completed-sessions"
STATS_KEY = "focus-flow-stats"

DATA_DIR_ENV = "FOCUS_FLOW_HOME"
DEFAULT_DATA_DIR = os.path.join(os.path.expanduser("~"), ".focus_flow")

# ─── Defaults ─────────────────────────────────────────────────
DEFAULT_PREFERENCES = {
    "postures": {
        "sitting": True,
        "standing": True,
    },
    "notifications": False,
    "sound": True,
}

DEFAULT_WORK_SCHEDULE = {
    "startHour": 10,
    "startMinute": 0,
    "endHour": 17,
    "endMinute": 0,
    "sessionCount": 6,
}

DEFAULT_NOTIFICATION_SCHEDULE = {
    "enabled": False,
    "startHour": 8,
    "startMinute": 0,
    "endHour": 22,
    "endMinute": 0,
    "maxSessions": 12,
}

DEFAULT_ADVANCED_SETTINGS = {
    "enabled": False,                 # Master toggle for the custom schedules
    "workSchedule": DEFAULT_WORK_SCHEDULE,
    "notificationSchedule": DEFAULT_NOTIFICATION_SCHEDULE,
    "enabledExtraExercises": [],
    "customExercises": [],
}


def _copy(value: Any) -> Any:
    return json.loads(json.dumps(value))


# ─── Stores ───────────────────────────────────────────────────
class Store:
    """Minimal key/value interface. Values are JSON-compatible."""

    def get(self, key: str) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(Store):
    """In-memory store. Values round-trip through JSON like the file store."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def set_raw(self, key: str, raw: str) -> None:
        """Store a raw string as-is (used to simulate corrupted data)."""
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(Store):
    """One ``<key>.json`` file per key in ``directory``."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or default_data_dir()

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Any:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, IOError, OSError) as e:
            print(f"  [!] {key} load error: {e}. Using defaults.")
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(self.path_for(key), "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
        except (IOError, OSError) as e:
            print(f"  [!] {key} save error: {e}")

    def delete(self, key: str) -> None:
        try:
            os.remove(self.path_for(key))
        except FileNotFoundError:
            pass


def default_data_dir() -> str:
    return os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIR


# ─── Entity helpers ───────────────────────────────────────────
def load_preferences(store: Store) -> dict[str, Any]:
    """Load preferences, falling back to defaults for missing/invalid values."""
    prefs = _copy(DEFAULT_PREFERENCES)
    saved = store.get(PREFERENCES_KEY)
    if isinstance(saved, dict):
        prefs.update(saved)
    postures = prefs.get("postures")
    if not isinstance(postures, dict):
        prefs["postures"] = _copy(DEFAULT_PREFERENCES["postures"])
    return prefs


def save_preferences(store: Store, prefs: dict[str, Any]) -> None:
    store.set(PREFERENCES_KEY, prefs)


def set_posture(store: Store, posture: str, enabled: bool) -> dict[str, Any]:
    """Toggle a posture. Refuses to turn off the last enabled posture."""
    prefs = load_preferences(store)
    postures = dict(prefs["postures"], **{posture: bool(enabled)})
    if not postures.get("sitting") and not postures.get("standing"):
        return prefs
    prefs["postures"] = postures
    save_preferences(store, prefs)
    return prefs


def has_advanced_settings(store: Store) -> bool:
    return store.get(ADVANCED_SETTINGS_KEY) is not None


def load_advanced_settings(store: Store) -> dict[str, Any]:
    settings = _copy(DEFAULT_ADVANCED_SETTINGS)
    saved = store.get(ADVANCED_SETTINGS_KEY)
    if isinstance(saved, dict):
        settings.update(saved)
    for key in ("workSchedule", "notificationSchedule"):
        if not isinstance(settings.get(key), dict):
            settings[key] = _copy(DEFAULT_ADVANCED_SETTINGS[key])
    for key in ("enabledExtraExercises", "customExercises"):
        if not isinstance(settings.get(key), list):
            settings[key] = []
    return settings


def save_advanced_settings(store: Store, settings: dict[str, Any]) -> None:
    store.set(ADVANCED_SETTINGS_KEY, settings)


def update_advanced_settings(store: Store, **changes: Any) -> dict[str, Any]:
    settings = load_advanced_settings(store)
    settings.update(changes)
    save_advanced_settings(store, settings)
    return settings
