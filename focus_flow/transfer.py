"""
Export and import of Focus Flow data.

JSON exports carry the full history plus enabled extras and the advanced
schedules; CSV exports are one row per completed exercise for spreadsheets.
Imports merge by calendar day and never overwrite what is already here.
"""
from __future__ import annotations

import datetime
import json
import os
from dataclasses import dataclass
from typing import Any, Optional

from .errors import TransferError
from .schedule import (
    NotificationScheduleConfig,
    WorkScheduleConfig,
    validate_notification_schedule,
    validate_work_schedule,
)
from .stats import DailyStats, load_history, parse_history, save_history
from .storage import (
    ADVANCED_SETTINGS_KEY,
    DEFAULT_NOTIFICATION_SCHEDULE,
    DEFAULT_WORK_SCHEDULE,
    Store,
)

EXPORT_VERSION = "1.1.0"
CSV_HEADER = "Fecha,Hora,Ejercicio,Zona,Duración (segundos)"

MSG_IMPORT_OK = "Datos importados correctamente"
MSG_INVALID_FILE = ("Error al leer el archivo. Asegúrate de que sea un archivo "
                    "JSON válido de Focus Flow.")
MSG_READ_ERROR = "Error al leer el archivo"


@dataclass
class ImportResult:
    success: bool
    message: str
    exercises_imported: int = 0
    extra_exercises_imported: int = 0
    settings_imported: bool = False


def export_filename(extension: str, today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return f"focus-flow-data-{today.isoformat()}.{extension}"


# ─── JSON Export ─────────────────────────────────────────────
def build_export(store: Store, now: Optional[datetime.datetime] = None) -> dict[str, Any]:
    now = now or datetime.datetime.now()
    enabled_extra: list[int] = []
    advanced = None
    stored = store.get(ADVANCED_SETTINGS_KEY)
    if isinstance(stored, dict):
        enabled_extra = list(stored.get("enabledExtraExercises") or [])
        advanced = {
            "enabled": stored.get("enabled"),
            "workSchedule": stored.get("workSchedule"),
            "notificationSchedule": stored.get("notificationSchedule"),
        }
    return {
        "version": EXPORT_VERSION,
        "exportedAt": now.isoformat(),
        "exerciseHistory": [d.to_dict() for d in load_history(store)],
        "enabledExtraExercises": enabled_extra,
        "advancedSettings": advanced,
    }


def _write(path: str, text: str) -> str:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except (IOError, OSError) as e:
        raise TransferError(f"Could not write {path}: {e}") from e
    return path


def export_json(store: Store, directory: str = ".",
                now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    data = build_export(store, now)
    path = os.path.join(directory, export_filename("json", now.date()))
    return _write(path, json.dumps(data, indent=2, ensure_ascii=False))


# ─── CSV Export ──────────────────────────────────────────────
def _local_time(completed_at: str) -> str:
    """HH:MM in local time. Naive timestamps are taken as local already.

    Unparseable timestamps give an empty cell.
    """
    try:
        stamp = datetime.datetime.fromisoformat(completed_at.replace("Z", "+00:00"))
    except ValueError:
        return ""
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone()
    return stamp.strftime("%H:%M")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def build_csv(history: list[DailyStats]) -> str:
    rows = [CSV_HEADER]
    for day in history:
        for s in day.sessions:
            rows.append(f"{day.date},{_local_time(s.completed_at)},"
                        f"{_quote(s.name)},{s.zone},{s.duration_seconds}")
    return "\n".join(rows)


def export_csv(store: Store, directory: str = ".",
               now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    path = os.path.join(directory, export_filename("csv", now.date()))
    return _write(path, build_csv(load_history(store)))


# ─── JSON Import ─────────────────────────────────────────────
def _checked_schedules(advanced: dict[str, Any]) -> dict[str, Any]:
    """Swap invalid imported schedules for the defaults."""
    try:
        if validate_work_schedule(WorkScheduleConfig.from_dict(advanced.get("workSchedule"))):
            advanced["workSchedule"] = dict(DEFAULT_WORK_SCHEDULE)
    except (KeyError, TypeError, ValueError):
        advanced["workSchedule"] = dict(DEFAULT_WORK_SCHEDULE)
    try:
        notification = NotificationScheduleConfig.from_dict(advanced.get("notificationSchedule"))
        if validate_notification_schedule(notification):
            advanced["notificationSchedule"] = dict(DEFAULT_NOTIFICATION_SCHEDULE)
    except (KeyError, TypeError, ValueError):
        advanced["notificationSchedule"] = dict(DEFAULT_NOTIFICATION_SCHEDULE)
    return advanced


def import_data(store: Store, data: Any) -> ImportResult:
    """Merge an export dict into the store.

    Existing days are never overwritten, extra ids are unioned, and advanced
    settings are only taken when none exist locally.
    """
    if not isinstance(data, dict):
        return ImportResult(False, MSG_INVALID_FILE)

    history = load_history(store)
    existing_advanced = store.get(ADVANCED_SETTINGS_KEY)
    had_settings = existing_advanced is not None

    # History
    new_days: list[DailyStats] = []
    if isinstance(data.get("exerciseHistory"), list):
        existing_dates = {d.date for d in history}
        new_days = [d for d in parse_history(data["exerciseHistory"])
                    if d.date not in existing_dates]

    # Extra exercises
    advanced = dict(existing_advanced) if isinstance(existing_advanced, dict) else {
        "enabled": False, "enabledExtraExercises": []}
    imported_extra = data.get("enabledExtraExercises")
    new_ids: list[int] = []
    if isinstance(imported_extra, list):
        known = set(advanced.get("enabledExtraExercises") or [])
        for exercise_id in imported_extra:
            if isinstance(exercise_id, int) and exercise_id not in known:
                known.add(exercise_id)
                new_ids.append(exercise_id)

    # Advanced settings (only into an empty install)
    settings_imported = False
    if isinstance(data.get("advancedSettings"), dict) and not had_settings:
        advanced = _checked_schedules(dict(data["advancedSettings"]))
        advanced["enabledExtraExercises"] = []
        settings_imported = True

    if new_days:
        merged = sorted(history + new_days, key=lambda d: d.date)
        save_history(store, merged)
    if new_ids or settings_imported:
        advanced["enabledExtraExercises"] = list(advanced.get("enabledExtraExercises") or []) + new_ids
        store.set(ADVANCED_SETTINGS_KEY, advanced)

    return ImportResult(
        True, MSG_IMPORT_OK,
        exercises_imported=sum(len(d.sessions) for d in new_days),
        extra_exercises_imported=len(new_ids),
        settings_imported=settings_imported,
    )


def import_json(store: Store, path: str) -> ImportResult:
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except (IOError, OSError, UnicodeDecodeError):
        return ImportResult(False, MSG_READ_ERROR)
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return ImportResult(False, MSG_INVALID_FILE)
    return import_data(store, data)
