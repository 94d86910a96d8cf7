"""
Session scheduling.

Turns a work window into evenly spaced session slots and answers the
questions the reminder loop asks every minute: what is the next session, is
it session time now, how long until the next one, and are reminders allowed
at this hour.
"""
from __future__ import annotations

import datetime
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .errors import ScheduleError
from .storage import (
    DEFAULT_NOTIFICATION_SCHEDULE,
    DEFAULT_WORK_SCHEDULE,
    Store,
    load_advanced_settings,
    update_advanced_settings,
)

# ─── Named Constants ─────────────────────────────────────────
SESSION_TOLERANCE_MINUTES = 5      # "Is it time to remind?" window
CURRENT_SESSION_TOLERANCE = 30     # Window for attaching a completion to a session
MIN_WORK_SPAN_MINUTES = 4 * 60
SESSION_COUNTS = (6, 8, 12)
MAX_SESSION_OPTIONS = (6, 8, 12, 16, 20, 24)
MINUTES_PER_DAY = 24 * 60


def _js_round(x: float) -> int:
    """Round half up, like the slot arithmetic has always done."""
    return int(math.floor(x + 0.5))


def _minutes(hour: int, minute: int) -> int:
    return hour * 60 + minute


# ─── Models ──────────────────────────────────────────────────
@dataclass(frozen=True)
class WorkScheduleConfig:
    start_hour: int = 10
    start_minute: int = 0
    end_hour: int = 17
    end_minute: int = 0
    session_count: int = 6

    @property
    def start_minutes(self) -> int:
        return _minutes(self.start_hour, self.start_minute)

    @property
    def end_minutes(self) -> int:
        return _minutes(self.end_hour, self.end_minute)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "WorkScheduleConfig":
        merged = dict(DEFAULT_WORK_SCHEDULE, **(d or {}))
        return cls(int(merged["startHour"]), int(merged["startMinute"]),
                   int(merged["endHour"]), int(merged["endMinute"]),
                   int(merged["sessionCount"]))

    def to_dict(self) -> dict[str, int]:
        return {
            "startHour": self.start_hour,
            "startMinute": self.start_minute,
            "endHour": self.end_hour,
            "endMinute": self.end_minute,
            "sessionCount": self.session_count,
        }


@dataclass(frozen=True)
class NotificationScheduleConfig:
    enabled: bool = False
    start_hour: int = 8
    start_minute: int = 0
    end_hour: int = 22
    end_minute: int = 0
    max_sessions: int = 12

    @property
    def start_minutes(self) -> int:
        return _minutes(self.start_hour, self.start_minute)

    @property
    def end_minutes(self) -> int:
        return _minutes(self.end_hour, self.end_minute)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "NotificationScheduleConfig":
        merged = dict(DEFAULT_NOTIFICATION_SCHEDULE, **(d or {}))
        return cls(bool(merged["enabled"]),
                   int(merged["startHour"]), int(merged["startMinute"]),
                   int(merged["endHour"]), int(merged["endMinute"]),
                   int(merged["maxSessions"]))

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "startHour": self.start_hour,
            "startMinute": self.start_minute,
            "endHour": self.end_hour,
            "endMinute": self.end_minute,
            "maxSessions": self.max_sessions,
        }


@dataclass(frozen=True)
class Session:
    id: int
    hour: int
    minute: int
    label: str

    @property
    def minutes(self) -> int:
        return _minutes(self.hour, self.minute)


# ─── Schedule Generator ──────────────────────────────────────
def generate_sessions(config: WorkScheduleConfig) -> list[Session]:
    """Evenly spaced slots from start to end, both inclusive."""
    count = config.session_count
    if count <= 0:
        return []
    start = config.start_minutes
    total = config.end_minutes - start
    # N sessions -> N-1 intervals
    interval = total / (count - 1) if count > 1 else 0.0

    sessions = []
    for i in range(count):
        slot = start + _js_round(interval * i)
        hour, minute = divmod(slot, 60)
        sessions.append(Session(id=i + 1, hour=hour, minute=minute,
                                label=f"{hour:02d}:{minute:02d}"))
    return sessions


DEFAULT_SESSIONS = generate_sessions(WorkScheduleConfig())


def active_work_schedule(advanced: dict[str, Any]) -> WorkScheduleConfig:
    """The custom schedule when advanced settings are on, else the default."""
    if advanced.get("enabled") and isinstance(advanced.get("workSchedule"), dict):
        try:
            return WorkScheduleConfig.from_dict(advanced["workSchedule"])
        except (KeyError, TypeError, ValueError):
            pass
    return WorkScheduleConfig()


def active_notification_schedule(advanced: dict[str, Any]) -> Optional[NotificationScheduleConfig]:
    """The notification window, or None when quiet hours are not in force."""
    if not advanced.get("enabled"):
        return None
    try:
        config = NotificationScheduleConfig.from_dict(advanced.get("notificationSchedule") or {})
    except (KeyError, TypeError, ValueError):
        return None
    return config if config.enabled else None


def scheduled_sessions(advanced: dict[str, Any]) -> list[Session]:
    return generate_sessions(active_work_schedule(advanced))


def format_schedule_range(sessions: Sequence[Session]) -> str:
    if not sessions:
        return ""
    return f"{sessions[0].label} - {sessions[-1].label}"


def session_interval_minutes(config: WorkScheduleConfig) -> int:
    if config.session_count <= 1:
        return 0
    return _js_round((config.end_minutes - config.start_minutes) / (config.session_count - 1))


def format_interval(config: WorkScheduleConfig) -> str:
    """Human-readable spacing between sessions (e.g. '1h 24min entre sesiones')."""
    total = session_interval_minutes(config)
    hours, minutes = divmod(total, 60)
    if hours > 0:
        return f"{hours}h {minutes}min entre sesiones"
    return f"{minutes} min entre sesiones"


# ─── Validation ──────────────────────────────────────────────
def validate_work_schedule(config: WorkScheduleConfig) -> list[str]:
    errors = []
    if config.end_minutes <= config.start_minutes:
        errors.append("La hora de fin debe ser posterior a la hora de inicio")
    elif config.end_minutes - config.start_minutes < MIN_WORK_SPAN_MINUTES:
        errors.append("El horario de trabajo debe ser de al menos 4 horas")
    if config.session_count not in SESSION_COUNTS:
        errors.append("El número de sesiones debe ser 6, 8 o 12")
    return errors


def validate_notification_schedule(config: NotificationScheduleConfig) -> list[str]:
    errors = []
    if config.enabled and config.end_minutes <= config.start_minutes:
        errors.append("La hora de fin debe ser posterior a la hora de inicio")
    if config.max_sessions not in MAX_SESSION_OPTIONS:
        errors.append("El máximo de sesiones debe ser 6, 8, 12, 16, 20 o 24")
    return errors


def save_work_schedule(store: Store, config: WorkScheduleConfig) -> None:
    """Persist a work schedule. Raises ScheduleError when it is invalid."""
    errors = validate_work_schedule(config)
    if errors:
        raise ScheduleError(errors)
    update_advanced_settings(store, workSchedule=config.to_dict())


def save_notification_schedule(store: Store, config: NotificationScheduleConfig) -> None:
    errors = validate_notification_schedule(config)
    if errors:
        raise ScheduleError(errors)
    update_advanced_settings(store, notificationSchedule=config.to_dict())


def load_sessions(store: Store) -> list[Session]:
    return scheduled_sessions(load_advanced_settings(store))


# ─── Session Clock ───────────────────────────────────────────
def current_time_minutes(now: datetime.datetime) -> int:
    return _minutes(now.hour, now.minute)


def next_session(sessions: Sequence[Session], now: datetime.datetime) -> Optional[Session]:
    """First session later than now; wraps to tomorrow's first session."""
    current = current_time_minutes(now)
    for session in sessions:
        if session.minutes > current:
            return session
    return sessions[0] if sessions else None


def is_session_time(sessions: Sequence[Session], now: datetime.datetime,
                    tolerance_minutes: int = SESSION_TOLERANCE_MINUTES) -> bool:
    current = current_time_minutes(now)
    return any(abs(current - s.minutes) <= tolerance_minutes for s in sessions)


def time_until_next(sessions: Sequence[Session],
                    now: datetime.datetime) -> Optional[tuple[int, int]]:
    """(hours, minutes) until the next session, or None without a schedule."""
    upcoming = next_session(sessions, now)
    if upcoming is None:
        return None
    diff = upcoming.minutes - current_time_minutes(now)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return divmod(diff, 60)


def format_time_until(time_until: tuple[int, int]) -> str:
    hours, minutes = time_until
    if hours > 0:
        return f"{hours}h {minutes}min"
    return f"{minutes} min"


def current_session_id(sessions: Sequence[Session], now: datetime.datetime) -> Optional[int]:
    current = current_time_minutes(now)
    for session in sessions:
        if abs(current - session.minutes) <= CURRENT_SESSION_TOLERANCE:
            return session.id
    return None


def is_within_work_hours(config: WorkScheduleConfig, now: datetime.datetime) -> bool:
    return config.start_minutes <= current_time_minutes(now) <= config.end_minutes


def is_within_notification_hours(config: Optional[NotificationScheduleConfig],
                                 now: datetime.datetime) -> bool:
    """Inclusive window check. A missing or disabled window never blocks."""
    if config is None or not config.enabled:
        return True
    return config.start_minutes <= current_time_minutes(now) <= config.end_minutes


def is_current_session_completed(sessions: Sequence[Session], ledger,
                                 now: datetime.datetime) -> bool:
    session_id = current_session_id(sessions, now)
    if session_id is None:
        return False
    return ledger.is_completed(session_id)


def is_active_session(sessions: Sequence[Session], ledger, now: datetime.datetime) -> bool:
    """True while a session is due and has not been completed yet."""
    return (is_session_time(sessions, now, SESSION_TOLERANCE_MINUTES)
            and not is_current_session_completed(sessions, ledger, now))
