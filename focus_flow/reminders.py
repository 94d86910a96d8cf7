"""
Session reminders.

One dispatcher decides *whether* a reminder may fire (notifications on,
inside the notification window, not already sent for this session, under the
daily cap). Backends only decide *how* it is shown: a tray balloon through
pystray, or a console line when there is no tray.
"""
from __future__ import annotations

import datetime
from typing import Any, Optional

from .ledger import CompletionLedger
from .schedule import (
    NotificationScheduleConfig,
    active_notification_schedule,
    current_session_id,
    is_active_session,
    is_within_notification_hours,
    scheduled_sessions,
)
from .storage import Store, load_advanced_settings, load_preferences

REMINDER_TITLE = "¡Hora de tu pausa activa!"
REMINDER_BODY = "Abre Focus Flow para iniciar tu ejercicio y mantener tu cuerpo activo."


# ─── Backends ────────────────────────────────────────────────
class ReminderBackend:
    name = "base"

    def notify(self, title: str, message: str) -> bool:
        raise NotImplementedError


class ConsoleBackend(ReminderBackend):
    name = "console"

    def notify(self, title: str, message: str) -> bool:
        try:
            print(f"  [*] {title}  {message}")
        except (UnicodeEncodeError, OSError):
            return False
        return True


class TrayBackend(ReminderBackend):
    """Balloon notification on a running pystray icon."""
    name = "tray"

    def __init__(self, icon: Any):
        self.icon = icon

    def notify(self, title: str, message: str) -> bool:
        if not getattr(self.icon, "HAS_NOTIFICATION", False):
            return False
        try:
            self.icon.notify(message, title)
        except (NotImplementedError, OSError):
            return False
        return True


# ─── Dispatcher ──────────────────────────────────────────────
class ReminderDispatcher:
    """Fires at most one reminder per session per day."""

    def __init__(self, backend: ReminderBackend, fallback: Optional[ReminderBackend] = None):
        self.backend = backend
        self.fallback = fallback
        self._day: Optional[datetime.date] = None
        self._notified: set[int] = set()

    def _roll_day(self, now: datetime.datetime) -> None:
        if self._day != now.date():
            self._day = now.date()
            self._notified.clear()

    @property
    def sent_today(self) -> int:
        return len(self._notified)

    def is_eligible(self, session_id: Optional[int], now: datetime.datetime,
                    notifications_enabled: bool,
                    window: Optional[NotificationScheduleConfig]) -> bool:
        self._roll_day(now)
        if session_id is None or not notifications_enabled:
            return False
        if session_id in self._notified:
            return False
        if not is_within_notification_hours(window, now):
            return False
        if window is not None and window.enabled and self.sent_today >= window.max_sessions:
            return False
        return True

    def send(self, session_id: int, now: datetime.datetime) -> bool:
        self._roll_day(now)
        shown = self.backend.notify(REMINDER_TITLE, REMINDER_BODY)
        if not shown and self.fallback is not None:
            shown = self.fallback.notify(REMINDER_TITLE, REMINDER_BODY)
        if shown:
            self._notified.add(session_id)
        return shown

    def poll(self, store: Store, now: datetime.datetime) -> Optional[int]:
        """Check the stored schedule; remind if a session just became due.

        Returns the reminded session id, or None.
        """
        prefs = load_preferences(store)
        advanced = load_advanced_settings(store)
        sessions = scheduled_sessions(advanced)
        ledger = CompletionLedger(store, now.date())
        if not is_active_session(sessions, ledger, now):
            return None
        session_id = current_session_id(sessions, now)
        window = active_notification_schedule(advanced)
        if not self.is_eligible(session_id, now, bool(prefs.get("notifications")), window):
            return None
        return session_id if self.send(session_id, now) else None
