"""Which sessions have been completed today."""
from __future__ import annotations

import datetime
from typing import Union

from .storage import COMPLETED_SESSIONS_KEY, Store


def day_key(day: Union[datetime.date, str]) -> str:
    """ISO calendar-day key (YYYY-MM-DD)."""
    if isinstance(day, datetime.datetime):
        day = day.date()
    if isinstance(day, datetime.date):
        return day.isoformat()
    return str(day)


class CompletionLedger:
    """Completed session ids for a single calendar day.

    The caller supplies ``today``. A stored record for any other date reads
    as empty and is replaced on the next write.
    """

    def __init__(self, store: Store, today: Union[datetime.date, str]):
        self.store = store
        self.today = day_key(today)

    def completed_ids(self) -> list[int]:
        data = self.store.get(COMPLETED_SESSIONS_KEY)
        if not isinstance(data, dict) or data.get("date") != self.today:
            return []
        ids = data.get("sessions")
        return list(ids) if isinstance(ids, list) else []

    def is_completed(self, session_id: int) -> bool:
        return session_id in self.completed_ids()

    def completed_count(self) -> int:
        return len(self.completed_ids())

    def mark_completed(self, session_id: int) -> None:
        completed = self.completed_ids()
        if session_id not in completed:
            completed.append(session_id)
        self.store.set(COMPLETED_SESSIONS_KEY, {
            "date": self.today,
            "sessions": completed,
        })
