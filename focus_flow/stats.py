"""
Completion history and weekly summaries.

History is a list of DailyStats, one per calendar day with at least one
completed exercise, oldest first. Weeks run Monday to Sunday.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from .exercises import ZONES, Exercise
from .storage import STATS_KEY, Store

DAY_LABELS = ("L", "M", "X", "J", "V", "S", "D")
MONTH_LABELS = ("Ene", "Feb", "Mar", "Abr", "May", "Jun",
                "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")


# ─── Data Models ─────────────────────────────────────────────
@dataclass
class CompletedExercise:
    id: int
    name: str
    zone: str
    duration_seconds: int
    completed_at: str       # ISO timestamp

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CompletedExercise":
        return cls(int(d["id"]), str(d["name"]), str(d["zone"]),
                   int(d["durationSeconds"]), str(d["completedAt"]))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "zone": self.zone,
            "durationSeconds": self.duration_seconds,
            "completedAt": self.completed_at,
        }


@dataclass
class DailyStats:
    date: str               # YYYY-MM-DD
    sessions: list[CompletedExercise] = field(default_factory=list)

    @property
    def day(self) -> datetime.date:
        return datetime.date.fromisoformat(self.date)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "DailyStats":
        return cls(str(d["date"]),
                   [CompletedExercise.from_dict(s) for s in d.get("sessions") or []])

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "sessions": [s.to_dict() for s in self.sessions]}


def parse_history(raw: Any) -> list[DailyStats]:
    """Parse stored history, dropping entries that do not have the right shape."""
    if not isinstance(raw, list):
        return []
    history = []
    for entry in raw:
        try:
            history.append(DailyStats.from_dict(entry))
        except (KeyError, TypeError, ValueError):
            continue
    return history


def load_history(store: Store) -> list[DailyStats]:
    return parse_history(store.get(STATS_KEY))


def save_history(store: Store, history: Sequence[DailyStats]) -> None:
    store.set(STATS_KEY, [d.to_dict() for d in history])


def record_completed_exercise(store: Store, exercise: Exercise,
                              now: Optional[datetime.datetime] = None) -> CompletedExercise:
    """Append a completion to today's entry, creating the entry if needed."""
    now = now or datetime.datetime.now()
    history = load_history(store)
    today = now.date().isoformat()
    completed = CompletedExercise(exercise.id, exercise.name, exercise.zone,
                                  exercise.duration_seconds, now.isoformat())
    for day in history:
        if day.date == today:
            day.sessions.append(completed)
            break
    else:
        history.append(DailyStats(today, [completed]))
    save_history(store, history)
    return completed


# ─── Week Range ──────────────────────────────────────────────
def _as_date(today: Any) -> datetime.date:
    if isinstance(today, datetime.datetime):
        return today.date()
    return today


def week_monday(today: datetime.date) -> datetime.date:
    today = _as_date(today)
    # date.weekday(): Monday=0 .. Sunday=6
    return today - datetime.timedelta(days=today.weekday())


def week_range(today: datetime.date) -> tuple[datetime.datetime, datetime.datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 of the week containing today."""
    monday = week_monday(today)
    start = datetime.datetime.combine(monday, datetime.time.min)
    end = datetime.datetime.combine(monday + datetime.timedelta(days=6), datetime.time.max)
    return start, end


def weekly_stats(history: Iterable[DailyStats], today: datetime.date) -> list[DailyStats]:
    start, end = week_range(today)
    week = []
    for day in history:
        try:
            d = day.day
        except ValueError:
            continue
        if start.date() <= d <= end.date():
            week.append(day)
    return week


def today_stats(history: Iterable[DailyStats], today: datetime.date) -> Optional[DailyStats]:
    key = _as_date(today).isoformat()
    for day in history:
        if day.date == key:
            return day
    return None


# ─── Aggregates ──────────────────────────────────────────────
def weekly_session_count(history: Iterable[DailyStats], today: datetime.date) -> int:
    return sum(len(day.sessions) for day in weekly_stats(history, today))


def weekly_total_seconds(history: Iterable[DailyStats], today: datetime.date) -> int:
    return sum(s.duration_seconds
               for day in weekly_stats(history, today) for s in day.sessions)


def weekly_zone_distribution(history: Iterable[DailyStats],
                             today: datetime.date) -> dict[str, dict[str, int]]:
    """Count and seconds per zone this week. Every zone is always present."""
    distribution = {zone: {"count": 0, "totalSeconds": 0} for zone in ZONES}
    for day in weekly_stats(history, today):
        for session in day.sessions:
            bucket = distribution.setdefault(session.zone, {"count": 0, "totalSeconds": 0})
            bucket["count"] += 1
            bucket["totalSeconds"] += session.duration_seconds
    return distribution


def weekly_daily_counts(history: Iterable[DailyStats],
                        today: datetime.date) -> list[dict[str, Any]]:
    """Seven entries, Monday to Sunday. Days without activity count 0."""
    today = _as_date(today)
    monday = week_monday(today)
    counts = {day.date: len(day.sessions) for day in history}
    days = []
    for i, label in enumerate(DAY_LABELS):
        d = monday + datetime.timedelta(days=i)
        days.append({
            "day": label,
            "date": d.isoformat(),
            "count": counts.get(d.isoformat(), 0),
            "isToday": d == today,
        })
    return days


def least_worked_zones(distribution: dict[str, dict[str, int]]) -> list[str]:
    """Zones ordered by weekly count, fewest first. Ties keep zone order."""
    return sorted(distribution, key=lambda zone: distribution[zone]["count"])


def recent_exercise_ids(history: Sequence[DailyStats], limit: int = 5) -> list[int]:
    """Most recent completed exercise ids, newest first."""
    recent: list[int] = []
    for day in reversed(history):
        for session in reversed(day.sessions):
            if len(recent) >= limit:
                return recent
            recent.append(session.id)
    return recent


# ─── Formatting ──────────────────────────────────────────────
def week_date_range_label(today: datetime.date) -> str:
    monday = week_monday(today)
    sunday = monday + datetime.timedelta(days=6)
    return (f"{MONTH_LABELS[monday.month - 1]} {monday.day} - "
            f"{MONTH_LABELS[sunday.month - 1]} {sunday.day}")


def format_seconds_to_minutes(seconds: int) -> str:
    return f"{int(seconds / 60 + 0.5)}min"
