"""Tests for completion history and weekly summaries."""

import datetime

from focus_flow.exercises import ZONES, exercise_by_id
from focus_flow.stats import (
    CompletedExercise,
    DailyStats,
    format_seconds_to_minutes,
    least_worked_zones,
    load_history,
    parse_history,
    record_completed_exercise,
    recent_exercise_ids,
    today_stats,
    week_date_range_label,
    week_monday,
    week_range,
    weekly_daily_counts,
    weekly_session_count,
    weekly_stats,
    weekly_total_seconds,
    weekly_zone_distribution,
)
from focus_flow.storage import STATS_KEY


def done(id, zone, seconds, stamp):
    return CompletedExercise(id, f"Ejercicio {id}", zone, seconds, stamp)


def sample_week():
    return [
        DailyStats("2023-12-31", [done(9, "espalda", 35, "2023-12-31T10:00:00")]),
        DailyStats("2024-01-01", [done(1, "cuello", 40, "2024-01-01T10:00:00"),
                                  done(2, "cuello", 40, "2024-01-01T11:24:00")]),
        DailyStats("2024-01-03", [done(4, "hombros", 30, "2024-01-03T10:00:00")]),
    ]


def test_week_range_monday_to_sunday(wednesday):
    start, end = week_range(wednesday)
    assert start == datetime.datetime(2024, 1, 1, 0, 0)
    assert end.date() == datetime.date(2024, 1, 7)
    assert end.time() == datetime.time.max


def test_sunday_belongs_to_the_previous_monday():
    assert week_monday(datetime.date(2024, 1, 7)) == datetime.date(2024, 1, 1)
    assert week_monday(datetime.date(2024, 1, 1)) == datetime.date(2024, 1, 1)
    assert week_monday(datetime.datetime(2024, 1, 8, 12, 0)) == datetime.date(2024, 1, 8)


def test_weekly_aggregates(wednesday):
    history = sample_week()
    assert [d.date for d in weekly_stats(history, wednesday)] == ["2024-01-01", "2024-01-03"]
    assert weekly_session_count(history, wednesday) == 3
    assert weekly_total_seconds(history, wednesday) == 110
    distribution = weekly_zone_distribution(history, wednesday)
    assert distribution["cuello"] == {"count": 2, "totalSeconds": 80}
    assert distribution["hombros"] == {"count": 1, "totalSeconds": 30}
    assert distribution["espalda"] == {"count": 0, "totalSeconds": 0}
    assert set(distribution) == set(ZONES)


def test_empty_week_has_every_zone(wednesday):
    distribution = weekly_zone_distribution([], wednesday)
    assert all(distribution[z] == {"count": 0, "totalSeconds": 0} for z in ZONES)


def test_weekly_daily_counts(wednesday):
    days = weekly_daily_counts(sample_week(), wednesday)
    assert [d["day"] for d in days] == ["L", "M", "X", "J", "V", "S", "D"]
    assert [d["count"] for d in days] == [2, 0, 1, 0, 0, 0, 0]
    assert [d["isToday"] for d in days].index(True) == 2
    assert days[6]["date"] == "2024-01-07"


def test_least_worked_zones_stable(wednesday):
    zones = least_worked_zones(weekly_zone_distribution(sample_week(), wednesday))
    assert zones == ["espalda", "cadera", "piernas", "de_pie", "hombros", "cuello"]


def test_recent_exercise_ids_newest_first():
    history = sample_week()
    assert recent_exercise_ids(history) == [4, 2, 1, 9]
    assert recent_exercise_ids(history, limit=2) == [4, 2]
    assert recent_exercise_ids([]) == []


def test_record_completed_exercise(store):
    exercise = exercise_by_id(1)
    record_completed_exercise(store, exercise, now=datetime.datetime(2024, 1, 3, 10, 2))
    record_completed_exercise(store, exercise_by_id(4), now=datetime.datetime(2024, 1, 3, 11, 30))
    record_completed_exercise(store, exercise, now=datetime.datetime(2024, 1, 4, 10, 0))
    history = load_history(store)
    assert [d.date for d in history] == ["2024-01-03", "2024-01-04"]
    assert [s.id for s in history[0].sessions] == [1, 4]
    stored = store.get(STATS_KEY)[0]["sessions"][0]
    assert stored == {"id": 1, "name": exercise.name, "zone": "cuello",
                      "durationSeconds": 40, "completedAt": "2024-01-03T10:02:00"}
    assert today_stats(history, datetime.date(2024, 1, 4)).sessions[0].id == 1
    assert today_stats(history, datetime.date(2024, 1, 5)) is None


def test_parse_history_drops_bad_entries(store):
    raw = [{"date": "2024-01-01", "sessions": []}, {"sessions": []}, "junk",
           {"date": "2024-01-02", "sessions": [{"id": "x"}]}]
    assert [d.date for d in parse_history(raw)] == ["2024-01-01"]
    assert parse_history({"not": "a list"}) == []
    store.set_raw(STATS_KEY, "[{")
    assert load_history(store) == []


def test_formatting(wednesday):
    assert week_date_range_label(wednesday) == "Ene 1 - Ene 7"
    assert week_date_range_label(datetime.date(2024, 1, 31)) == "Ene 29 - Feb 4"
    assert format_seconds_to_minutes(110) == "2min"
    assert format_seconds_to_minutes(89) == "1min"
    assert format_seconds_to_minutes(90) == "2min"
