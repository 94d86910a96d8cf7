"""Tests for smart exercise selection."""

import datetime

from conftest import FixedRandom

from focus_flow.exercises import Exercise, NATIVE_EXERCISES, exercise_by_id
from focus_flow.selector import (
    PLACEHOLDER_EXERCISE,
    RECENT_PENALTY,
    initial_exercise,
    pick_next,
    pick_smart,
    score_exercise,
)
from focus_flow.stats import record_completed_exercise
from focus_flow.storage import PREFERENCES_KEY

LEAST_WORKED = ["cuello", "hombros", "espalda", "cadera", "piernas", "de_pie"]


def make(id, zone):
    return Exercise(id, f"E{id}", zone, "sitting", 30, "mover", "objetivo")


def test_zone_bias(zero_rng):
    a, c = make(1, "cuello"), make(2, "espalda")
    assert pick_next([c, a], least_worked=LEAST_WORKED, rng=zero_rng) == a


def test_recency_penalty():
    fresh, stale = make(1, "cuello"), make(2, "cuello")
    recent = [2]
    diff = score_exercise(stale, LEAST_WORKED, recent) - score_exercise(fresh, LEAST_WORKED, recent)
    assert diff >= RECENT_PENALTY
    assert score_exercise(make(3, "de_pie"), LEAST_WORKED, []) == 50


def test_recent_exercise_loses_to_other_zone(zero_rng):
    recent, other = make(1, "cuello"), make(2, "hombros")
    assert pick_next([recent, other], least_worked=LEAST_WORKED,
                     recent_ids=[1], rng=zero_rng) == other


def test_unranked_zone_scores_minus_one():
    assert score_exercise(make(1, "cuello"), ["hombros"], []) == -10


def test_jitter_is_bounded():
    assert score_exercise(make(1, "hombros"), LEAST_WORKED, [], jitter=4.99) < 15
    top = FixedRandom(0.999)
    a, b = make(1, "cuello"), make(2, "hombros")
    assert pick_next([b, a], least_worked=LEAST_WORKED, rng=top) == a


def test_exclude_and_fallbacks(zero_rng):
    a, b = make(1, "cuello"), make(2, "cuello")
    assert pick_next([a, b], exclude_id=1, least_worked=LEAST_WORKED, rng=zero_rng) == b
    assert pick_next([a], exclude_id=1, rng=zero_rng) == a
    assert pick_next([], current=b, rng=zero_rng) == b
    assert pick_next([], rng=zero_rng) is None


def test_initial_exercise(zero_rng):
    assert initial_exercise(NATIVE_EXERCISES, zero_rng) == NATIVE_EXERCISES[0]
    assert initial_exercise([], zero_rng) == PLACEHOLDER_EXERCISE


def test_pick_smart_prefers_least_worked_zone(store, zero_rng, wednesday):
    assert pick_smart(store, wednesday, rng=zero_rng).id == 1
    assert pick_smart(store, wednesday, exclude_id=1, rng=zero_rng).id == 2

    noon = datetime.datetime.combine(wednesday, datetime.time(12, 0))
    for exercise_id in (1, 2, 3):
        record_completed_exercise(store, exercise_by_id(exercise_id), now=noon)
    # cuello is now the most worked zone; hombros leads
    assert pick_smart(store, wednesday, rng=zero_rng).zone == "hombros"


def test_pick_smart_empty_catalog(store, zero_rng, wednesday):
    store.set(PREFERENCES_KEY, {"postures": {"sitting": False, "standing": False}})
    assert pick_smart(store, wednesday, rng=zero_rng) == PLACEHOLDER_EXERCISE
    current = exercise_by_id(5)
    assert pick_smart(store, wednesday, current=current, rng=zero_rng) == current
