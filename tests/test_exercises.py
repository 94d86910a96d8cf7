"""Tests for the exercise catalog."""

from focus_flow.exercises import (
    EXTRA_EXERCISES,
    NATIVE_EXERCISES,
    ZONES,
    all_exercises,
    disable_extra_exercises,
    enable_extra_exercises,
    enabled_extra_ids,
    exercise_by_id,
    exercises_by_zone,
    extra_ids_by_zone,
    load_catalog,
    matches_posture,
    toggle_extra_exercise,
)
from focus_flow.storage import PREFERENCES_KEY

BOTH = {"sitting": True, "standing": True}


def test_native_catalog_shape():
    assert [e.id for e in NATIVE_EXERCISES] == list(range(1, 19))
    for zone in ZONES:
        assert len(exercises_by_zone(zone)) == 3
    assert all(e.posture == "standing" for e in exercises_by_zone("de_pie"))
    assert exercise_by_id(1).duration_seconds == 40
    assert exercise_by_id(999) is None


def test_extra_catalog_does_not_collide_with_native():
    native_ids = {e.id for e in NATIVE_EXERCISES}
    extra_ids = [e.id for e in EXTRA_EXERCISES]
    assert len(extra_ids) == len(set(extra_ids))
    assert not native_ids & set(extra_ids)
    assert all(e.zone in ZONES for e in EXTRA_EXERCISES)
    assert all(15 <= e.duration_seconds <= 45 for e in EXTRA_EXERCISES)
    assert extra_ids_by_zone("cuello") == [101, 102, 103, 104, 105, 106]


def test_posture_filter():
    assert matches_posture("sitting", {"sitting": True, "standing": False})
    assert not matches_posture("standing", {"sitting": True, "standing": False})
    assert not matches_posture("sitting", {"sitting": False, "standing": False})


def test_all_exercises_order_native_extra_custom():
    custom = [{"id": "custom-1700000000000-abc", "name": "Mío", "zone": "cuello",
               "posture": "sitting", "durationSeconds": 30,
               "movement": "Mover despacio el cuello", "objective": "Relajar el cuello"}]
    catalog = all_exercises(BOTH, [101, 131], custom)
    assert [e.id for e in catalog[:18]] == list(range(1, 19))
    assert [e.id for e in catalog[18:20]] == [101, 131]
    assert catalog[-1].name == "Mío"
    assert 1000 <= catalog[-1].id < 11000


def test_all_exercises_sitting_only():
    catalog = all_exercises({"sitting": True, "standing": False}, [105, 101])
    assert all(e.posture == "sitting" for e in catalog)
    assert 101 in [e.id for e in catalog]
    assert 105 not in [e.id for e in catalog]
    assert len(catalog) == 16


def test_no_postures_means_empty_catalog():
    assert all_exercises({"sitting": False, "standing": False}, [101]) == []


def test_enable_and_disable_extras(store):
    assert enable_extra_exercises(store, [101, 101, 5, 999, 120]) == [101, 120]
    assert enabled_extra_ids(store) == [101, 120]
    assert disable_extra_exercises(store, [101]) == [120]
    assert toggle_extra_exercise(store, 133) is True
    assert toggle_extra_exercise(store, 133) is False
    assert toggle_extra_exercise(store, 5) is False


def test_load_catalog_reads_store(store):
    store.set(PREFERENCES_KEY, {"postures": {"sitting": False, "standing": True}})
    enable_extra_exercises(store, [131, 101])
    ids = [e.id for e in load_catalog(store)]
    assert ids == [16, 17, 18, 131]
