"""
Smart exercise selection.

Lower score wins:

    score = zone_index * 10 + (50 if recently done) + jitter in [0, 5)

where ``zone_index`` is the zone's position in the week's least-worked list.
The jitter keeps the pick from going stale; tests pass an rng whose
``random()`` returns a fixed value.
"""
from __future__ import annotations

import datetime
import random
from typing import Any, Optional, Sequence

from .exercises import Exercise, load_catalog
from .stats import (
    least_worked_zones,
    load_history,
    recent_exercise_ids,
    weekly_zone_distribution,
)
from .storage import Store

ZONE_WEIGHT = 10
RECENT_PENALTY = 50
JITTER_RANGE = 5
RECENT_LIMIT = 5

PLACEHOLDER_EXERCISE = Exercise(
    id=0,
    name="Sin ejercicios",
    zone="cuello",
    posture="sitting",
    duration_seconds=30,
    movement="No hay ejercicios disponibles",
    objective="Configura tus preferencias",
    variants=(),
    icon="self_improvement",
    image="/exercises/exercise_1.png",
)


_default_rng = random.Random()


def score_exercise(exercise: Exercise, least_worked: Sequence[str],
                   recent_ids: Sequence[int], jitter: float = 0.0) -> float:
    # A zone missing from the ranking counts as index -1
    zone_index = least_worked.index(exercise.zone) if exercise.zone in least_worked else -1
    score = zone_index * ZONE_WEIGHT
    if exercise.id in recent_ids:
        score += RECENT_PENALTY
    return score + jitter


def pick_next(catalog: Sequence[Exercise],
              exclude_id: Optional[int] = None,
              least_worked: Sequence[str] = (),
              recent_ids: Sequence[int] = (),
              current: Optional[Exercise] = None,
              rng: Optional[Any] = None) -> Optional[Exercise]:
    """Best next exercise, never ``exclude_id`` unless nothing else exists.

    Falls back to the first catalog entry when every candidate is excluded,
    and to ``current`` when the catalog is empty.
    """
    available = [e for e in catalog if e.id != exclude_id]
    if not available:
        return catalog[0] if catalog else current

    rng = rng or _default_rng
    least_worked = list(least_worked)
    best, best_score = None, None
    for exercise in available:
        score = score_exercise(exercise, least_worked, recent_ids,
                               rng.random() * JITTER_RANGE)
        if best_score is None or score < best_score:
            best, best_score = exercise, score
    return best


def initial_exercise(catalog: Sequence[Exercise],
                     rng: Optional[random.Random] = None) -> Exercise:
    """Uniform pick for the first card of the day."""
    if not catalog:
        return PLACEHOLDER_EXERCISE
    return (rng or _default_rng).choice(list(catalog))


def pick_smart(store: Store, today: datetime.date,
               exclude_id: Optional[int] = None,
               current: Optional[Exercise] = None,
               rng: Optional[Any] = None) -> Exercise:
    """Pick from the stored catalog using this week's history."""
    history = load_history(store)
    zones = least_worked_zones(weekly_zone_distribution(history, today))
    recent = recent_exercise_ids(history, RECENT_LIMIT)
    picked = pick_next(load_catalog(store), exclude_id, zones, recent,
                       current or PLACEHOLDER_EXERCISE, rng)
    return picked or PLACEHOLDER_EXERCISE
