"""User-authored exercises: validation, storage and conversion."""
from __future__ import annotations

import datetime
import random
import re
import string
import time
import zlib
from typing import Any, Optional

from .errors import ValidationError
from .exercises import POSTURES, ZONE_FALLBACK_IMAGES, ZONE_ICONS, ZONES, Exercise
from .storage import Store, load_advanced_settings, update_advanced_settings

EXERCISE_VALIDATION = {
    "name": {"min": 3, "max": 50},
    "movement": {"min": 10, "max": 200},
    "objective": {"min": 10, "max": 100},
    "duration": {"min": 15, "max": 45},
    "max_exercises": 20,
}

CUSTOM_ID_BASE = 1000
CUSTOM_ID_SPAN = 10000

_BASE36 = string.digits + string.ascii_lowercase


def generate_exercise_id() -> str:
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"custom-{int(time.time() * 1000)}-{suffix}"


# ─── Validation ──────────────────────────────────────────────
def _length_errors(value: str, limits: dict[str, int], too_short: str, too_long: str) -> list[str]:
    trimmed = (value or "").strip()
    errors = []
    if len(trimmed) < limits["min"]:
        errors.append(too_short.format(limits["min"]))
    if len(trimmed) > limits["max"]:
        errors.append(too_long.format(limits["max"]))
    return errors


def validate_exercise_name(name: str) -> list[str]:
    return _length_errors(name, EXERCISE_VALIDATION["name"],
                          "El nombre debe tener al menos {} caracteres",
                          "El nombre no puede exceder {} caracteres")


def validate_exercise_movement(movement: str) -> list[str]:
    return _length_errors(movement, EXERCISE_VALIDATION["movement"],
                          "La descripción del movimiento debe tener al menos {} caracteres",
                          "La descripción no puede exceder {} caracteres")


def validate_exercise_objective(objective: str) -> list[str]:
    return _length_errors(objective, EXERCISE_VALIDATION["objective"],
                          "El objetivo debe tener al menos {} caracteres",
                          "El objetivo no puede exceder {} caracteres")


def validate_exercise_duration(duration: Any) -> list[str]:
    limits = EXERCISE_VALIDATION["duration"]
    if not isinstance(duration, (int, float)) or isinstance(duration, bool):
        return ["La duración debe ser un número de segundos"]
    errors = []
    if duration < limits["min"]:
        errors.append(f"La duración mínima es {limits['min']} segundos")
    if duration > limits["max"]:
        errors.append(f"La duración máxima es {limits['max']} segundos")
    return errors


def validate_custom_exercise(fields: dict[str, Any]) -> list[str]:
    """All validation errors for a custom exercise form, in display order."""
    errors = []
    errors += validate_exercise_name(fields.get("name", ""))
    errors += validate_exercise_movement(fields.get("movement", ""))
    errors += validate_exercise_objective(fields.get("objective", ""))
    errors += validate_exercise_duration(fields.get("durationSeconds"))
    if fields.get("zone") not in ZONES:
        errors.append("Selecciona una zona válida")
    if fields.get("posture") not in POSTURES:
        errors.append("Selecciona una postura válida")
    return errors


# ─── Storage ─────────────────────────────────────────────────
def custom_exercises(store: Store) -> list[dict[str, Any]]:
    return list(load_advanced_settings(store).get("customExercises", []))


def can_add_more_exercises(store: Store) -> bool:
    return len(custom_exercises(store)) < EXERCISE_VALIDATION["max_exercises"]


def add_custom_exercise(store: Store, fields: dict[str, Any],
                        now: Optional[datetime.datetime] = None) -> dict[str, Any]:
    """Validate and store a new custom exercise.

    Raises ValidationError with every problem found; nothing is saved then.
    """
    errors = validate_custom_exercise(fields)
    if not can_add_more_exercises(store):
        errors.append(f"Máximo {EXERCISE_VALIDATION['max_exercises']} ejercicios personalizados")
    if errors:
        raise ValidationError(errors)

    now = now or datetime.datetime.now()
    record = {
        "id": generate_exercise_id(),
        "name": fields["name"].strip(),
        "zone": fields["zone"],
        "posture": fields["posture"],
        "durationSeconds": int(fields["durationSeconds"]),
        "movement": fields["movement"].strip(),
        "objective": fields["objective"].strip(),
        "createdAt": now.isoformat(),
    }
    update_advanced_settings(store, customExercises=custom_exercises(store) + [record])
    return record


def update_custom_exercise(store: Store, custom_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    existing = custom_exercises(store)
    for i, record in enumerate(existing):
        if record.get("id") == custom_id:
            updated = dict(record, **changes)
            errors = validate_custom_exercise(updated)
            if errors:
                raise ValidationError(errors)
            existing[i] = updated
            update_advanced_settings(store, customExercises=existing)
            return updated
    raise KeyError(custom_id)


def delete_custom_exercise(store: Store, custom_id: str) -> bool:
    existing = custom_exercises(store)
    kept = [r for r in existing if r.get("id") != custom_id]
    if len(kept) == len(existing):
        return False
    update_advanced_settings(store, customExercises=kept)
    return True


# ─── Conversion ──────────────────────────────────────────────
def custom_numeric_id(custom_id: str) -> int:
    """Map a custom id into 1000-10999.

    Uses the last six digits of the id; ids without digits fall back to a
    CRC32. Two custom ids can land on the same number.
    """
    digits = re.sub(r"\D", "", custom_id or "")[-6:]
    number = int(digits) if digits else 0
    if not number:
        number = zlib.crc32((custom_id or "").encode("utf-8"))
    return CUSTOM_ID_BASE + number % CUSTOM_ID_SPAN


def custom_to_exercise(custom: dict[str, Any]) -> Exercise:
    zone = custom.get("zone", "cuello")
    return Exercise(
        id=custom_numeric_id(str(custom.get("id", ""))),
        name=custom.get("name", ""),
        zone=zone,
        posture=custom.get("posture", "sitting"),
        duration_seconds=int(custom.get("durationSeconds", 30)),
        movement=custom.get("movement", ""),
        objective=custom.get("objective", ""),
        variants=(),
        icon=ZONE_ICONS.get(zone, "self_improvement"),
        image=ZONE_FALLBACK_IMAGES.get(zone, ZONE_FALLBACK_IMAGES["cuello"]),
    )
