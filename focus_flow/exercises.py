"""
Exercise catalog: the built-in exercises, the optional "extra" pack, and the
posture-filtered union the session picker draws from.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional, Sequence

from .storage import (
    Store,
    load_advanced_settings,
    load_preferences,
    update_advanced_settings,
)

ZONES = ("cuello", "hombros", "espalda", "cadera", "piernas", "de_pie")
POSTURES = ("sitting", "standing")

ZONE_LABELS = {
    "cuello": "Cuello",
    "hombros": "Hombros",
    "espalda": "Espalda",
    "cadera": "Cadera",
    "piernas": "Piernas",
    "de_pie": "De Pie",
}

# Material icon names used when an exercise has no icon of its own
ZONE_ICONS = {
    "cuello": "self_improvement",
    "hombros": "accessibility",
    "espalda": "airline_seat_recline_normal",
    "cadera": "directions_walk",
    "piernas": "directions_run",
    "de_pie": "accessibility_new",
}

ZONE_FALLBACK_IMAGES = {
    "cuello": "/exercises/exercise_1.png",
    "hombros": "/exercises/exercise_4.png",
    "espalda": "/exercises/exercise_7.png",
    "cadera": "/exercises/exercise_10.png",
    "piernas": "/exercises/exercise_13.png",
    "de_pie": "/exercises/exercise_16.png",
}


# ─── Data Models ─────────────────────────────────────────────
@dataclass(frozen=True)
class ExerciseVariant:
    id: str
    name: str


@dataclass(frozen=True)
class Exercise:
    id: int
    name: str
    zone: str               # one of ZONES
    posture: str            # "sitting" or "standing"
    duration_seconds: int
    movement: str
    objective: str
    variants: tuple[ExerciseVariant, ...] = field(default_factory=tuple)
    icon: str = ""          # Material icon name
    image: str = ""         # Illustration path

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _native(id, name, zone, posture, duration, movement, objective, variants, icon):
    return Exercise(id, name, zone, posture, duration, movement, objective,
                    tuple(ExerciseVariant(v, n) for v, n in variants),
                    icon, f"/exercises/exercise_{id}.png")


def _extra(id, name, zone, posture, duration, movement, objective, variants):
    return Exercise(id, name, zone, posture, duration, movement, objective,
                    tuple(ExerciseVariant(v, n) for v, n in variants),
                    ZONE_ICONS[zone], ZONE_FALLBACK_IMAGES[zone])


# ─── Native Catalog ──────────────────────────────────────────
NATIVE_EXERCISES: list[Exercise] = [
    # --- Cuello ---
    _native(1, "Inclinación lateral de cuello", "cuello", "sitting", 40,
            "Oreja hacia hombro, alternando lados.", "Liberar tensión cervical lateral.",
            [("suave", "Suave (sostener 5s)"), ("fluida", "Fluida (movimiento continuo)")],
            "swap_horiz"),
    _native(2, "Flexión cervical frontal", "cuello", "sitting", 30,
            "Mentón hacia pecho.", "Descomprimir cervical posterior.",
            [("estatica", "Estática"), ("pulsos", "Pulsos cortos")],
            "vertical_align_bottom"),
    _native(3, "Rotación de cuello", "cuello", "sitting", 45,
            "Girar cabeza derecha/izquierda.", "Movilidad cervical global.",
            [("lenta", "Lenta"), ("pausa", "Con pausa final")],
            "rotate_right"),

    # --- Hombros ---
    _native(4, "Elevación y caída de hombros", "hombros", "sitting", 35,
            "Subir hombros a orejas y soltar.", "Liberar trapecios.",
            [("lento", "Lento"), ("ritmico", "Rítmico")],
            "unfold_more"),
    _native(5, "Rotación de hombros", "hombros", "sitting", 40,
            "Círculos hacia atrás.", "Activar cintura escapular.",
            [("amplio", "Amplio"), ("reducido", "Reducido")],
            "sync"),
    _native(6, "Retracción escapular", "hombros", "sitting", 45,
            "Juntar omóplatos suavemente.", "Contrarrestar postura encorvada.",
            [("sosten", "Sostén"), ("pulsos", "Pulsos")],
            "compress"),

    # --- Espalda ---
    _native(7, "Extensión torácica sentada", "espalda", "sitting", 40,
            "Abrir pecho, llevar brazos atrás.", "Movilidad dorsal.",
            [("estatica", "Estática"), ("fluida", "Fluida")],
            "open_in_full"),
    _native(8, "Gato–vaca sentado", "espalda", "sitting", 45,
            "Redondear y extender columna.", "Lubricar columna.",
            [("lento", "Lento"), ("continuo", "Continuo")],
            "waves"),
    _native(9, "Rotación torácica", "espalda", "sitting", 35,
            "Girar torso desde la cintura.", "Liberar rigidez dorsal.",
            [("alternada", "Alternada"), ("pausa", "Con pausa")],
            "autorenew"),

    # --- Cadera ---
    _native(10, "Apertura de cadera sentada", "cadera", "sitting", 40,
            "Rodilla hacia afuera.", "Movilidad de cadera.",
            [("estatica", "Estática"), ("pulsos", "Pulsos")],
            "open_with"),
    _native(11, "Flexión de cadera alterna", "cadera", "sitting", 35,
            "Elevar rodilla.", "Activar flexores.",
            [("alternada", "Alternada"), ("sosten", "Sostén")],
            "keyboard_arrow_up"),
    _native(12, "Balanceo pélvico", "cadera", "sitting", 45,
            "Basculación adelante/atrás.", "Descomprimir zona lumbar.",
            [("lento", "Lento"), ("fluido", "Fluido")],
            "swap_vert"),

    # --- Piernas ---
    _native(13, "Elevación de talones", "piernas", "sitting", 30,
            "Subir y bajar talones.", "Activar circulación.",
            [("bilateral", "Bilateral"), ("alternada", "Alternada")],
            "height"),
    _native(14, "Extensión de rodilla", "piernas", "sitting", 40,
            "Extender pierna al frente.", "Activar cuádriceps.",
            [("alternada", "Alternada"), ("sosten", "Sostén")],
            "straighten"),
    _native(15, "Movilidad de tobillos", "piernas", "sitting", 30,
            "Círculos con el pie.", "Lubricar articulación.",
            [("amplio", "Amplio"), ("reducido", "Reducido")],
            "rotate_90_degrees_ccw"),

    # --- De pie (complementarios) ---
    _native(16, "Estiramiento de columna de pie", "de_pie", "standing", 35,
            "Brazos arriba, elongar.", "Descompresión global.",
            [("sosten", "Sostén"), ("balanceo", "Balanceo suave")],
            "expand"),
    _native(17, "Bisagra de cadera corta", "de_pie", "standing", 30,
            "Inclinar torso manteniendo espalda neutra.", "Activar cadena posterior.",
            [("corto", "Corto"), ("controlado", "Controlado")],
            "turn_right"),
    _native(18, "Sentadilla parcial", "de_pie", "standing", 45,
            "Flexión leve de rodillas.", "Activar piernas sin fatiga.",
            [("pulsos", "Pulsos"), ("sosten", "Sostén")],
            "download"),
]

# ─── Extra Catalog (opt-in, ids 101+) ────────────────────────
EXTRA_EXERCISES: list[Exercise] = [
    # --- Cuello ---
    _extra(101, "Retracción de mentón", "cuello", "sitting", 30,
           "Llevar el mentón hacia atrás sin inclinar la cabeza.",
           "Corregir la cabeza adelantada.",
           [("sosten", "Sostén 3s"), ("pulsos", "Pulsos")]),
    _extra(102, "Estiramiento del elevador de la escápula", "cuello", "sitting", 40,
           "Girar la cabeza 45 grados y llevar la nariz hacia la axila.",
           "Aliviar tensión del cuello posterior.",
           [("suave", "Suave"), ("asistido", "Asistido con la mano")]),
    _extra(103, "Semicírculos de cuello", "cuello", "sitting", 35,
           "Dibujar un semicírculo con el mentón de hombro a hombro.",
           "Movilidad cervical suave.",
           [("lento", "Lento"), ("pausa", "Con pausa")]),
    _extra(104, "Isométrico lateral de cuello", "cuello", "sitting", 30,
           "Empujar la mano con la sien sin mover la cabeza.",
           "Fortalecer musculatura cervical.",
           [("suave", "Suave"), ("firme", "Firme")]),
    _extra(105, "Extensión cervical de pie", "cuello", "standing", 30,
           "Mirar al techo lentamente y volver al centro.",
           "Movilidad de extensión cervical.",
           [("lenta", "Lenta"), ("sosten", "Sostén")]),
    _extra(106, "Estiramiento de escalenos", "cuello", "standing", 40,
           "Bajar un hombro y llevar la oreja al lado contrario.",
           "Liberar tensión cervical anterior.",
           [("estatico", "Estático"), ("respiracion", "Con respiración")]),

    # --- Hombros ---
    _extra(107, "Círculos de brazos", "hombros", "standing", 35,
           "Círculos amplios con los brazos extendidos.",
           "Activar la articulación del hombro.",
           [("adelante", "Hacia delante"), ("atras", "Hacia atrás")]),
    _extra(108, "Estiramiento cruzado de hombro", "hombros", "sitting", 40,
           "Llevar un brazo cruzado al pecho y sostener.",
           "Estirar deltoides posterior.",
           [("estatico", "Estático"), ("alternado", "Alternado")]),
    _extra(109, "Apertura de pecho en puerta", "hombros", "standing", 45,
           "Antebrazos en el marco de una puerta, avanzar el pecho.",
           "Abrir pectorales.",
           [("bajo", "Brazos bajos"), ("alto", "Brazos altos")]),
    _extra(110, "Ángeles en la pared", "hombros", "standing", 40,
           "Espalda en la pared, deslizar los brazos arriba y abajo.",
           "Mejorar movilidad escapular.",
           [("corto", "Recorrido corto"), ("completo", "Recorrido completo")]),
    _extra(111, "Encogimiento con pausa", "hombros", "sitting", 30,
           "Subir hombros, sostener tres segundos y soltar.",
           "Descargar trapecios.",
           [("lento", "Lento"), ("ritmico", "Rítmico")]),
    _extra(112, "Rotación externa con codos pegados", "hombros", "sitting", 35,
           "Codos junto al cuerpo, abrir los antebrazos hacia fuera.",
           "Activar manguito rotador.",
           [("lenta", "Lenta"), ("sosten", "Sostén")]),

    # --- Espalda ---
    _extra(113, "Inclinación lateral sentada", "espalda", "sitting", 35,
           "Brazo arriba e inclinar el tronco al lado contrario.",
           "Estirar dorsal ancho.",
           [("estatica", "Estática"), ("alternada", "Alternada")]),
    _extra(114, "Abrazo de espalda", "espalda", "sitting", 30,
           "Abrazarse y redondear la espalda alta.",
           "Separar escápulas.",
           [("sosten", "Sostén"), ("respiracion", "Con respiración")]),
    _extra(115, "Extensión lumbar de pie", "espalda", "standing", 30,
           "Manos en la cintura, arquear suavemente hacia atrás.",
           "Contrarrestar flexión prolongada.",
           [("suave", "Suave"), ("sosten", "Sostén")]),
    _extra(116, "Flexión hacia delante sentada", "espalda", "sitting", 40,
           "Dejar caer el torso entre las rodillas y relajar.",
           "Descomprimir zona lumbar.",
           [("relajada", "Relajada"), ("activa", "Activa")]),
    _extra(117, "Alcance con rotación", "espalda", "standing", 35,
           "Extender un brazo hacia arriba y girar el torso.",
           "Movilidad de la columna torácica.",
           [("alternado", "Alternado"), ("pausa", "Con pausa")]),
    _extra(118, "Superman de pie", "espalda", "standing", 40,
           "Extender un brazo y la pierna contraria hacia atrás.",
           "Activar musculatura extensora.",
           [("apoyo", "Con apoyo"), ("libre", "Sin apoyo")]),

    # --- Cadera ---
    _extra(119, "Estiramiento de psoas de pie", "cadera", "standing", 40,
           "Dar un paso atrás y empujar la cadera hacia delante.",
           "Estirar flexores de cadera.",
           [("estatico", "Estático"), ("pulsos", "Pulsos")]),
    _extra(120, "Figura cuatro sentada", "cadera", "sitting", 45,
           "Tobillo sobre la rodilla contraria, inclinar el torso.",
           "Estirar glúteo y piriforme.",
           [("suave", "Suave"), ("profunda", "Profunda")]),
    _extra(121, "Círculos de cadera", "cadera", "standing", 35,
           "Manos en la cintura y dibujar círculos con la pelvis.",
           "Movilidad global de cadera.",
           [("amplios", "Amplios"), ("pequenos", "Pequeños")]),
    _extra(122, "Aducción isométrica", "cadera", "sitting", 30,
           "Apretar las rodillas contra los puños.",
           "Activar aductores.",
           [("sosten", "Sostén"), ("pulsos", "Pulsos")]),
    _extra(123, "Abducción de pie", "cadera", "standing", 35,
           "Elevar una pierna hacia el lado con el tronco erguido.",
           "Activar glúteo medio.",
           [("alternada", "Alternada"), ("sosten", "Sostén")]),
    _extra(124, "Marcha sentada", "cadera", "sitting", 30,
           "Elevar rodillas alternas a ritmo constante.",
           "Activar flexores y circulación.",
           [("lenta", "Lenta"), ("rapida", "Rápida")]),

    # --- Piernas ---
    _extra(125, "Estiramiento de isquiotibiales sentado", "piernas", "sitting", 40,
           "Pierna extendida, inclinar el torso hacia delante.",
           "Estirar cadena posterior.",
           [("estatico", "Estático"), ("flex", "Con flexión de tobillo")]),
    _extra(126, "Estiramiento de cuádriceps de pie", "piernas", "standing", 40,
           "Llevar el talón hacia el glúteo sujetando el tobillo.",
           "Estirar cuádriceps.",
           [("apoyo", "Con apoyo"), ("libre", "Sin apoyo")]),
    _extra(127, "Elevación de puntas", "piernas", "sitting", 30,
           "Subir y bajar las puntas de los pies.",
           "Activar tibial anterior.",
           [("bilateral", "Bilateral"), ("alternada", "Alternada")]),
    _extra(128, "Estiramiento de gemelos en pared", "piernas", "standing", 40,
           "Manos en la pared, pierna atrás con el talón apoyado.",
           "Estirar gemelos.",
           [("recta", "Rodilla recta"), ("flexionada", "Rodilla flexionada")]),
    _extra(129, "Zancada estática", "piernas", "standing", 45,
           "Paso largo y bajar la rodilla trasera sin tocar el suelo.",
           "Fortalecer piernas.",
           [("corta", "Corta"), ("profunda", "Profunda")]),
    _extra(130, "Bombeo de tobillos", "piernas", "sitting", 30,
           "Flexionar y extender los tobillos con rapidez.",
           "Estimular retorno venoso.",
           [("rapido", "Rápido"), ("lento", "Lento")]),

    # --- De pie ---
    _extra(131, "Marcha en el sitio", "de_pie", "standing", 45,
           "Caminar en el sitio elevando las rodillas.",
           "Reactivar circulación general.",
           [("suave", "Suave"), ("enérgica", "Enérgica")]),
    _extra(132, "Equilibrio a una pierna", "de_pie", "standing", 30,
           "Sostenerse sobre una pierna con el tronco estable.",
           "Mejorar estabilidad.",
           [("ojos_abiertos", "Ojos abiertos"), ("ojos_cerrados", "Ojos cerrados")]),
    _extra(133, "Sentarse y levantarse", "de_pie", "standing", 40,
           "Levantarse de la silla sin usar las manos y volver.",
           "Activar piernas y glúteos.",
           [("lento", "Lento"), ("pausa", "Con pausa arriba")]),
    _extra(134, "Flexiones en escritorio", "de_pie", "standing", 40,
           "Manos en el borde del escritorio, flexionar los codos.",
           "Activar pecho y brazos.",
           [("cortas", "Cortas"), ("completas", "Completas")]),
    _extra(135, "Sacudida de cuerpo", "de_pie", "standing", 30,
           "Sacudir brazos y piernas de forma suelta.",
           "Liberar tensión acumulada.",
           [("suave", "Suave"), ("energica", "Enérgica")]),
    _extra(136, "Alcance al techo y suelo", "de_pie", "standing", 40,
           "Estirarse hacia arriba y luego flexionar hacia el suelo.",
           "Elongación completa.",
           [("fluido", "Fluido"), ("pausa", "Con pausa")]),
]


# ─── Lookups ─────────────────────────────────────────────────
def exercise_by_id(exercise_id: int,
                   catalog: Optional[Iterable[Exercise]] = None) -> Optional[Exercise]:
    pool = catalog if catalog is not None else NATIVE_EXERCISES + EXTRA_EXERCISES
    for exercise in pool:
        if exercise.id == exercise_id:
            return exercise
    return None


def exercises_by_zone(zone: str, catalog: Optional[Iterable[Exercise]] = None) -> list[Exercise]:
    pool = catalog if catalog is not None else NATIVE_EXERCISES
    return [e for e in pool if e.zone == zone]


def extra_ids_by_zone(zone: str) -> list[int]:
    return [e.id for e in EXTRA_EXERCISES if e.zone == zone]


def matches_posture(posture: str, posture_prefs: dict[str, bool]) -> bool:
    return ((posture == "sitting" and bool(posture_prefs.get("sitting")))
            or (posture == "standing" and bool(posture_prefs.get("standing"))))


# ─── Catalog Assembly ────────────────────────────────────────
def enabled_extra_exercises(enabled_ids: Iterable[int]) -> list[Exercise]:
    wanted = set(enabled_ids)
    return [e for e in EXTRA_EXERCISES if e.id in wanted]


def all_exercises(posture_prefs: dict[str, bool],
                  enabled_extra_ids: Iterable[int] = (),
                  custom_exercises: Sequence[dict[str, Any]] = ()) -> list[Exercise]:
    """Native, then enabled extras, then custom exercises matching the postures."""
    from .custom import custom_to_exercise

    native = [e for e in NATIVE_EXERCISES if matches_posture(e.posture, posture_prefs)]
    extra = [e for e in enabled_extra_exercises(enabled_extra_ids)
             if matches_posture(e.posture, posture_prefs)]
    custom = [custom_to_exercise(c) for c in custom_exercises
              if matches_posture(c.get("posture", ""), posture_prefs)]
    return native + extra + custom


def load_catalog(store: Store) -> list[Exercise]:
    prefs = load_preferences(store)
    advanced = load_advanced_settings(store)
    return all_exercises(prefs["postures"],
                         advanced.get("enabledExtraExercises", []),
                         advanced.get("customExercises", []))


# ─── Extra Enablement ────────────────────────────────────────
def enabled_extra_ids(store: Store) -> list[int]:
    return list(load_advanced_settings(store).get("enabledExtraExercises", []))


def enable_extra_exercises(store: Store, ids: Iterable[int]) -> list[int]:
    current = enabled_extra_ids(store)
    known = {e.id for e in EXTRA_EXERCISES}
    for exercise_id in ids:
        if exercise_id in known and exercise_id not in current:
            current.append(exercise_id)
    update_advanced_settings(store, enabledExtraExercises=current)
    return current


def disable_extra_exercises(store: Store, ids: Iterable[int]) -> list[int]:
    drop = set(ids)
    current = [i for i in enabled_extra_ids(store) if i not in drop]
    update_advanced_settings(store, enabledExtraExercises=current)
    return current


def toggle_extra_exercise(store: Store, exercise_id: int) -> bool:
    """Flip one extra exercise on or off. Returns the new state."""
    if exercise_id in enabled_extra_ids(store):
        disable_extra_exercises(store, [exercise_id])
        return False
    enable_extra_exercises(store, [exercise_id])
    return exercise_id in enabled_extra_ids(store)
