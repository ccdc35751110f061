# utils/exercise_library.py
import re
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class LibraryExercise:
    name: str
    equipment: str
    muscles: tuple[str, ...]
    difficulty: str
    notes: str
    target_reps: str | None = None


EXERCISE_LIBRARY = (
    LibraryExercise("Goblet Squat", "Dumbbell", ("Legs", "Glutes"), "Beginner",
                    "Hold dumbbell at chest, squat deep, drive through heels"),
    LibraryExercise("TRX Row", "TRX", ("Back", "Biceps"), "Beginner",
                    "Maintain plank, pull handles to chest"),
    LibraryExercise("Push-up", "Bodyweight", ("Chest", "Triceps"), "Beginner",
                    "Keep body in straight line, elbows at 45°"),
    LibraryExercise("Kettlebell Swing", "Kettlebell", ("Glutes", "Hamstrings"), "Intermediate",
                    "Hinge at hips, explosive swing to shoulder height"),
    LibraryExercise("Overhead Press", "Dumbbell", ("Shoulders", "Triceps"), "Intermediate",
                    "Press dumbbells straight up, avoid flaring elbows"),
    LibraryExercise("TRX Pike", "TRX", ("Core",), "Intermediate",
                    "Start in TRX plank, pike hips up over shoulders"),
    LibraryExercise("Split Squat", "Dumbbell", ("Legs",), "Intermediate",
                    "Front heel flat, drop back knee straight down"),
    LibraryExercise("Bent-over Row", "Dumbbell", ("Back",), "Intermediate",
                    "Hinge forward, pull dumbbells to ribs"),
    LibraryExercise("Dips", "Dip Bar", ("Chest", "Triceps"), "Intermediate",
                    "Control descent, stop just before shoulders dip below elbows"),
)

# lower-case alias -> display name
EQUIPMENT_ALIASES = {
    "dumbbell": "Dumbbell",
    "db": "Dumbbell",
    "kettlebell": "Kettlebell",
    "kb": "Kettlebell",
    "barbell": "Barbell",
    "machine": "Machine",
    "cable": "Cable",
    "suspension": "TRX",
    "trx": "TRX",
    "bodyweight": "Bodyweight",
}

DEFAULT_REP_NUMBER = 8


def find_exercise(name: str) -> LibraryExercise | None:
    """Case-insensitive lookup by exact name."""
    wanted = (name or "").strip().lower()
    for item in EXERCISE_LIBRARY:
        if item.name.lower() == wanted:
            return item
    return None


def normalize_equipment(raw_equipment: str = "", raw_type: str = "", name: str = "") -> str:
    """
    Map equipment spellings onto a display name.

    The equipment (or, failing that, the type) is tried as an alias first,
    then the first word of the exercise name ("DB Shrugs" -> Dumbbell).
    Unknown values come back unchanged.
    """
    raw = raw_equipment or raw_type or ""
    normalized = str(raw).strip().lower()
    if normalized in EQUIPMENT_ALIASES:
        return EQUIPMENT_ALIASES[normalized]

    words = (name or "").split()
    prefix = words[0].lower() if words else ""
    if prefix in EQUIPMENT_ALIASES:
        return EQUIPMENT_ALIASES[prefix]
    return raw


def resolve_exercise_info(exercise: Mapping[str, Any] | None = None) -> dict:
    """Fill name, equipment and target_reps from the library where missing."""
    exercise = dict(exercise or {})
    match = find_exercise(exercise.get("name") or "")

    name = exercise.get("name") or (match.name if match else "Exercise")
    equipment = normalize_equipment(
        exercise.get("equipment") or (match.equipment if match else ""),
        exercise.get("type") or "",
        name,
    )
    target_reps = (
        exercise.get("target_reps")
        or exercise.get("targetReps")
        or (match.target_reps if match else None)
    )
    return {
        **exercise,
        "name": name,
        "equipment": equipment,
        "target_reps": target_reps,
        "notes": exercise.get("notes") or (match.notes if match else ""),
    }


def suggested_rep_number(target_reps: Any) -> int:
    """First number in a rep target ("8-12" -> 8); DEFAULT_REP_NUMBER otherwise."""
    found = re.search(r"\d+", str(target_reps or ""))
    return int(found.group()) if found else DEFAULT_REP_NUMBER
