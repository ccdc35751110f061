# utils/workout_plans.py
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class PlannedExercise:
    name: str
    description: str
    sets: int
    rep_range: str
    equipment: str = ""

    @property
    def bodyweight(self) -> bool:
        return self.rep_range.lower() == "max reps" or self.equipment == "Bodyweight"


@dataclass(frozen=True)
class WorkoutPlan:
    day: str
    focus: str
    exercises: tuple[PlannedExercise, ...]


WORKOUT_PLANS = {
    "monday": WorkoutPlan(
        day="Monday",
        focus="Chest & Triceps",
        exercises=(
            PlannedExercise("Bench Press", "Press dumbbells from chest to full extension", 4, "8-12"),
            PlannedExercise("Incline DB Press", "Press on 30-45° incline", 3, "8-12"),
            PlannedExercise("Dips", "Body weight, lean forward slightly", 3, "Max Reps"),
            PlannedExercise("TRX Tricep Extensions", "Face anchor, extend arms down", 3, "12-15"),
            PlannedExercise("Diamond Push-ups", "Hands together, elbows tight", 2, "Max Reps"),
        ),
    ),
    "wednesday": WorkoutPlan(
        day="Wednesday",
        focus="Shoulders",
        exercises=(
            PlannedExercise("Seated DB Press", "Press dumbbells overhead from shoulders", 4, "8-12"),
            PlannedExercise("Lateral Raises", "Raise dumbbells to sides to shoulder level", 3, "12-15"),
            PlannedExercise("Front Raises", "Raise dumbbells to front to shoulder level", 3, "12"),
            PlannedExercise("TRX Face Pulls", "Pull TRX handles to face level, elbows high", 3, "15"),
            PlannedExercise("DB Shrugs", "Shrug shoulders straight up and hold", 3, "15"),
        ),
    ),
    "friday": WorkoutPlan(
        day="Friday",
        focus="Back & Biceps",
        exercises=(
            PlannedExercise("Modified Pull-ups", "Pull-ups with knees bent for ceiling clearance", 3, "Max Reps"),
            PlannedExercise("Standing DB Curls", "Curl dumbbells with elbows at sides", 3, "10-12"),
            PlannedExercise("Hammer Curls", "Curl with palms facing each other", 3, "12"),
            PlannedExercise("TRX Rows", "Pull chest to hands, squeezing shoulder blades", 3, "12-15"),
            PlannedExercise("Concentration Curls", "Seated, curl dumbbell with elbow on inner thigh", 2, "12"),
        ),
    ),
}


def plan_for(day: str) -> WorkoutPlan | None:
    return WORKOUT_PLANS.get(day.strip().lower())


def program_week(start: date, today: date, weeks: int = 12) -> int:
    """1-based program week, clamped to [1, weeks]."""
    weeks_passed = (today - start).days // 7
    return min(max(weeks_passed + 1, 1), weeks)


def program_phase(week: int, weeks: int = 12) -> int:
    return 1 if week <= weeks // 2 else 2
