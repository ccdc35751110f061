# utils/workout_schema.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

import pandas as pd

# Store keys, one document per user
WORKOUTS_KEY = "workouts"
PROGRESS_KEY = "progress"
ROWING_KEY = "rowing"
TEMPLATES_KEY = "templates"

SET_FRAME_COLS = [
    "date",          # python date
    "date_dt",       # pandas datetime64
    "exercise_name",
    "weight",
    "reps",
    "set_index",
]


def parse_instant(raw) -> datetime | None:
    """ISO-8601 string (or datetime) -> naive UTC datetime, None if unparseable."""
    if not isinstance(raw, (str, datetime)) or raw == "":
        return None
    ts = pd.to_datetime(raw, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts.tz_convert(None).to_pydatetime()


@dataclass(frozen=True)
class WorkoutSet:
    weight: float | int | None = None
    reps: int = 0

    @property
    def effective_weight(self) -> float | int:
        return self.weight if self.weight else 0

    def clamped(self) -> "WorkoutSet":
        weight = self.weight
        if weight is not None and weight < 0:
            weight = 0
        reps = self.reps if self.reps > 0 else 0
        if weight is self.weight and reps == self.reps:
            return self
        return WorkoutSet(weight=weight, reps=reps)


@dataclass(frozen=True)
class WorkoutRecord:
    date: str
    exercises: Mapping[str, tuple[WorkoutSet, ...]] = field(default_factory=dict)

    @property
    def timestamp(self) -> datetime | None:
        return parse_instant(self.date)


@dataclass(frozen=True)
class HistoryEntry:
    date: str
    sets: tuple[WorkoutSet, ...] = ()

    @property
    def timestamp(self) -> datetime | None:
        return parse_instant(self.date)


@dataclass(frozen=True)
class PersonalBest:
    weight: float | int
    reps: int
    date: str


@dataclass(frozen=True)
class ExerciseProgress:
    history: tuple[HistoryEntry, ...] = ()
    personal_best: PersonalBest | None = None


# exercise name -> progress, insertion ordered
UserProgress = dict[str, ExerciseProgress]


@dataclass(frozen=True)
class PersonalBestSummary:
    exercise: str
    weight: float | int
    reps: int
    date: str


@dataclass
class ProgressionConfig:
    increment: float = 5.0
    default_reps: int = 8
    starting_weight: float = 0.0
    trend_threshold_pct: float = 5.0


# ---------------------------------------------------------------------------
# Rowing: pace is minutes per 500 m, lower is better
# ---------------------------------------------------------------------------
ROWING_TYPES = ("Breathe", "Sweat", "Drive")


@dataclass(frozen=True)
class RowingSession:
    type: str
    date: str
    meters: float | int
    minutes: float | int

    @property
    def timestamp(self) -> datetime | None:
        return parse_instant(self.date)


@dataclass(frozen=True)
class RowingEntry:
    date: str
    meters: float | int
    minutes: float | int
    pace: float

    @property
    def timestamp(self) -> datetime | None:
        return parse_instant(self.date)


@dataclass(frozen=True)
class RowingProgress:
    history: tuple[RowingEntry, ...] = ()
    personal_best: RowingEntry | None = None


# rowing type -> progress
RowingLog = dict[str, RowingProgress]
