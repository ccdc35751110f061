import bisect
import logging
import math
import numbers
from datetime import datetime
from typing import Any, Callable, Iterable

import pandas as pd

from utils.errors import MalformedRecord
from utils.workout_processing import parse_workout
from utils.workout_schema import (
    ExerciseProgress,
    HistoryEntry,
    PersonalBest,
    PersonalBestSummary,
    ProgressionConfig,
    UserProgress,
    WorkoutRecord,
    WorkoutSet,
    parse_instant,
)

log = logging.getLogger(__name__)


def _set_key(s: WorkoutSet) -> tuple:
    return (s.effective_weight, s.reps)


def compare_sets(a: WorkoutSet, b: WorkoutSet) -> bool:
    """True if a beats b: heavier wins, equal weight goes to more reps."""
    return _set_key(a) > _set_key(b)


def best_set(sets: Iterable[WorkoutSet]) -> WorkoutSet | None:
    best = None
    for s in sets:
        if best is None or compare_sets(s, best):
            best = s
    return best


def _finite(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _usable_sets(name: str, date: str, sets) -> tuple[WorkoutSet, ...] | None:
    """
    Clamped copies of the sets that hold finite numbers. Anything else is
    logged and dropped. None when every set of a non-empty list was dropped.
    """
    kept = []
    for i, s in enumerate(sets):
        try:
            if not isinstance(s, WorkoutSet):
                raise TypeError(f"expected WorkoutSet, got {type(s).__name__}")
            if s.weight is not None and not _finite(s.weight):
                raise ValueError(f"weight {s.weight!r}")
            if not _finite(s.reps):
                raise ValueError(f"reps {s.reps!r}")
            kept.append(s.clamped())
        except (TypeError, AttributeError, ValueError) as exc:
            log.warning("Skipping set %d of %r in workout %s: %s", i + 1, name, date, exc)
    if sets and not kept:
        return None
    return tuple(kept)


def _entry_sort_key(entry) -> datetime:
    return entry.timestamp or datetime.min


def insert_chronologically(history: tuple, entry) -> tuple:
    """Insert after any entries with the same instant; works for anything with a timestamp."""
    # fast path for the normal, in-order append
    if not history or _entry_sort_key(history[-1]) <= _entry_sort_key(entry):
        return history + (entry,)
    keys = [_entry_sort_key(h) for h in history]
    pos = bisect.bisect_right(keys, _entry_sort_key(entry))
    log.info("Back-dated entry %s inserted at position %d of %d", entry.date, pos, len(history))
    return history[:pos] + (entry,) + history[pos:]


def _updated_best(current: PersonalBest | None, candidate: WorkoutSet | None, date: str) -> PersonalBest | None:
    if candidate is None:
        return current
    new = PersonalBest(weight=candidate.effective_weight, reps=candidate.reps, date=date)
    if current is None:
        return new

    new_key = (new.weight, new.reps)
    cur_key = (current.weight, current.reps)
    if new_key > cur_key:
        return new
    if new_key == cur_key:
        # keep the earliest achievement, even when records arrive out of order
        new_ts, cur_ts = parse_instant(date), parse_instant(current.date)
        if new_ts is not None and cur_ts is not None and new_ts < cur_ts:
            return new
    return current


def fold_workout(progress: UserProgress, workout: WorkoutRecord) -> UserProgress:
    """
    Fold one workout into a user's progress and return the new mapping.

    The input mapping is left untouched. Each exercise gets a history entry
    (even with no sets) and its personal best is replaced only by a set that
    strictly beats it.
    """
    if not workout.exercises:
        return progress

    out = dict(progress)
    for name, sets in workout.exercises.items():
        try:
            clamped = _usable_sets(name, workout.date, sets)
        except TypeError:
            log.warning("Skipping %r in workout %s: sets are not a list", name, workout.date)
            continue
        if clamped is None:
            log.warning("Skipping %r in workout %s: no usable sets", name, workout.date)
            continue

        current = out.get(name) or ExerciseProgress()
        entry = HistoryEntry(date=workout.date, sets=clamped)
        out[name] = ExerciseProgress(
            history=insert_chronologically(current.history, entry),
            personal_best=_updated_best(current.personal_best, best_set(clamped), workout.date),
        )
    return out


def fold_workouts(progress: UserProgress, workouts: Iterable[WorkoutRecord]) -> UserProgress:
    for w in workouts:
        progress = fold_workout(progress, w)
    return progress


def rebuild_progress(
    raw_records: Iterable[Any],
    warn: Callable[[str], None] | None = None,
) -> UserProgress:
    """
    Reconstruct progress from a stored workout log.

    Accepts WorkoutRecord objects or raw dicts; malformed raw records are
    skipped. Records are folded in timestamp order (stable for ties).
    """
    warn = warn or log.warning
    records = []
    for i, raw in enumerate(raw_records):
        if isinstance(raw, WorkoutRecord):
            record = raw
        else:
            try:
                record = parse_workout(raw, warn=warn)
            except MalformedRecord as exc:
                warn(f"Skipping stored workout #{i}: {exc}")
                continue
        if record.timestamp is None:
            warn(f"Skipping stored workout #{i}: unparseable date {record.date!r}")
            continue
        records.append(record)

    records.sort(key=lambda r: r.timestamp)
    return fold_workouts({}, records)


def summarize(progress: UserProgress) -> list[PersonalBestSummary]:
    return [
        PersonalBestSummary(exercise=name, weight=ex.personal_best.weight, reps=ex.personal_best.reps, date=ex.personal_best.date)
        for name, ex in progress.items()
        if ex.personal_best is not None
    ]


def summary_frame(progress: UserProgress) -> pd.DataFrame:
    rows = [
        {"exercise": s.exercise, "weight": s.weight, "reps": s.reps, "date": s.date}
        for s in summarize(progress)
    ]
    return pd.DataFrame(rows, columns=["exercise", "weight", "reps", "date"])


def recommend_next_set(progress: UserProgress, exercise: str, cfg: ProgressionConfig | None = None) -> dict:
    """
    Suggest the next working set: the last session's first set plus one
    increment. Exercises with no history start at cfg.starting_weight.
    """
    cfg = cfg or ProgressionConfig()
    ex = progress.get(exercise)
    if ex is None or not ex.history:
        return {"weight": cfg.starting_weight, "reps": cfg.default_reps}

    last = ex.history[-1]
    first = last.sets[0] if last.sets else None
    weight = (first.effective_weight if first else 0) + cfg.increment
    reps = first.reps if first and first.reps else cfg.default_reps
    return {"weight": weight, "reps": reps}


def _avg_volume(entry: HistoryEntry) -> float:
    if not entry.sets:
        return 0.0
    return sum(s.reps * s.effective_weight for s in entry.sets) / len(entry.sets)


def growth_trend(progress: UserProgress, exercise: str, cfg: ProgressionConfig | None = None) -> dict:
    """First vs last session average set volume for one exercise."""
    cfg = cfg or ProgressionConfig()
    ex = progress.get(exercise)
    if ex is None or len(ex.history) < 2:
        return {"trend": "No data", "change": 0.0, "method": "N/A"}

    first_avg = _avg_volume(ex.history[0])
    last_avg = _avg_volume(ex.history[-1])
    change = 0.0 if first_avg == 0 else round((last_avg - first_avg) / first_avg * 100, 1)

    if change > cfg.trend_threshold_pct:
        trend = "Improving"
    elif change < -cfg.trend_threshold_pct:
        trend = "Declining"
    else:
        trend = "No Change"

    return {"trend": trend, "change": change, "method": "Avg Volume (reps x weight)"}
