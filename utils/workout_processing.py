# utils/workout_processing.py
import logging
import math
from typing import Any, Callable, Iterable, Mapping

import pandas as pd

from .errors import MalformedRecord
from .workout_schema import (
    SET_FRAME_COLS,
    ExerciseProgress,
    HistoryEntry,
    PersonalBest,
    RowingEntry,
    RowingLog,
    RowingProgress,
    RowingSession,
    UserProgress,
    WorkoutRecord,
    WorkoutSet,
    parse_instant,
)

log = logging.getLogger(__name__)

DATE_CANDIDATES = ["date", "timestamp", "completedAt", "completed_at", "start_time"]
WEIGHT_CANDIDATES = ["weight", "weight_kg", "weight_lb", "load"]
REPS_CANDIDATES = ["reps", "repetitions", "rep_count"]


def _pick_first(raw: Mapping, candidates: Iterable[str]) -> str | None:
    for c in candidates:
        if c in raw:
            return c
    return None


def _to_number(value: Any) -> float | int | None:
    """Numbers pass through, numeric strings are parsed, anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def parse_set(raw: Any) -> WorkoutSet | None:
    """
    Return a clamped WorkoutSet, or None when the set is unusable.
    A missing/null weight is a bodyweight set; a weight that is present but
    non-numeric makes the whole set unusable, as does non-numeric reps.
    """
    if not isinstance(raw, Mapping):
        return None

    w_key = _pick_first(raw, WEIGHT_CANDIDATES)
    r_key = _pick_first(raw, REPS_CANDIDATES)

    weight = None
    if w_key is not None and raw[w_key] is not None and raw[w_key] != "":
        weight = _to_number(raw[w_key])
        if weight is None:
            return None

    reps = _to_number(raw[r_key]) if r_key is not None else None
    if reps is None:
        return None

    return WorkoutSet(weight=weight, reps=int(reps)).clamped()


def _parse_exercise(name: str, raw: Any, warn: Callable[[str], None]) -> tuple[WorkoutSet, ...] | None:
    # stored as {sets: [...]}; a bare list of sets is also accepted
    raw_sets = raw.get("sets") if isinstance(raw, Mapping) else raw
    if not isinstance(raw_sets, list):
        warn(f"Skipping exercise {name!r}: no list of sets.")
        return None

    sets = []
    for i, raw_set in enumerate(raw_sets):
        parsed = parse_set(raw_set)
        if parsed is None:
            warn(f"Skipping set {i + 1} of {name!r}: non-numeric weight or reps ({raw_set!r}).")
            continue
        sets.append(parsed)
    return tuple(sets)


def parse_workout(raw: Any, warn: Callable[[str], None] | None = None) -> WorkoutRecord:
    """
    Validate a raw workout dict at the store boundary.

    Raises MalformedRecord when there is no usable date or no exercises
    mapping. Bad exercises and bad sets inside an otherwise valid record are
    dropped (and reported through warn) so one typo does not lose a workout.
    """
    warn = warn or log.warning
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"Workout must be a mapping, got {type(raw).__name__}")

    date_key = _pick_first(raw, DATE_CANDIDATES)
    date_raw = raw.get(date_key) if date_key else None
    if parse_instant(date_raw) is None:
        raise MalformedRecord(f"Workout has no parseable date: {date_raw!r}")
    date = date_raw if isinstance(date_raw, str) else date_raw.isoformat()

    exercises_raw = raw.get("exercises")
    if not isinstance(exercises_raw, Mapping):
        raise MalformedRecord("Workout has no 'exercises' mapping")

    exercises = {}
    for name, ex_raw in exercises_raw.items():
        if not isinstance(name, str) or not name.strip():
            warn(f"Skipping exercise with invalid name {name!r}.")
            continue
        sets = _parse_exercise(name, ex_raw, warn)
        if sets is None:
            continue
        key = name.strip()
        if key in exercises:
            warn(f"Merging sets of {name!r} into {key!r}.")
            sets = exercises[key] + sets
        exercises[key] = sets

    return WorkoutRecord(date=date, exercises=exercises)


# ---------------------------------------------------------------------------
# JSON shapes
# ---------------------------------------------------------------------------
def set_to_dict(s: WorkoutSet) -> dict:
    return {"weight": s.weight, "reps": s.reps}


def record_to_dict(record: WorkoutRecord) -> dict:
    return {
        "date": record.date,
        "exercises": {
            name: {"sets": [set_to_dict(s) for s in sets]}
            for name, sets in record.exercises.items()
        },
    }


def progress_to_dict(progress: UserProgress) -> dict:
    out = {}
    for name, ex in progress.items():
        item = {
            "history": [
                {"date": h.date, "sets": [set_to_dict(s) for s in h.sets]}
                for h in ex.history
            ],
        }
        if ex.personal_best is not None:
            pb = ex.personal_best
            item["personalBest"] = {"weight": pb.weight, "reps": pb.reps, "date": pb.date}
        out[name] = item
    return out


def progress_from_dict(raw: Any, warn: Callable[[str], None] | None = None) -> UserProgress:
    """Inverse of progress_to_dict. Unreadable exercises are dropped."""
    warn = warn or log.warning
    if not isinstance(raw, Mapping):
        return {}

    progress: UserProgress = {}
    for name, ex_raw in raw.items():
        if not isinstance(ex_raw, Mapping):
            warn(f"Dropping unreadable progress for {name!r}.")
            continue

        history = []
        for h in ex_raw.get("history") or []:
            if not isinstance(h, Mapping) or parse_instant(h.get("date")) is None:
                warn(f"Dropping history entry without a date for {name!r}.")
                continue
            sets = tuple(
                s for s in (parse_set(x) for x in h.get("sets") or []) if s is not None
            )
            history.append(HistoryEntry(date=h["date"], sets=sets))

        pb = None
        pb_raw = ex_raw.get("personalBest")
        if isinstance(pb_raw, Mapping) and pb_raw:
            weight = _to_number(pb_raw.get("weight"))
            reps = _to_number(pb_raw.get("reps"))
            if reps is not None and parse_instant(pb_raw.get("date")) is not None:
                pb = PersonalBest(weight=weight or 0, reps=int(reps), date=pb_raw["date"])

        progress[name] = ExerciseProgress(history=tuple(history), personal_best=pb)
    return progress


# ---------------------------------------------------------------------------
# Tabular views
# ---------------------------------------------------------------------------
def records_to_sets_frame(records: Iterable[WorkoutRecord]) -> pd.DataFrame:
    """
    Flatten records to one row per set with SET_FRAME_COLS.
    Bodyweight sets get weight 0.
    """
    rows = []
    for record in records:
        ts = record.timestamp
        if ts is None:
            continue
        for name, sets in record.exercises.items():
            for i, s in enumerate(sets):
                rows.append({
                    "date_dt": ts,
                    "exercise_name": name,
                    "weight": float(s.effective_weight),
                    "reps": int(s.reps),
                    "set_index": i,
                    "workout_date": record.date,
                })

    if not rows:
        return pd.DataFrame(columns=SET_FRAME_COLS + ["workout_date"])

    df = pd.DataFrame(rows)
    df["date_dt"] = pd.to_datetime(df["date_dt"])
    df["date"] = df["date_dt"].dt.date
    return df[SET_FRAME_COLS + ["workout_date"]]


# ---------------------------------------------------------------------------
# Rowing
# ---------------------------------------------------------------------------
def parse_rowing_session(raw: Any) -> RowingSession:
    """
    Validate a raw rowing session ({type, date, meters, minutes}).
    Raises MalformedRecord on a missing type, an unusable date or a
    distance/time that is not a non-negative number.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"Rowing session must be a mapping, got {type(raw).__name__}")

    kind = raw.get("type")
    if not isinstance(kind, str) or not kind.strip():
        raise MalformedRecord("Rowing session has no type")

    date_key = _pick_first(raw, DATE_CANDIDATES)
    date_raw = raw.get(date_key) if date_key else None
    if parse_instant(date_raw) is None:
        raise MalformedRecord(f"Rowing session has no parseable date: {date_raw!r}")
    date = date_raw if isinstance(date_raw, str) else date_raw.isoformat()

    values = {}
    for field_name in ("meters", "minutes"):
        value = _to_number(raw.get(field_name))
        if value is None or value < 0:
            raise MalformedRecord(f"Rowing session {field_name} must be a non-negative number: {raw.get(field_name)!r}")
        values[field_name] = value

    return RowingSession(type=kind.strip(), date=date, **values)


def _rowing_entry_to_dict(entry: RowingEntry) -> dict:
    return {"date": entry.date, "meters": entry.meters, "minutes": entry.minutes, "pace": entry.pace}


def _rowing_entry_from_dict(raw: Any) -> RowingEntry | None:
    if not isinstance(raw, Mapping) or parse_instant(raw.get("date")) is None:
        return None
    numbers = [_to_number(raw.get(k)) for k in ("meters", "minutes", "pace")]
    if any(n is None for n in numbers):
        return None
    meters, minutes, pace = numbers
    return RowingEntry(date=raw["date"], meters=meters, minutes=minutes, pace=float(pace))


def rowing_to_dict(rowing: RowingLog) -> dict:
    out = {}
    for kind, prog in rowing.items():
        item = {"history": [_rowing_entry_to_dict(e) for e in prog.history]}
        if prog.personal_best is not None:
            item["personalBest"] = _rowing_entry_to_dict(prog.personal_best)
        out[kind] = item
    return out


def rowing_from_dict(raw: Any, warn: Callable[[str], None] | None = None) -> RowingLog:
    """Inverse of rowing_to_dict. Unreadable entries are dropped."""
    warn = warn or log.warning
    if not isinstance(raw, Mapping):
        return {}

    rowing: RowingLog = {}
    for kind, prog_raw in raw.items():
        if not isinstance(prog_raw, Mapping):
            warn(f"Dropping unreadable rowing progress for {kind!r}.")
            continue
        history = []
        for h in prog_raw.get("history") or []:
            entry = _rowing_entry_from_dict(h)
            if entry is None:
                warn(f"Dropping unreadable rowing entry for {kind!r}.")
                continue
            history.append(entry)
        rowing[kind] = RowingProgress(
            history=tuple(history),
            personal_best=_rowing_entry_from_dict(prog_raw.get("personalBest")),
        )
    return rowing
