"""
Workout log service: the seam between the Streamlit pages and the store.

Every call takes the user id explicitly; there is no "current user" here.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from analytics.charts import ChartSeries, build_series
from analytics.progress import fold_workout, rebuild_progress, summarize
from analytics.rowing import fold_rowing
from clients.record_store import SyncingRecordStore
from utils.errors import MalformedRecord
from utils.workout_processing import (
    DATE_CANDIDATES,
    parse_rowing_session,
    parse_workout,
    progress_from_dict,
    progress_to_dict,
    record_to_dict,
    rowing_from_dict,
    rowing_to_dict,
)
from utils.workout_schema import (
    PROGRESS_KEY,
    ROWING_KEY,
    TEMPLATES_KEY,
    WORKOUTS_KEY,
    RowingLog,
    RowingSession,
    UserProgress,
    WorkoutRecord,
)
from utils.workout_templates import WorkoutTemplate, parse_template, template_to_dict

log = logging.getLogger(__name__)

EXPORT_INDENT = 2


def _stamped(raw: Any) -> Any:
    """Add the current UTC time to a raw dict that carries no date."""
    if isinstance(raw, dict) and not any(k in raw for k in DATE_CANDIDATES):
        return {**raw, "date": datetime.now(timezone.utc).isoformat()}
    return raw


def _saved_message(what: str, queued: bool) -> str:
    if queued:
        return f"Saved on this device; your {what} will sync later."
    return f"{what[0].upper()}{what[1:]} saved."


@dataclass
class SaveResult:
    saved: bool
    queued: bool = False
    message: str = ""
    record: WorkoutRecord | RowingSession | None = None


class WorkoutLog:
    def __init__(self, store: SyncingRecordStore) -> None:
        self.store = store

    # ---------- reads ----------

    def get_workouts(self, user_id: str) -> list[dict]:
        raw = self.store.get(user_id, WORKOUTS_KEY, [])
        return raw if isinstance(raw, list) else []

    def get_progress(self, user_id: str, warn: Callable[[str], None] | None = None) -> UserProgress:
        return progress_from_dict(self.store.get(user_id, PROGRESS_KEY, {}), warn=warn)

    def get_rowing(self, user_id: str, warn: Callable[[str], None] | None = None) -> RowingLog:
        return rowing_from_dict(self.store.get(user_id, ROWING_KEY, {}), warn=warn)

    def get_records(self, user_id: str, warn: Callable[[str], None] | None = None) -> list[WorkoutRecord]:
        """Stored workouts that still parse, oldest first."""
        warn = warn or log.warning
        records = []
        for raw in self.get_workouts(user_id):
            try:
                record = parse_workout(raw, warn=warn)
            except MalformedRecord as exc:
                warn(f"Skipping stored workout: {exc}")
                continue
            records.append(record)
        records.sort(key=lambda r: r.timestamp)
        return records

    def exercise_series(self, user_id: str, exercise: str, window="all", now: datetime | None = None) -> ChartSeries:
        ex = self.get_progress(user_id).get(exercise)
        if ex is None:
            return ChartSeries()
        return build_series(ex.history, window, now=now)

    # ---------- writes ----------

    def save_workout(self, user_id: str, raw: Any, warn: Callable[[str], None] | None = None) -> SaveResult:
        """
        Validate, append and fold one completed workout.
        A raw workout without a date is stamped with the current UTC time.
        """
        warn = warn or log.warning
        try:
            record = parse_workout(_stamped(raw), warn=warn)
        except MalformedRecord as exc:
            log.warning("Rejected workout for %s: %s", user_id, exc)
            return SaveResult(saved=False, message=f"Workout not saved: {exc}")

        if not record.exercises:
            return SaveResult(saved=False, message="Workout has no exercises to save.")

        appended = self.store.append(user_id, WORKOUTS_KEY, record_to_dict(record))
        if not appended:
            return SaveResult(saved=False, message="Workout could not be stored.")

        progress = fold_workout(self.get_progress(user_id, warn=warn), record)
        self.store.set(user_id, PROGRESS_KEY, progress_to_dict(progress))

        queued = self.store.has_pending(user_id)
        log.info("Saved workout %s for %s (%d exercises, queued=%s)", record.date, user_id, len(record.exercises), queued)
        return SaveResult(saved=True, queued=queued, message=_saved_message("workout", queued), record=record)

    def save_rowing(self, user_id: str, raw: Any) -> SaveResult:
        """Validate one rowing session and fold it into the user's rowing log."""
        try:
            session = parse_rowing_session(_stamped(raw))
        except MalformedRecord as exc:
            log.warning("Rejected rowing session for %s: %s", user_id, exc)
            return SaveResult(saved=False, message=f"Rowing session not saved: {exc}")

        rowing = fold_rowing(self.get_rowing(user_id), session)
        if not self.store.set(user_id, ROWING_KEY, rowing_to_dict(rowing)):
            return SaveResult(saved=False, message="Rowing session could not be stored.")

        queued = self.store.has_pending(user_id)
        log.info("Saved %s rowing session %s for %s (queued=%s)", session.type, session.date, user_id, queued)
        return SaveResult(saved=True, queued=queued, message=_saved_message("rowing session", queued), record=session)

    def rebuild(self, user_id: str, warn: Callable[[str], None] | None = None) -> UserProgress:
        """Recompute progress from the workout log and store it."""
        progress = rebuild_progress(self.get_workouts(user_id), warn=warn)
        self.store.set(user_id, PROGRESS_KEY, progress_to_dict(progress))
        log.info("Rebuilt progress for %s: %d exercises", user_id, len(progress))
        return progress

    def wipe(self, user_id: str) -> bool:
        log.warning("Deleting all data for %s", user_id)
        return self.store.delete_user(user_id)

    def sync(self) -> int:
        return self.store.flush()

    # ---------- templates ----------

    def get_templates(self, user_id: str, warn: Callable[[str], None] | None = None) -> list[WorkoutTemplate]:
        warn = warn or log.warning
        raw = self.store.get(user_id, TEMPLATES_KEY, [])
        templates = []
        for item in raw if isinstance(raw, list) else []:
            try:
                templates.append(parse_template(item, warn=warn))
            except MalformedRecord as exc:
                warn(f"Skipping stored template: {exc}")
        return templates

    def get_template(self, user_id: str, template_id: str) -> WorkoutTemplate | None:
        for template in self.get_templates(user_id):
            if template.template_id == template_id:
                return template
        return None

    def save_template(self, user_id: str, raw: Any, warn: Callable[[str], None] | None = None) -> WorkoutTemplate | None:
        """Validate and store a template; None when it is rejected or cannot be stored."""
        try:
            template = parse_template(raw, warn=warn)
        except MalformedRecord as exc:
            log.warning("Rejected template for %s: %s", user_id, exc)
            if warn:
                warn(f"Template not saved: {exc}")
            return None
        if not self.store.append(user_id, TEMPLATES_KEY, template_to_dict(template)):
            return None
        log.info("Saved template %r (%s) for %s", template.title, template.template_id, user_id)
        return template

    # ---------- export ----------

    def export_document(self, user_id: str) -> dict:
        """Personal bests and progress; rowing is included only once logged."""
        progress = self.get_progress(user_id)
        doc = {
            "personalBests": [
                {"exercise": s.exercise, "weight": s.weight, "reps": s.reps, "date": s.date}
                for s in summarize(progress)
            ],
            "progress": progress_to_dict(progress),
        }
        rowing = self.get_rowing(user_id)
        if rowing:
            doc["rowing"] = rowing_to_dict(rowing)
        return doc

    def export_json(self, user_id: str) -> str:
        return json.dumps(self.export_document(user_id), indent=EXPORT_INDENT)
