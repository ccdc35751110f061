import logging
import math
import numbers
from dataclasses import dataclass

import pandas as pd

from analytics.progress import insert_chronologically
from utils.workout_schema import (
    RowingEntry,
    RowingLog,
    RowingProgress,
    RowingSession,
    parse_instant,
)

log = logging.getLogger(__name__)

SPLIT_METERS = 500


@dataclass(frozen=True)
class RowingPace:
    raw: float
    formatted: str


def format_pace(minutes_per_split: float) -> str:
    """2.2769 -> "2:17". Seconds are rounded, so 1:59.6 shows as 2:00."""
    total_seconds = round(minutes_per_split * 60)
    mins, secs = divmod(total_seconds, 60)
    return f"{mins}:{secs:02d}"


def _positive(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value) and value > 0


def pace_per_500(meters, minutes) -> RowingPace:
    """
    Minutes per 500 m. A missing or zero distance or time gives a zero pace,
    which never counts as a personal best.
    """
    if not _positive(meters) or not _positive(minutes):
        return RowingPace(raw=0.0, formatted="0:00")
    raw = minutes * SPLIT_METERS / meters
    return RowingPace(raw=raw, formatted=format_pace(raw))


def _updated_best(current: RowingEntry | None, entry: RowingEntry) -> RowingEntry | None:
    if entry.pace <= 0:
        return current
    if current is None or entry.pace < current.pace:
        return entry
    if entry.pace == current.pace:
        new_ts, cur_ts = parse_instant(entry.date), parse_instant(current.date)
        if new_ts is not None and cur_ts is not None and new_ts < cur_ts:
            return entry
    return current


def fold_rowing(rowing: RowingLog, session: RowingSession) -> RowingLog:
    """
    Fold one rowing session into the per-type log and return the new mapping.

    The input is left untouched. Every session goes into history; the
    personal best is the lowest pace, replaced only by a strictly faster one.
    """
    pace = pace_per_500(session.meters, session.minutes)
    if not _positive(session.meters) or not _positive(session.minutes):
        log.warning("Rowing %s on %s has no distance or time; recorded without a pace", session.type, session.date)

    entry = RowingEntry(date=session.date, meters=session.meters, minutes=session.minutes, pace=pace.raw)
    current = rowing.get(session.type) or RowingProgress()

    out = dict(rowing)
    out[session.type] = RowingProgress(
        history=insert_chronologically(current.history, entry),
        personal_best=_updated_best(current.personal_best, entry),
    )
    return out


def rowing_summary_frame(rowing: RowingLog) -> pd.DataFrame:
    """One row per rowing type: session count, latest and best pace."""
    cols = ["type", "sessions", "last_pace", "best_pace", "best_date"]
    rows = []
    for kind, prog in rowing.items():
        if not prog.history:
            continue
        last = prog.history[-1]
        best = prog.personal_best
        rows.append({
            "type": kind,
            "sessions": len(prog.history),
            "last_pace": format_pace(last.pace),
            "best_pace": format_pace(best.pace) if best else "",
            "best_date": best.date if best else "",
        })
    return pd.DataFrame(rows, columns=cols)
