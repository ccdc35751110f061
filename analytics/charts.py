import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

import pandas as pd

from utils.workout_schema import HistoryEntry, parse_instant

log = logging.getLogger(__name__)

WINDOW_CHOICES = ["all", "1", "3", "6", "12"]


@dataclass(frozen=True)
class TimeWindow:
    """Trailing chart window: months=None means all history."""
    months: int | None = None

    @classmethod
    def parse(cls, value) -> "TimeWindow":
        if isinstance(value, TimeWindow):
            return value
        if value is None or (isinstance(value, str) and value.strip().lower() == "all"):
            return cls()
        if isinstance(value, bool):
            raise ValueError(f"Invalid time window: {value!r}")
        try:
            months = int(str(value).strip().lower().removesuffix("m"))
        except ValueError:
            raise ValueError(f"Invalid time window: {value!r}") from None
        if months <= 0:
            raise ValueError(f"Time window must be a positive number of months, got {months}")
        return cls(months=months)

    @property
    def label(self) -> str:
        if self.months is None:
            return "All time"
        return f"Last {self.months} month" + ("s" if self.months > 1 else "")

    def cutoff(self, now: datetime) -> datetime | None:
        if self.months is None:
            return None
        # calendar months; DateOffset clamps to month end (Mar 31 -> Feb 28)
        return (pd.Timestamp(now) - pd.DateOffset(months=self.months)).to_pydatetime()


@dataclass
class ChartSeries:
    labels: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)


def _format_label(ts: datetime | None, entry: HistoryEntry) -> str:
    if ts is None:
        return str(entry.date)
    return f"{ts:%b} {ts.day}"


def _top_weight(entry: HistoryEntry) -> float | int:
    return max((s.effective_weight for s in entry.sets), default=0)


def _windowed_entries(history: Iterable[HistoryEntry], window, now: datetime | None) -> list[tuple[datetime | None, HistoryEntry]]:
    try:
        tw = TimeWindow.parse(window)
    except ValueError as exc:
        log.warning("%s; showing all history", exc)
        tw = TimeWindow()

    dated = [(parse_instant(entry.date), entry) for entry in history or []]
    undated = sum(1 for ts, _ in dated if ts is None)
    if undated:
        log.warning("%d history entries have unparseable dates", undated)

    # stable, so same-day entries keep insertion order; undated entries lead
    dated.sort(key=lambda pair: pair[0] or datetime.min)

    now = parse_instant(now) if now is not None else datetime.now(timezone.utc).replace(tzinfo=None)
    cutoff = tw.cutoff(now)
    if cutoff is not None:
        # an undated entry cannot be placed inside a window
        dated = [(ts, e) for ts, e in dated if ts is not None and ts >= cutoff]
    return dated


def build_series(history: Iterable[HistoryEntry], window="all", now: datetime | None = None) -> ChartSeries:
    """
    Labeled top-set weights for one exercise's history.

    One point per history entry (no same-day merging). Entries are sorted by
    date before windowing. Naive datetimes are treated as UTC. An entry whose
    date does not parse is kept for "all", first, labeled with its raw date.
    """
    dated = _windowed_entries(history, window, now)
    return ChartSeries(
        labels=[_format_label(ts, e) for ts, e in dated],
        values=[_top_weight(e) for _, e in dated],
    )


def series_frame(history: Iterable[HistoryEntry], window="all", now: datetime | None = None) -> pd.DataFrame:
    """Same points as build_series, as a DataFrame for st.line_chart."""
    dated = _windowed_entries(history, window, now)
    if not dated:
        return pd.DataFrame(columns=["date", "label", "top_weight"])

    df = pd.DataFrame({
        "date": pd.to_datetime([ts for ts, _ in dated], errors="coerce"),
        "label": [_format_label(ts, e) for ts, e in dated],
        "top_weight": [float(_top_weight(e)) for _, e in dated],
    })
    return df.reset_index(drop=True)
