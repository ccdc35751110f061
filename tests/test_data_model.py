"""Tests for daily/weekly training aggregation."""
from datetime import date

from conftest import make_record
from data_model import DAILY_COLS, aggregate_daily_training, weekly_consistency
from utils.workout_processing import records_to_sets_frame


def _daily(*records):
    return aggregate_daily_training(records_to_sets_frame(records))


class TestDailyTraining:
    def test_empty(self):
        out = aggregate_daily_training(None)
        assert list(out.columns) == DAILY_COLS
        assert out.empty

    def test_single_day(self):
        out = _daily(make_record("2025-01-06", Bench=[(100, 10), (100, 0)], Dips=[(None, 12)]))
        row = out.iloc[0]
        assert row["date"] == date(2025, 1, 6)
        assert row["sets_total"] == 3
        assert row["sets_working"] == 2
        assert row["volume"] == 1000.0
        assert row["sessions"] == 1
        assert row["exercises"] == 2

    def test_two_sessions_same_day(self):
        out = _daily(
            make_record("2025-01-06T07:00:00", Bench=[(100, 5)]),
            make_record("2025-01-06T18:00:00", Squat=[(150, 5)]),
            make_record("2025-01-08", Squat=[(155, 5)]),
        )
        assert out["date"].tolist() == [date(2025, 1, 6), date(2025, 1, 8)]
        assert out["sessions"].tolist() == [2, 1]
        assert out["volume"].tolist() == [1250.0, 775.0]


class TestWeeklyConsistency:
    def test_groups_by_monday(self):
        daily = _daily(
            make_record("2025-01-06", Bench=[(100, 5)]),   # Monday
            make_record("2025-01-08", Bench=[(100, 5)]),   # Wednesday
            make_record("2025-01-13", Bench=[(100, 5)]),   # next Monday
        )
        weekly = weekly_consistency(daily)
        assert weekly["week_start"].tolist() == [date(2025, 1, 6), date(2025, 1, 13)]
        assert weekly["training_days"].tolist() == [2, 1]

    def test_empty(self):
        assert weekly_consistency(None).empty
