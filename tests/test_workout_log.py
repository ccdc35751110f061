"""End-to-end tests for the workout log service."""
import json
from datetime import datetime

from workout_log import EXPORT_INDENT, WorkoutLog

BENCH_DAY = {"date": "2025-01-01", "exercises": {"Bench": {"sets": [{"weight": 100, "reps": 10}, {"weight": 95, "reps": 12}]}}}
BENCH_WEEK2 = {"date": "2025-01-08", "exercises": {"Bench": {"sets": [{"weight": 100, "reps": 10}]}}}
BENCH_WEEK3 = {"date": "2025-01-15", "exercises": {"Bench": {"sets": [{"weight": 105, "reps": 8}]}}}


class TestSaveWorkout:
    def test_save_updates_log_and_progress(self, workout_log):
        result = workout_log.save_workout("Dad", BENCH_DAY)
        assert result.saved and not result.queued
        assert workout_log.get_workouts("Dad") == [BENCH_DAY]
        pb = workout_log.get_progress("Dad")["Bench"].personal_best
        assert (pb.weight, pb.reps, pb.date) == (100, 10, "2025-01-01")

    def test_users_do_not_share_progress(self, workout_log):
        workout_log.save_workout("Dad", BENCH_DAY)
        assert workout_log.get_progress("Alex") == {}
        assert workout_log.get_workouts("Alex") == []

    def test_missing_date_is_stamped(self, workout_log):
        result = workout_log.save_workout("Dad", {"exercises": {"Dips": {"sets": [{"weight": None, "reps": 15}]}}})
        assert result.saved
        assert result.record.timestamp is not None

    def test_malformed_rejected(self, workout_log):
        result = workout_log.save_workout("Dad", {"date": "2025-01-01", "exercises": "bench"})
        assert not result.saved
        assert workout_log.get_workouts("Dad") == []

    def test_no_exercises_rejected(self, workout_log):
        result = workout_log.save_workout("Dad", {"date": "2025-01-01", "exercises": {}})
        assert not result.saved

    def test_offline_save_is_queued_then_synced(self, workout_log, remote):
        remote.online = False
        result = workout_log.save_workout("Dad", BENCH_DAY)
        assert result.saved and result.queued
        assert "sync later" in result.message
        assert "Bench" in workout_log.get_progress("Dad")

        remote.online = True
        assert workout_log.sync() == 2
        assert remote.docs["Dad"]["workouts"] == [BENCH_DAY]
        assert "Bench" in remote.docs["Dad"]["progress"]


class TestProgressQueries:
    def test_series_for_exercise(self, workout_log):
        for raw in (BENCH_DAY, BENCH_WEEK2, BENCH_WEEK3):
            workout_log.save_workout("Dad", raw)
        series = workout_log.exercise_series("Dad", "Bench", "all")
        assert series.values == [100, 100, 105]
        assert workout_log.exercise_series("Dad", "Squat").values == []

    def test_windowed_series(self, workout_log):
        for raw in (BENCH_DAY, BENCH_WEEK2, BENCH_WEEK3):
            workout_log.save_workout("Dad", raw)
        series = workout_log.exercise_series("Dad", "Bench", "1", now=datetime(2025, 2, 10))
        assert series.labels == ["Jan 15"]

    def test_rebuild_matches_incremental(self, workout_log):
        for raw in (BENCH_WEEK3, BENCH_DAY, BENCH_WEEK2):
            workout_log.save_workout("Dad", raw)
        incremental = workout_log.get_progress("Dad")
        assert workout_log.rebuild("Dad") == incremental
        assert [h.date for h in incremental["Bench"].history] == ["2025-01-01", "2025-01-08", "2025-01-15"]

    def test_records_sorted(self, workout_log):
        workout_log.save_workout("Dad", BENCH_WEEK2)
        workout_log.save_workout("Dad", BENCH_DAY)
        assert [r.date for r in workout_log.get_records("Dad")] == ["2025-01-01", "2025-01-08"]


class TestExportAndWipe:
    def test_export_document(self, workout_log):
        workout_log.save_workout("Dad", BENCH_DAY)
        doc = workout_log.export_document("Dad")
        assert doc["personalBests"] == [{"exercise": "Bench", "weight": 100, "reps": 10, "date": "2025-01-01"}]
        assert doc["progress"]["Bench"]["history"][0]["sets"][1] == {"weight": 95, "reps": 12}

    def test_export_json_two_space_indent(self, workout_log):
        workout_log.save_workout("Dad", BENCH_DAY)
        text = workout_log.export_json("Dad")
        assert EXPORT_INDENT == 2
        assert text == json.dumps(workout_log.export_document("Dad"), indent=2)
        assert text.splitlines()[1].startswith('  "personalBests"')

    def test_export_empty_user(self, workout_log):
        assert json.loads(workout_log.export_json("Nobody")) == {"personalBests": [], "progress": {}}

    def test_wipe(self, workout_log):
        workout_log.save_workout("Dad", BENCH_DAY)
        workout_log.save_workout("Alex", BENCH_WEEK2)
        assert workout_log.wipe("Dad")
        assert workout_log.get_progress("Dad") == {}
        assert "Bench" in workout_log.get_progress("Alex")


def test_local_only_log(local_only_store):
    log = WorkoutLog(local_only_store)
    result = log.save_workout("Dad", BENCH_DAY)
    assert result.saved and not result.queued
    assert result.message == "Workout saved."
    assert log.sync() == 0


class TestRowing:
    def test_save_and_read(self, workout_log):
        result = workout_log.save_rowing("Dad", {"type": "Sweat", "date": "2025-01-01", "meters": 2196, "minutes": 10})
        assert result.saved and result.message == "Rowing session saved."
        rowing = workout_log.get_rowing("Dad")
        assert rowing["Sweat"].personal_best.meters == 2196
        assert workout_log.get_rowing("Alex") == {}

    def test_date_stamped_and_bad_input_rejected(self, workout_log):
        assert workout_log.save_rowing("Dad", {"type": "Drive", "meters": 1000, "minutes": 4}).record.timestamp is not None
        result = workout_log.save_rowing("Dad", {"type": "Drive", "meters": "far", "minutes": 4})
        assert not result.saved
        assert len(workout_log.get_rowing("Dad")["Drive"].history) == 1

    def test_offline_rowing_is_queued(self, workout_log, remote):
        remote.online = False
        result = workout_log.save_rowing("Dad", {"type": "Sweat", "meters": 2000, "minutes": 9})
        assert result.queued and "rowing session will sync later" in result.message

    def test_export_includes_rowing_once_logged(self, workout_log):
        workout_log.save_workout("Dad", BENCH_DAY)
        assert "rowing" not in workout_log.export_document("Dad")
        workout_log.save_rowing("Dad", {"type": "Sweat", "date": "2025-01-02", "meters": 2000, "minutes": 10})
        assert workout_log.export_document("Dad")["rowing"]["Sweat"]["personalBest"]["pace"] == 2.5


class TestTemplates:
    def test_save_fetch_and_fetch_by_id(self, workout_log, remote):
        saved = workout_log.save_template("Dad", {
            "title": "Push", "blocks": [{"type": "single", "exercises": ["Push-up"]}],
        })
        assert saved is not None
        assert [t.title for t in workout_log.get_templates("Dad")] == ["Push"]
        assert workout_log.get_template("Dad", saved.template_id) == saved
        assert workout_log.get_template("Dad", "tpl_missing") is None
        assert remote.docs["Dad"]["templates"][0]["templateId"] == saved.template_id
        assert workout_log.get_templates("Alex") == []

    def test_invalid_template_rejected(self, workout_log):
        warnings = []
        assert workout_log.save_template("Dad", {"title": "", "blocks": []}, warn=warnings.append) is None
        assert workout_log.get_templates("Dad") == []
        assert warnings == ["Template not saved: Template has no title"]
