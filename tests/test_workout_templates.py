"""Tests for the exercise library and user workout templates."""
import pytest

from utils.errors import MalformedRecord
from utils.exercise_library import (
    EXERCISE_LIBRARY,
    find_exercise,
    normalize_equipment,
    resolve_exercise_info,
    suggested_rep_number,
)
from utils.workout_templates import (
    TemplateBlock,
    build_blocks,
    parse_template,
    template_to_dict,
    template_to_plan,
)

LEG_DAY = {
    "templateId": "tpl_legs",
    "title": "Leg day",
    "notes": "Slow eccentrics",
    "blocks": [
        {"type": "single", "exercises": ["Goblet Squat"]},
        {"type": "superset", "exercises": ["Split Squat", "Push-up"]},
    ],
}


class TestExerciseLibrary:
    def test_lookup_is_case_insensitive(self):
        assert find_exercise("goblet squat").equipment == "Dumbbell"
        assert find_exercise("Deadlift") is None
        assert len(EXERCISE_LIBRARY) == 9

    @pytest.mark.parametrize("equipment, kind, name, expected", [
        ("db", "", "", "Dumbbell"),
        ("", "KB", "", "Kettlebell"),
        ("suspension", "", "", "TRX"),
        ("", "", "DB Shrugs", "Dumbbell"),
        ("", "", "TRX Rows", "TRX"),
        ("Dip Bar", "", "Dips", "Dip Bar"),
        ("", "", "", ""),
    ])
    def test_normalize_equipment(self, equipment, kind, name, expected):
        assert normalize_equipment(equipment, kind, name) == expected

    def test_resolve_fills_from_library(self):
        info = resolve_exercise_info({"name": "push-up"})
        assert info["equipment"] == "Bodyweight"
        assert info["notes"].startswith("Keep body in straight line")
        assert info["target_reps"] is None

    def test_resolve_keeps_given_values(self):
        info = resolve_exercise_info({"name": "Hammer Curls", "equipment": "db", "targetReps": "12"})
        assert (info["name"], info["equipment"], info["target_reps"]) == ("Hammer Curls", "Dumbbell", "12")
        assert resolve_exercise_info()["name"] == "Exercise"

    @pytest.mark.parametrize("target, reps", [("8-12", 8), ("15", 15), ("Max Reps", 8), (None, 8), (12, 12)])
    def test_suggested_rep_number(self, target, reps):
        assert suggested_rep_number(target) == reps


class TestTemplates:
    def test_parse_and_shape(self):
        template = parse_template(LEG_DAY)
        assert template.exercise_names == ["Goblet Squat", "Split Squat", "Push-up"]
        assert template_to_dict(template) == {**LEG_DAY, "version": 1}

    def test_missing_id_generated(self):
        template = parse_template({"title": "Quick", "blocks": [{"type": "single", "exercises": ["Dips"]}]})
        assert template.template_id.startswith("tpl_")

    @pytest.mark.parametrize("raw", [
        None,
        {"blocks": [{"type": "single", "exercises": ["Dips"]}]},
        {"title": "Empty", "blocks": []},
        {"title": "Bad", "blocks": [{"type": "circuit", "exercises": ["Dips"]}, {"type": "single", "exercises": []}]},
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedRecord):
            parse_template(raw)

    def test_bad_blocks_dropped(self):
        warnings = []
        template = parse_template({
            "title": "Mixed",
            "blocks": [{"type": "circuit", "exercises": ["Dips"]}, {"type": "single", "exercises": ["Dips", 5]}],
        }, warn=warnings.append)
        assert template.blocks == (TemplateBlock(type="single", exercises=("Dips",)),)
        assert len(warnings) == 1

    def test_build_blocks(self):
        assert build_blocks(["Dips", "Push-up"]) == (
            TemplateBlock("single", ("Dips",)), TemplateBlock("single", ("Push-up",)),
        )
        assert build_blocks(["Dips", "Push-up"], "superset") == (TemplateBlock("superset", ("Dips", "Push-up")),)
        assert build_blocks([]) == ()

    def test_to_plan(self):
        plan = template_to_plan(parse_template(LEG_DAY))
        assert (plan.day, plan.focus) == ("Leg day", "Slow eccentrics")
        assert [e.name for e in plan.exercises] == ["Goblet Squat", "Split Squat", "Push-up"]
        assert all(e.sets == 3 and e.rep_range == "8-12" for e in plan.exercises)
        push_up = plan.exercises[2]
        assert push_up.bodyweight
        assert push_up.description.startswith("Superset with Split Squat.")
        assert not plan.exercises[0].bodyweight
