"""Tests for weekday plans, the program calendar and settings."""
from datetime import date
from pathlib import Path

import pytest

import utils.secrets as secrets_mod
from utils.secrets import get_secret
from utils.settings import DEFAULT_PROGRAM_START, DEFAULT_USERS, load_settings
from utils.workout_plans import WORKOUT_PLANS, plan_for, program_phase, program_week


class TestPlans:
    def test_three_weekdays(self):
        assert [p.day for p in WORKOUT_PLANS.values()] == ["Monday", "Wednesday", "Friday"]

    def test_lookup_is_case_insensitive(self):
        assert plan_for(" Friday ").focus == "Back & Biceps"
        assert plan_for("sunday") is None

    def test_bodyweight_exercises(self):
        monday = plan_for("monday")
        assert [e.name for e in monday.exercises if e.bodyweight] == ["Dips", "Diamond Push-ups"]


class TestProgramWeek:
    @pytest.mark.parametrize("today, week", [
        (date(2025, 3, 1), 1),    # before start
        (date(2025, 3, 3), 1),
        (date(2025, 3, 9), 1),
        (date(2025, 3, 10), 2),
        (date(2025, 5, 19), 12),
        (date(2026, 1, 1), 12),   # clamped
    ])
    def test_week(self, today, week):
        assert program_week(date(2025, 3, 3), today) == week

    def test_phase(self):
        assert program_phase(6) == 1
        assert program_phase(7) == 2


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in ("DATA_DIR", "USERS", "PROGRAM_START", "PROGRAM_WEEKS", "FIRESTORE_PROJECT", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
        settings = load_settings()
        assert settings.users == DEFAULT_USERS
        assert settings.program_start == DEFAULT_PROGRAM_START
        assert settings.store_path == Path("data") / "records.json"
        assert not settings.remote_enabled

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        monkeypatch.setenv("USERS", "Sam, Jo ,")
        monkeypatch.setenv("PROGRAM_START", "2025-09-01")
        monkeypatch.setenv("PROGRAM_WEEKS", "not a number")
        monkeypatch.setenv("FIRESTORE_PROJECT", "lift-tracker")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = load_settings()
        assert settings.users == ["Sam", "Jo"]
        assert settings.program_start == date(2025, 9, 1)
        assert settings.program_weeks == 12
        assert settings.queue_path == tmp_path / "pending_writes.json"
        assert settings.remote_enabled
        assert settings.log_level == "DEBUG"


class _Secrets(dict):
    """dict with the bits of st.secrets that get_secret uses."""


class _MissingSecrets:
    def get(self, key, default=None):
        raise FileNotFoundError("no secrets.toml")

    def __contains__(self, key):
        raise FileNotFoundError("no secrets.toml")


class TestSecrets:
    def test_section_then_top_level_then_env(self, monkeypatch):
        monkeypatch.setattr(secrets_mod.st, "secrets", _Secrets(
            workout_tracker={"USERS": "Sam"}, WEIGHT_UNIT="kg",
        ))
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_secret("USERS") == "Sam"
        assert get_secret("WEIGHT_UNIT") == "kg"
        assert get_secret("LOG_LEVEL") == "debug"
        monkeypatch.delenv("DATA_DIR", raising=False)
        assert get_secret("DATA_DIR", "data") == "data"

    def test_missing_secrets_file_falls_back_to_env(self, monkeypatch):
        monkeypatch.setattr(secrets_mod.st, "secrets", _MissingSecrets())
        monkeypatch.setenv("USERS", "Jo")
        assert get_secret("USERS") == "Jo"

    def test_other_errors_propagate(self, monkeypatch):
        class _Broken:
            def get(self, key, default=None):
                raise RuntimeError("secrets backend bug")

        monkeypatch.setattr(secrets_mod.st, "secrets", _Broken())
        with pytest.raises(RuntimeError):
            get_secret("USERS")
