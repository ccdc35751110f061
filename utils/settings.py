from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from .secrets import get_secret

log = logging.getLogger(__name__)

DEFAULT_USERS = ["Dad", "Alex"]
DEFAULT_PROGRAM_START = date(2025, 3, 3)


@dataclass
class Settings:
    data_dir: Path = Path("data")
    users: list[str] = field(default_factory=lambda: DEFAULT_USERS.copy())
    program_start: date = DEFAULT_PROGRAM_START
    program_weeks: int = 12
    weight_unit: str = "lb"
    log_level: str = "INFO"
    firestore_project: str | None = None
    firestore_credentials_json: str | None = None

    @property
    def store_path(self) -> Path:
        return self.data_dir / "records.json"

    @property
    def queue_path(self) -> Path:
        return self.data_dir / "pending_writes.json"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.firestore_project)


def _parse_users(raw) -> list[str]:
    if raw is None:
        return DEFAULT_USERS.copy()
    if isinstance(raw, str):
        raw = raw.split(",")
    users = [str(u).strip() for u in raw if str(u).strip()]
    return users or DEFAULT_USERS.copy()


def _parse_date(raw) -> date:
    if raw in (None, ""):
        return DEFAULT_PROGRAM_START
    if isinstance(raw, date):
        return raw
    try:
        return datetime.fromisoformat(str(raw)).date()
    except ValueError:
        log.warning("Invalid PROGRAM_START %r; using %s", raw, DEFAULT_PROGRAM_START)
        return DEFAULT_PROGRAM_START


def load_settings() -> Settings:
    """Build Settings from Streamlit secrets / environment variables."""
    weeks_raw = get_secret("PROGRAM_WEEKS", 12)
    try:
        weeks = int(weeks_raw)
    except (TypeError, ValueError):
        log.warning("Invalid PROGRAM_WEEKS %r; using 12", weeks_raw)
        weeks = 12

    return Settings(
        data_dir=Path(get_secret("DATA_DIR", "data")),
        users=_parse_users(get_secret("USERS")),
        program_start=_parse_date(get_secret("PROGRAM_START")),
        program_weeks=max(weeks, 1),
        weight_unit=str(get_secret("WEIGHT_UNIT", "lb")),
        log_level=str(get_secret("LOG_LEVEL", "INFO")).upper(),
        firestore_project=get_secret("FIRESTORE_PROJECT"),
        firestore_credentials_json=get_secret("FIRESTORE_CREDENTIALS_JSON"),
    )
