import logging
from datetime import date

import streamlit as st

# ---- Local modules ----
from clients.local_store import LocalRecordStore
from clients.record_store import SyncingRecordStore
from clients.sync_queue import SyncQueue
from tabs import data_tab, progress_tab, session_tab
from utils.settings import Settings, load_settings
from utils.workout_plans import program_phase, program_week
from workout_log import WorkoutLog

log = logging.getLogger("workout_tracker")


# =========================================================
# Store wiring
# =========================================================
def build_remote_store(settings: Settings):
    """
    Firestore client if a project is configured, else None (local only).
    Initialization errors degrade to local-only mode.
    """
    if not settings.remote_enabled:
        return None
    try:
        from clients.firestore_client import FirestoreRecordStore

        return FirestoreRecordStore(
            project=settings.firestore_project,
            credentials_json=settings.firestore_credentials_json,
        )
    except Exception as exc:
        log.error("Firestore initialization failed, continuing offline: %s", exc)
        st.warning(f"Remote store unavailable ({exc}); workouts are kept on this device.")
        return None


@st.cache_resource(show_spinner=False)
def get_workout_log(_settings: Settings) -> WorkoutLog:
    store = SyncingRecordStore(
        local=LocalRecordStore(_settings.store_path),
        queue=SyncQueue(_settings.queue_path),
        remote=build_remote_store(_settings),
    )
    return WorkoutLog(store)


def replay_pending(workout_log: WorkoutLog) -> None:
    """Replay queued writes once per session, when the remote is back."""
    if st.session_state.get("sync_attempted"):
        return
    st.session_state["sync_attempted"] = True
    store = workout_log.store
    if not store.has_pending():
        return
    if not store.remote_online():
        st.toast(f"Offline: {store.pending_count()} writes waiting to sync.")
        return
    replayed = workout_log.sync()
    if replayed:
        st.toast(f"Synced {replayed} pending writes.")


# =========================================================
# UI
# =========================================================
def main():
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    workout_log = get_workout_log(settings)
    replay_pending(workout_log)

    st.title("Lift Tracker")

    with st.sidebar:
        user_id = st.selectbox("User", settings.users, key="user_id")
        week = program_week(settings.program_start, date.today(), settings.program_weeks)
        st.write(f"Week {week} of {settings.program_weeks}")
        st.caption(f"Phase {program_phase(week, settings.program_weeks)}")

    session, progress, data = st.tabs(["Workout", "Progress", "Data"])

    with session:
        session_tab.render(workout_log, user_id, unit=settings.weight_unit)

    with progress:
        progress_tab.render(workout_log, user_id, unit=settings.weight_unit)

    with data:
        data_tab.render(workout_log, user_id)


if __name__ == "__main__":
    main()
