# tabs/data_tab.py
from datetime import date

import streamlit as st

from data_model import aggregate_daily_training, weekly_consistency
from utils.workout_processing import records_to_sets_frame
from workout_log import WorkoutLog


def render(workout_log: WorkoutLog, user_id: str):
    st.header("Data")

    st.subheader("Training log")
    records = workout_log.get_records(user_id, warn=st.warning)
    daily = aggregate_daily_training(records_to_sets_frame(records))
    if daily.empty:
        st.info("No data available")
    else:
        weekly = weekly_consistency(daily)
        st.bar_chart(weekly.set_index("week_start")[["training_days"]])
        st.dataframe(daily.sort_values("date", ascending=False), use_container_width=True)

    st.subheader("Export")
    st.download_button(
        "Download progress (JSON)",
        data=workout_log.export_json(user_id),
        file_name=f"progress_{user_id}_{date.today().isoformat()}.json",
        mime="application/json",
    )

    st.subheader("Sync")
    store = workout_log.store
    if not store.remote_enabled:
        st.caption("Remote store not configured; data is kept on this device.")
    else:
        pending = store.pending_count(user_id)
        st.write(f"Pending writes: {pending}")
        if st.button("Sync now"):
            replayed = workout_log.sync()
            if store.has_pending():
                st.warning(f"Synced {replayed} writes; remote still unavailable for the rest.")
            else:
                st.success(f"Synced {replayed} writes.")

    if st.button("Rebuild progress from workout log"):
        progress = workout_log.rebuild(user_id, warn=st.warning)
        st.success(f"Rebuilt progress for {len(progress)} exercises.")

    st.subheader("Delete data")
    confirm = st.checkbox(f"I understand this deletes every workout for {user_id}")
    if st.button("Delete all data", disabled=not confirm):
        if workout_log.wipe(user_id):
            st.success("All data deleted.")
        else:
            st.error("Could not delete data; check the logs.")
