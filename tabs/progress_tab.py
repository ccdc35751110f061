# tabs/progress_tab.py
import streamlit as st

from analytics.charts import WINDOW_CHOICES, TimeWindow, series_frame
from analytics.progress import growth_trend, summary_frame
from analytics.rowing import rowing_summary_frame
from workout_log import WorkoutLog


def _rowing_section(workout_log: WorkoutLog, user_id: str):
    rowing = workout_log.get_rowing(user_id, warn=st.warning)
    if not rowing:
        return
    st.subheader("Rowing")
    st.dataframe(rowing_summary_frame(rowing), use_container_width=True)
    st.caption("Pace is minutes per 500 m; lower is better.")


def render(workout_log: WorkoutLog, user_id: str, unit: str = "lb"):
    st.header("Progress")

    progress = workout_log.get_progress(user_id, warn=st.warning)
    if not progress:
        st.info("No data available")
        _rowing_section(workout_log, user_id)
        return

    st.subheader("Personal bests")
    pbs = summary_frame(progress)
    if pbs.empty:
        st.info("No personal bests yet.")
    else:
        st.dataframe(pbs, use_container_width=True)

    st.subheader("Strength trend")
    c_ex, c_win = st.columns(2)
    with c_ex:
        exercise = st.selectbox("Exercise", list(progress.keys()))
    with c_win:
        window = st.selectbox(
            "Time window",
            WINDOW_CHOICES,
            format_func=lambda w: TimeWindow.parse(w).label,
        )

    history = progress[exercise].history
    chart_df = series_frame(history, window)
    if chart_df.empty:
        st.info("No data available")
    else:
        st.line_chart(chart_df.dropna(subset=["date"]).set_index("date")[["top_weight"]])
        st.caption(f"Top set weight per session ({unit})")

    trend = growth_trend(progress, exercise)
    if trend["trend"] == "No data":
        st.caption("Log at least two sessions to see a trend.")
    else:
        st.metric("Growth", trend["trend"], f"{trend['change']:+.1f}%")
        st.caption(trend["method"])

    with st.expander("History"):
        rows = [
            {
                "date": h.date,
                "sets": ", ".join(
                    f"{s.weight:g}x{s.reps}" if s.weight else f"{s.reps} reps" for s in h.sets
                ),
            }
            for h in history
        ]
        st.dataframe(rows, use_container_width=True)

    _rowing_section(workout_log, user_id)
