# tabs/session_tab.py
from datetime import date

import streamlit as st

from analytics.progress import recommend_next_set
from analytics.rowing import pace_per_500
from utils.exercise_library import EXERCISE_LIBRARY, resolve_exercise_info, suggested_rep_number
from utils.workout_plans import WORKOUT_PLANS, WorkoutPlan, plan_for
from utils.workout_schema import ROWING_TYPES, ProgressionConfig
from utils.workout_templates import BLOCK_TYPES, build_blocks, template_to_plan
from workout_log import WorkoutLog

TEMPLATE_PREFIX = "tpl:"


def _session_options(workout_log: WorkoutLog, user_id: str) -> dict[str, WorkoutPlan]:
    """Built-in weekday plans first, then the user's templates."""
    options = dict(WORKOUT_PLANS)
    for template in workout_log.get_templates(user_id, warn=st.warning):
        options[TEMPLATE_PREFIX + template.template_id] = template_to_plan(template)
    return options


def _default_index(keys: list[str]) -> int:
    todays = plan_for(date.today().strftime("%A"))
    if todays is not None:
        for i, key in enumerate(keys):
            if WORKOUT_PLANS.get(key) == todays:
                return i
    return 0


def _set_inputs(form_key: str, plan: WorkoutPlan, unit: str, suggestions: dict) -> dict:
    """Number inputs for every planned set; returns the raw exercises mapping."""
    exercises = {}
    for ex in plan.exercises:
        info = resolve_exercise_info({"name": ex.name, "equipment": ex.equipment})
        equipment = f" · {info['equipment']}" if info["equipment"] else ""
        st.markdown(f"**{ex.name}** · {ex.sets} x {ex.rep_range}{equipment}")
        st.caption(ex.description or info["notes"])
        hint = suggestions.get(ex.name)
        if hint and not ex.bodyweight:
            st.caption(f"Suggested: {hint['weight']:g} {unit} x {hint['reps']}")

        sets = []
        for i in range(ex.sets):
            c_w, c_r = st.columns(2)
            with c_w:
                if ex.bodyweight:
                    weight = None
                    st.text(f"Set {i + 1}: bodyweight")
                else:
                    weight = st.number_input(
                        f"Set {i + 1} weight ({unit})",
                        min_value=0.0, max_value=2000.0, value=0.0, step=5.0,
                        key=f"{form_key}_{ex.name}_weight_{i}",
                    )
            with c_r:
                reps = st.number_input(
                    f"Set {i + 1} reps",
                    min_value=0, max_value=500, value=0, step=1,
                    key=f"{form_key}_{ex.name}_reps_{i}",
                )
            # untouched rows are not logged
            if reps > 0:
                sets.append({"weight": weight, "reps": int(reps)})
        if sets:
            exercises[ex.name] = {"sets": sets}
    return exercises


def _show_result(result):
    if not result.saved:
        st.error(result.message)
    elif result.queued:
        st.warning(result.message)
    else:
        st.success(result.message)


def _template_editor(workout_log: WorkoutLog, user_id: str):
    with st.expander("New template"):
        with st.form("template_editor", clear_on_submit=True):
            title = st.text_input("Title")
            notes = st.text_area("Notes")
            names = st.multiselect(
                "Exercises",
                [item.name for item in EXERCISE_LIBRARY],
                format_func=lambda n: f"{n} ({resolve_exercise_info({'name': n})['equipment']})",
            )
            block_type = st.radio("Blocks", BLOCK_TYPES, horizontal=True,
                                  format_func=lambda t: "One per exercise" if t == "single" else "One superset")
            submitted = st.form_submit_button("Save template")

        if submitted:
            template = workout_log.save_template(user_id, {
                "title": title,
                "notes": notes,
                "blocks": [
                    {"type": b.type, "exercises": list(b.exercises)}
                    for b in build_blocks(names, block_type)
                ],
            }, warn=st.warning)
            if template is not None:
                st.success(f"Template {template.title!r} saved.")


def _rowing_form(workout_log: WorkoutLog, user_id: str):
    with st.expander("Rowing"):
        with st.form("rowing_session"):
            kind = st.selectbox("Type", ROWING_TYPES)
            c_m, c_t = st.columns(2)
            with c_m:
                meters = st.number_input("Meters", min_value=0, max_value=100000, value=0, step=50)
            with c_t:
                minutes = st.number_input("Minutes", min_value=0.0, max_value=600.0, value=0.0, step=0.5)
            submitted = st.form_submit_button("Log rowing")

        if submitted:
            result = workout_log.save_rowing(user_id, {"type": kind, "meters": meters, "minutes": minutes})
            _show_result(result)
            if result.saved:
                st.caption(f"Pace: {pace_per_500(meters, minutes).formatted} /500m")


def render(workout_log: WorkoutLog, user_id: str, unit: str = "lb"):
    st.header("Workout")

    options = _session_options(workout_log, user_id)
    keys = list(options.keys())
    session_key = st.selectbox(
        "Session",
        keys,
        index=_default_index(keys),
        format_func=lambda k: f"{options[k].day} - {options[k].focus}",
    )
    plan = options[session_key]

    progress = workout_log.get_progress(user_id, warn=st.warning)
    suggestions = {
        ex.name: recommend_next_set(progress, ex.name, ProgressionConfig(default_reps=suggested_rep_number(ex.rep_range)))
        for ex in plan.exercises
    }

    form_key = session_key.replace(":", "_")
    with st.form(f"session_{form_key}"):
        exercises = _set_inputs(form_key, plan, unit, suggestions)
        submitted = st.form_submit_button("Complete workout")

    if submitted:
        if not exercises:
            st.info("Log at least one set before completing the workout.")
        else:
            _show_result(workout_log.save_workout(user_id, {"exercises": exercises}, warn=st.warning))

    _template_editor(workout_log, user_id)
    _rowing_form(workout_log, user_id)

    st.subheader("Last session")
    last = None
    for record in reversed(workout_log.get_records(user_id)):
        if any(ex.name in record.exercises for ex in plan.exercises):
            last = record
            break
    if last is None:
        st.info("No data available")
        return

    ts = last.timestamp
    st.write(f"Date: {ts:%Y-%m-%d}" if ts else f"Date: {last.date}")
    for name, sets in last.exercises.items():
        parts = [
            f"{s.weight:g} {unit} x {s.reps}" if s.weight else f"{s.reps} reps"
            for s in sets
        ]
        st.write(f"{name}: " + ", ".join(parts))
