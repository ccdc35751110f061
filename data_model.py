import pandas as pd
import numpy as np

DAILY_COLS = [
    "date",
    "sets_total",
    "sets_working",
    "volume",
    "sessions",
    "exercises",
]


def aggregate_daily_training(sets_df: pd.DataFrame) -> pd.DataFrame:
    """
    Aggregate flattened workout sets into daily training metrics.
    Expects the frame from records_to_sets_frame: date, exercise_name,
    weight, reps, workout_date.
    """

    if sets_df is None or sets_df.empty:
        return pd.DataFrame(columns=DAILY_COLS)

    df = sets_df.copy()

    # 1) Pure date column
    df["date"] = pd.to_datetime(df["date"]).dt.date

    # 2) A set with zero reps was logged but not performed
    df["reps"] = pd.to_numeric(df["reps"], errors="coerce").fillna(0).clip(lower=0)
    df["weight"] = pd.to_numeric(df["weight"], errors="coerce").fillna(0.0).clip(lower=0)
    df["is_working_set"] = df["reps"] > 0

    # 3) Volume per set, working sets only
    df["set_volume"] = np.where(
        df["is_working_set"],
        df["weight"] * df["reps"],
        0.0,
    )

    # 4) Sessions per day: distinct workout timestamps
    session_col = "workout_date" if "workout_date" in df.columns else None
    if session_col:
        sessions_per_day = df.groupby("date")[session_col].nunique().rename("sessions")
    else:
        sessions_per_day = df.groupby("date").size().rename("sessions").clip(upper=1)

    # 5) Aggregate per date
    grouped = df.groupby("date").agg(
        sets_total=("reps", "count"),
        sets_working=("is_working_set", "sum"),
        volume=("set_volume", "sum"),
        exercises=("exercise_name", "nunique"),
    ).reset_index()

    grouped = grouped.merge(sessions_per_day.reset_index(), on="date", how="left")
    grouped["sets_working"] = grouped["sets_working"].astype(int)

    return grouped[DAILY_COLS].sort_values("date").reset_index(drop=True)


def weekly_consistency(daily_df: pd.DataFrame) -> pd.DataFrame:
    """Training days and volume per Monday-started week."""
    if daily_df is None or daily_df.empty:
        return pd.DataFrame(columns=["week_start", "training_days", "volume"])

    df = daily_df.copy()
    df["date"] = pd.to_datetime(df["date"])
    df["week_start"] = (df["date"] - pd.to_timedelta(df["date"].dt.weekday, unit="D")).dt.date

    out = (
        df.groupby("week_start")
        .agg(training_days=("date", "nunique"), volume=("volume", "sum"))
        .reset_index()
        .sort_values("week_start")
        .reset_index(drop=True)
    )
    return out
