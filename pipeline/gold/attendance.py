# pipeline/gold/attendance.py
"""
Gold Layer - Daily attendance view.
Joins clock events with work schedules and users, then classifies each
employee-day as tardy, undertime and/or missing a logout.
"""

import logging
from typing import Optional

import pandas as pd

from pipeline.common.config import ClassificationPolicy
from pipeline.common.values import time_to_minutes
from pipeline.silver.attendance import LOGIN, LOGOUT

logger = logging.getLogger(__name__)

WORK_SCHEDULE = "Work"
DAY_KEY = ["user_id", "date"]

DAILY_COLUMNS = [
    "user_id", "date", "department", "position", "location", "source",
    "time_start", "time_end", "time_in", "time_out",
]


def _minutes(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series.map(time_to_minutes), errors="coerce")


def build_attendance_daily(
    attendance: pd.DataFrame,
    schedules: pd.DataFrame,
    users: pd.DataFrame,
    policy: Optional[ClassificationPolicy] = None
) -> pd.DataFrame:
    """
    Denormalize cleaned attendance into one row per employee and day.

    Args:
        attendance: Cleaned clock events (one IN and one OUT per user-day)
        schedules: Cleaned schedules, one row per user, date and type
        users: Cleaned user roster
        policy: Classification policy; ``retain_missing_logout`` keeps days
            without a logout event

    Returns:
        DataFrame with scheduled and actual start/end times per user-day
    """
    policy = policy or ClassificationPolicy()

    # Leave rows share the (user, date) key with work rows
    work = schedules.loc[schedules["type"] == WORK_SCHEDULE, DAY_KEY + ["time_start", "time_end"]]

    # Null keys never join
    work = work.dropna(subset=DAY_KEY)
    attendance = attendance.dropna(subset=DAY_KEY)

    logins = attendance.loc[
        attendance["case"] == LOGIN, DAY_KEY + ["location", "source", "time"]
    ].rename(columns={"time": "time_in"})
    logouts = attendance.loc[
        attendance["case"] == LOGOUT, DAY_KEY + ["time"]
    ].rename(columns={"time": "time_out"})

    df = logins.merge(work, on=DAY_KEY, how="inner")
    df = df.merge(logouts, on=DAY_KEY, how="left" if policy.retain_missing_logout else "inner")
    df = df.merge(users[["user_id", "department", "position"]], on="user_id", how="left")

    df = df[DAILY_COLUMNS].sort_values(DAY_KEY, kind="mergesort").reset_index(drop=True)
    logger.info(f"  attendance_daily: {len(df)} employee-days")
    return df


def classify_attendance(df: pd.DataFrame, policy: Optional[ClassificationPolicy] = None) -> pd.DataFrame:
    """
    Add signed minute deltas and tardy / undertime / missing-logout flags.

    - minutes_late = time_in - time_start
    - minutes_early = time_out - time_end (null without a logout)
    - tardy: tardy_min < minutes_late <= tardy_max
    - undertime: undertime_lower_bound <= minutes_early < 0
    """
    policy = policy or ClassificationPolicy()
    df = df.copy()

    df["minutes_late"] = _minutes(df["time_in"]) - _minutes(df["time_start"])
    df["minutes_early"] = _minutes(df["time_out"]) - _minutes(df["time_end"])

    late = df["minutes_late"]
    early = df["minutes_early"]
    df["is_tardy"] = (late > policy.tardy_min_minutes) & (late <= policy.tardy_max_minutes)
    df["is_undertime"] = (early >= policy.undertime_lower_bound_minutes) & (early < 0)
    df["is_missing_logout"] = df["time_out"].isna()

    logger.info(
        f"  Classified {len(df)} employee-days: "
        f"{int(df['is_tardy'].sum())} tardy, "
        f"{int(df['is_undertime'].sum())} undertime, "
        f"{int(df['is_missing_logout'].sum())} missing logout"
    )
    return df
