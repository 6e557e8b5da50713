# pipeline/silver/attendance.py
"""
Cleaning rules for the attendance case study.

Raw clock events, users, payroll, schedules and leave requests become the
staging relations used by the tardiness / undertime reports.
"""

import logging
from typing import Dict, Optional

import pandas as pd

from pipeline.common.config import CleaningPolicy
from pipeline.common.values import time_to_minutes
from pipeline.silver.utils import (
    NONE_SENTINEL,
    deduplicate,
    drop_missing_keys,
    explode_list_column,
    fill_defaults,
    title_case,
    to_date,
    to_time,
)

logger = logging.getLogger(__name__)

# Natural keys of the cleaned tables
EVENT_KEY = ["user_id", "date", "time", "timezone", "case"]
DEDUP_KEYS = {
    "attendance": ["user_id", "date", "case"],
    "users": ["user_id"],
    "payroll": ["user_id", "date_start", "date_end"],
    "schedules": ["user_id", "date", "type"],
    "leave_requests": ["user_id", "date", "type", "leave_type"],
}

LOGIN = "IN"
LOGOUT = "OUT"


def _policy(policy: Optional[CleaningPolicy]) -> CleaningPolicy:
    return policy or CleaningPolicy()


def _as_date(value):
    return pd.to_datetime(value).date()


def reduce_attendance_events(df: pd.DataFrame) -> pd.DataFrame:
    """
    Keep the earliest login and the latest logout per user and date.

    Location and source come from the event that was kept. Ties on time go
    to the lowest surrogate id. Events without a time are ignored.
    """
    df = df[df["time"].notna()].copy()
    df["_minutes"] = df["time"].map(time_to_minutes)

    logins = (
        df[df["case"] == LOGIN]
        .sort_values(["_minutes", "id"], ascending=[True, True], kind="mergesort")
        .drop_duplicates(subset=["user_id", "date"], keep="first")
    )
    logouts = (
        df[df["case"] == LOGOUT]
        .sort_values(["_minutes", "id"], ascending=[False, True], kind="mergesort")
        .drop_duplicates(subset=["user_id", "date"], keep="first")
    )

    reduced = pd.concat([logins, logouts], ignore_index=True).drop(columns="_minutes")
    return reduced.sort_values(["user_id", "date", "case"], kind="mergesort").reset_index(drop=True)


def clean_attendance(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """
    Clean raw clock events.

    - Null location becomes "None"; source is title-cased
    - Exact re-submissions are collapsed
    - Reduced to one first IN and one last OUT per user and date
    """
    policy = _policy(policy)
    df = drop_missing_keys(df, ["user_id"], policy.drop_missing_keys)
    df = fill_defaults(df, {"location": NONE_SENTINEL})

    df["case"] = df["case"].str.strip().str.upper()
    df["source"] = title_case(df["source"])
    df["date"] = to_date(df["date"])
    df["time"] = to_time(df["time"])

    df = deduplicate(df, EVENT_KEY)
    df = reduce_attendance_events(df)

    logger.info(f"Attendance cleaned: {len(df)} events")
    return df


def clean_users(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """
    Clean the user roster.

    Gender defaults to "Other", employment to "Full Time"; position,
    location and department default to "None".
    """
    df = df.copy()
    df["gender"] = title_case(df["gender"])
    df = fill_defaults(df, {
        "gender": "Other",
        "employment": "full_time",
        "position": NONE_SENTINEL,
        "location": NONE_SENTINEL,
        "department": NONE_SENTINEL,
    })
    df["employment"] = title_case(df["employment"], replace_underscores=True)
    for column in ("date_birth", "date_hire", "date_leave"):
        df[column] = to_date(df[column])

    df = deduplicate(df, DEDUP_KEYS["users"])
    df = df.sort_values("user_id", kind="mergesort").reset_index(drop=True)

    logger.info(f"Users cleaned: {len(df)} records")
    return df


def clean_payroll(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """Clean payroll runs: zero for missing amounts, default currency."""
    policy = _policy(policy)
    df = drop_missing_keys(df, ["user_id"], policy.drop_missing_keys)
    df = fill_defaults(df, {
        "ctc": 0,
        "net_pay": 0,
        "gross_pay": 0,
        "currency": policy.default_currency,
    })
    df["data_salary_basic_type"] = title_case(df["data_salary_basic_type"])
    df["status"] = title_case(df["status"])
    df["date_start"] = to_date(df["date_start"])
    df["date_end"] = to_date(df["date_end"])

    df = deduplicate(df, DEDUP_KEYS["payroll"])
    df = df.sort_values(["user_id", "date_start"], kind="mergesort").reset_index(drop=True)

    logger.info(f"Payroll cleaned: {len(df)} records")
    return df


def expand_schedules(df: pd.DataFrame) -> pd.DataFrame:
    """Fan schedule templates out to one row per user and date."""
    df = explode_list_column(df, "user_id", cast=int)
    return explode_list_column(df, "dates", cast=_as_date).rename(columns={"dates": "date"})


def clean_schedules(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """
    Clean schedule templates.

    Each template lists several users and several dates; both lists are
    fanned out before de-duplication.
    """
    policy = _policy(policy)
    df = df.copy()
    df["type"] = title_case(df["type"])
    df = fill_defaults(df, {
        "time_planned": 0,
        "break_time": 0,
        "leave_type": NONE_SENTINEL,
    })
    df["leave_type"] = title_case(df["leave_type"], replace_underscores=True)
    df["time_start"] = to_time(df["time_start"])
    df["time_end"] = to_time(df["time_end"])

    df = expand_schedules(df)
    df = drop_missing_keys(df, ["user_id"], policy.drop_missing_keys)
    df = deduplicate(df, DEDUP_KEYS["schedules"])
    df = df.sort_values(["user_id", "date"], kind="mergesort").reset_index(drop=True)

    logger.info(f"Schedules cleaned: {len(df)} user-days")
    return df


def clean_leave_requests(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """Clean leave requests, one row per requested date."""
    policy = _policy(policy)
    df = drop_missing_keys(df.copy(), ["user_id"], policy.drop_missing_keys)
    df["type"] = title_case(df["type"])
    df["leave_type"] = title_case(df["leave_type"], replace_underscores=True)
    df["status"] = title_case(df["status"])

    df = explode_list_column(df, "dates", cast=_as_date).rename(columns={"dates": "date"})
    df = deduplicate(df, DEDUP_KEYS["leave_requests"])
    df = df.sort_values(["user_id", "date"], kind="mergesort").reset_index(drop=True)

    logger.info(f"Leave requests cleaned: {len(df)} requested days")
    return df


def clean_attendance_case(
    frames: Dict[str, pd.DataFrame],
    policy: Optional[CleaningPolicy] = None
) -> Dict[str, pd.DataFrame]:
    """Apply every attendance cleaner to the raw frames (keyed by source)."""
    return {
        "attendance": clean_attendance(frames["attendance"], policy),
        "users": clean_users(frames["users"], policy),
        "payroll": clean_payroll(frames["payroll"], policy),
        "schedules": clean_schedules(frames["schedules"], policy),
        "leave_requests": clean_leave_requests(frames["leave_requests"], policy),
    }
