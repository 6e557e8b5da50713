# pipeline/gold/attendance_reports.py
"""
Attendance reports over the classified daily view.

Each report counts scheduled days, tardy days, undertime days and days
without a logout per dimension, with every count's share of the total.
"""

import logging
from typing import Dict

import pandas as pd

from pipeline.gold.reports import percent_of_total, require_columns, summarize, zero_filled_months

logger = logging.getLogger(__name__)

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

COUNT_COLUMNS = ["days", "tardy", "undertime", "missing_logout"]
FLAG_COLUMNS = {"tardy": "is_tardy", "undertime": "is_undertime", "missing_logout": "is_missing_logout"}
REQUIRED_COLUMNS = ["user_id", "date", "department"] + list(FLAG_COLUMNS.values())

METRICS = {
    "days": ("user_id", "size"),
    "tardy": ("is_tardy", "sum"),
    "undertime": ("is_undertime", "sum"),
    "missing_logout": ("is_missing_logout", "sum"),
    "avg_minutes_late": ("minutes_late", "mean"),
}


def _with_shares(df: pd.DataFrame) -> pd.DataFrame:
    for column in FLAG_COLUMNS:
        df = percent_of_total(df, column, f"{column}_pct")
    if "avg_minutes_late" in df.columns:
        df["avg_minutes_late"] = df["avg_minutes_late"].round(2)
    return df


def _counts(df: pd.DataFrame, by) -> pd.DataFrame:
    metrics = dict(METRICS)
    if "minutes_late" not in df.columns:
        metrics.pop("avg_minutes_late")
    report = summarize(df, by, metrics)
    for column in COUNT_COLUMNS:
        report[column] = report[column].astype(int)
    return report


def attendance_by_employee(daily: pd.DataFrame) -> pd.DataFrame:
    require_columns(daily, REQUIRED_COLUMNS + ["position"], "attendance_by_employee")
    report = _counts(daily, ["user_id", "department", "position"])
    return _with_shares(report).sort_values("user_id", kind="mergesort").reset_index(drop=True)


def attendance_by_department(daily: pd.DataFrame) -> pd.DataFrame:
    require_columns(daily, REQUIRED_COLUMNS, "attendance_by_department")
    return _with_shares(_counts(daily, "department"))


def attendance_by_weekday(daily: pd.DataFrame) -> pd.DataFrame:
    """Counts per day of the week, Monday first; every weekday is listed."""
    require_columns(daily, REQUIRED_COLUMNS, "attendance_by_weekday")
    df = daily.assign(weekday=pd.to_datetime(daily["date"]).dt.day_name())

    report = _counts(df, "weekday").set_index("weekday").reindex(WEEKDAYS)
    report[COUNT_COLUMNS] = report[COUNT_COLUMNS].fillna(0).astype(int)
    return _with_shares(report.rename_axis("weekday").reset_index())


def attendance_by_month(daily: pd.DataFrame) -> pd.DataFrame:
    """Counts per calendar month; months without scheduled days report 0."""
    require_columns(daily, REQUIRED_COLUMNS, "attendance_by_month")
    df = daily.assign(days=1, **{name: daily[flag].astype(int) for name, flag in FLAG_COLUMNS.items()})

    report = zero_filled_months(df, "date", COUNT_COLUMNS)
    report[COUNT_COLUMNS] = report[COUNT_COLUMNS].astype(int)
    return _with_shares(report)


def attendance_summary(daily: pd.DataFrame) -> pd.DataFrame:
    """Single row: totals and rates (percent of scheduled days)."""
    require_columns(daily, REQUIRED_COLUMNS, "attendance_summary")
    days = len(daily)
    row = {
        "employees": int(daily["user_id"].nunique()),
        "days": days,
        "first_date": pd.to_datetime(daily["date"]).min().date() if days else None,
        "last_date": pd.to_datetime(daily["date"]).max().date() if days else None,
    }
    for name, flag in FLAG_COLUMNS.items():
        count = int(daily[flag].sum())
        row[name] = count
        row[f"{name}_rate"] = round(count * 100 / days, 2) if days else 0.0
    return pd.DataFrame([row])


ATTENDANCE_REPORTS = {
    "employee": attendance_by_employee,
    "department": attendance_by_department,
    "weekday": attendance_by_weekday,
    "month": attendance_by_month,
    "summary": attendance_summary,
}


def build_attendance_reports(daily: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Every attendance report, keyed ``attendance_by_<dimension>`` / ``attendance_summary``."""
    reports = {}
    for dimension, builder in ATTENDANCE_REPORTS.items():
        name = "attendance_summary" if dimension == "summary" else f"attendance_by_{dimension}"
        reports[name] = builder(daily)
        logger.info(f"  {name}: {len(reports[name])} rows")
    return reports
