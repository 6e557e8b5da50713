"""
Gold Layer - Denormalized analytics tables and descriptive reports.
"""

from pipeline.gold.loader import (
    run_gold_load,
    build_reports,
    transform_attendance_daily,
)
from pipeline.gold.attendance import build_attendance_daily, classify_attendance
from pipeline.gold.reports import (
    percent_of_total,
    zero_filled_months,
    summarize,
    export_reports,
)
from pipeline.gold.validator import validate_reports

__all__ = [
    "run_gold_load",
    "build_reports",
    "transform_attendance_daily",
    "build_attendance_daily",
    "classify_attendance",
    "percent_of_total",
    "zero_filled_months",
    "summarize",
    "export_reports",
    "validate_reports",
]
