# pipeline/gold/validator.py
"""
Gold Layer Validation - Quality checks for computed reports.
"""

import logging
from typing import Dict, List

import pandas as pd

from pipeline.common.quality_checks import QCReport, check_month_coverage, check_percentage_total

logger = logging.getLogger(__name__)

# Percent-of-total columns per report; each must add up to 100
REPORT_PERCENTAGE_COLUMNS: Dict[str, List[str]] = {
    "attendance_by_employee": ["tardy_pct", "undertime_pct", "missing_logout_pct"],
    "attendance_by_department": ["tardy_pct", "undertime_pct", "missing_logout_pct"],
    "attendance_by_weekday": ["tardy_pct", "undertime_pct", "missing_logout_pct"],
    "attendance_by_month": ["tardy_pct", "undertime_pct", "missing_logout_pct"],
    "dispute_outcomes": ["percentage_disputes", "percentage_revenue"],
    "lost_revenue_by_country": ["percentage_disputes_lost", "percentage_revenue_lost"],
}

# Zero-filled monthly series
MONTHLY_REPORTS = ["attendance_by_month"]


def validate_reports(case_study: str, reports: Dict[str, pd.DataFrame]) -> QCReport:
    """
    Run the report checks for a case study.

    Checks:
    - Percent-of-total columns sum to 100 (within rounding)
    - Monthly series have every month exactly once

    Reports missing from ``reports`` are skipped, so a case study without
    reports gives an empty, passing QCReport.
    """
    logger.info("=" * 60)
    logger.info(f"REPORT VALIDATION: {case_study}")
    logger.info("=" * 60)

    qc = QCReport(layer=f"Reports - {case_study}")
    for name, df in reports.items():
        for column in REPORT_PERCENTAGE_COLUMNS.get(name, []):
            qc.add(check_percentage_total(df, name, column))
        if name in MONTHLY_REPORTS:
            qc.add(check_month_coverage(df, name))

    logger.info("=" * 60)
    if not qc.passed:
        logger.error(f"VALIDATION FAILED: {qc.failed_count} errors, {qc.warning_count} warnings")
    else:
        logger.info(f"VALIDATION PASSED: {qc.passed_count} checks, {qc.warning_count} warnings")
    logger.info("=" * 60)
    return qc
