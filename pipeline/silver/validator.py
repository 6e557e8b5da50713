# pipeline/silver/validator.py
"""
Silver Layer Validation - Quality checks for cleaned tables.
"""

import logging
from typing import Dict, List

import pandas as pd

from pipeline.common.quality_checks import (
    QCReport,
    QCResult,
    check_duplicates,
    check_nulls,
    check_numeric_range,
    check_referential_integrity,
    check_row_count,
)
from pipeline.silver import attendance, invoices

logger = logging.getLogger(__name__)


def validate_clean_table(
    df: pd.DataFrame,
    table_name: str,
    key_columns: List[str],
    required_columns: List[str]
) -> QCReport:
    """
    Validate one cleaned table.

    Checks:
    - Row count > 0
    - No nulls in required columns
    - Natural key is unique
    """
    report = QCReport(layer=f"Silver - {table_name}")
    logger.info(f"Validating staging {table_name}...")

    report.add(check_row_count(df, table_name))
    report.add(check_nulls(df, table_name, required_columns))
    report.add(check_duplicates(df, table_name, key_columns))
    return report


def validate_attendance_case(frames: Dict[str, pd.DataFrame]) -> List[QCReport]:
    reports = [
        validate_clean_table(frames[name], name, keys, ["user_id"])
        for name, keys in attendance.DEDUP_KEYS.items()
    ]

    integrity = QCReport(layer="Silver - Referential Integrity")
    logger.info("Validating staging referential integrity...")
    users = frames["users"]
    for child in ("attendance", "schedules", "payroll", "leave_requests"):
        integrity.add(check_referential_integrity(
            frames[child], users, child, "users", "user_id", "user_id"
        ))
    reports.append(integrity)
    return reports


def check_dispute_consistency(df: pd.DataFrame, table_name: str = "invoices") -> QCResult:
    """An invoice can only be lost in a dispute if it was disputed."""
    inconsistent = df[
        (df["invoice_status"] == invoices.STATUS_ACCEPTED)
        & (df["invoice_dispute_resolution"] == invoices.RESOLUTION_CUSTOMER)
    ]
    return QCResult(
        check_name="dispute_consistency",
        table_name=table_name,
        passed=inconsistent.empty,
        message=f"{len(inconsistent)} undisputed invoices marked as lost",
        severity="WARNING",
        details={"invoice_numbers": inconsistent["invoice_number"].head(10).tolist()},
    )


def validate_invoices_case(frames: Dict[str, pd.DataFrame]) -> List[QCReport]:
    df = frames["invoices"]
    report = validate_clean_table(df, "invoices", invoices.DEDUP_KEYS["invoices"], ["invoice_number"])
    report.add(check_numeric_range(df, "invoices", "invoice_amount", min_val=0))
    report.add(check_numeric_range(df, "invoices", "days_to_settle", min_val=0))
    report.add(check_dispute_consistency(df))
    return [report]


def validate_housing_case(frames: Dict[str, pd.DataFrame]) -> List[QCReport]:
    df = frames["housing_sales"]
    # Addresses are split after de-duplication, so uniqueness is checked on the record id
    report = validate_clean_table(df, "housing_sales", ["unique_id"], ["unique_id"])
    report.add(check_nulls(df, "housing_sales", ["property_address"], severity="WARNING"))
    report.add(check_numeric_range(df, "housing_sales", "sale_price", min_val=0))
    return [report]


VALIDATORS = {
    "attendance": validate_attendance_case,
    "invoices": validate_invoices_case,
    "housing": validate_housing_case,
}


def run_silver_validation(case_study: str, frames: Dict[str, pd.DataFrame]) -> List[QCReport]:
    """
    Run all Silver layer validations for a case study.

    Returns:
        List of QCReport objects
    """
    logger.info("=" * 60)
    logger.info(f"SILVER LAYER VALIDATION: {case_study}")
    logger.info("=" * 60)

    reports = VALIDATORS[case_study](frames)

    total_errors = sum(r.failed_count for r in reports)
    total_warnings = sum(r.warning_count for r in reports)

    logger.info("=" * 60)
    if total_errors > 0:
        logger.error(f"VALIDATION FAILED: {total_errors} errors, {total_warnings} warnings")
    else:
        logger.info(f"VALIDATION PASSED: {total_warnings} warnings")
    logger.info("=" * 60)

    return reports
