"""
Quality control checks shared by every case study.
- Row count, null, duplicate-key and range checks
- Referential integrity between cleaned tables
- Report checks (percentage totals, month coverage)
- Post-load row counts
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Sequence
from datetime import datetime

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class QCResult:
    """Single quality check result."""
    check_name: str
    table_name: str
    passed: bool
    message: str
    severity: str = "ERROR"  # ERROR, WARNING, INFO
    details: Optional[Dict[str, Any]] = None


@dataclass
class QCReport:
    """Collection of check results for one table group or layer."""
    layer: str = "qc"
    timestamp: datetime = field(default_factory=datetime.now)
    results: List[QCResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results if r.severity == "ERROR")

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.passed and r.severity == "ERROR")

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.results if not r.passed and r.severity == "WARNING")

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    def add(self, result: QCResult) -> QCResult:
        self.results.append(result)
        status = "PASS" if result.passed else "FAIL"
        if result.passed:
            log_fn = logger.info
        elif result.severity == "ERROR":
            log_fn = logger.error
        else:
            log_fn = logger.warning
        log_fn(f"[QC {status}] {result.table_name}: {result.check_name} - {result.message}")
        return result

    def summary(self) -> str:
        lines = [
            "=" * 60,
            f"QC REPORT ({self.layer}) - {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            "=" * 60,
            f"Total Checks: {len(self.results)}",
            f"Passed: {self.passed_count}",
            f"Failed: {self.failed_count}",
            f"Warnings: {self.warning_count}",
            "-" * 60,
        ]
        for r in self.results:
            status = "PASS" if r.passed else ("FAIL" if r.severity == "ERROR" else r.severity)
            lines.append(f"[{status}] {r.table_name}.{r.check_name}: {r.message}")
        lines.append("=" * 60)
        return "\n".join(lines)


# INDIVIDUAL CHECK FUNCTIONS

def check_row_count(df: pd.DataFrame, table_name: str, min_rows: int = 1) -> QCResult:
    """Check that DataFrame has minimum required rows."""
    row_count = len(df)
    return QCResult(
        check_name="row_count",
        table_name=table_name,
        passed=row_count >= min_rows,
        message=f"Row count: {row_count} (min: {min_rows})",
        details={"row_count": row_count, "min_required": min_rows}
    )


def check_nulls(
    df: pd.DataFrame,
    table_name: str,
    critical_columns: Sequence[str],
    severity: str = "ERROR"
) -> QCResult:
    """Check for null values in critical columns."""
    null_counts = {
        col: int(df[col].isna().sum())
        for col in critical_columns if col in df.columns
    }
    total_nulls = sum(null_counts.values())
    passed = total_nulls == 0

    return QCResult(
        check_name="null_check",
        table_name=table_name,
        passed=passed,
        message=f"Nulls in critical columns: {total_nulls}" + (f" ({null_counts})" if not passed else ""),
        severity=severity,
        details={"null_counts": null_counts}
    )


def check_duplicates(df: pd.DataFrame, table_name: str, key_columns: Sequence[str]) -> QCResult:
    """Check that no two rows share the same key."""
    existing_cols = [c for c in key_columns if c in df.columns]
    if not existing_cols:
        return QCResult(
            check_name="duplicate_check",
            table_name=table_name,
            passed=True,
            message="No key columns found to check",
            severity="INFO"
        )

    duplicate_count = int(df.duplicated(subset=existing_cols, keep=False).sum())
    return QCResult(
        check_name="duplicate_check",
        table_name=table_name,
        passed=duplicate_count == 0,
        message=f"Duplicates on {existing_cols}: {duplicate_count}",
        details={"duplicate_count": duplicate_count, "key_columns": existing_cols}
    )


def check_numeric_range(
    df: pd.DataFrame,
    table_name: str,
    column: str,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
    severity: str = "WARNING"
) -> QCResult:
    """Check that numeric values fall within expected range."""
    if column not in df.columns:
        return QCResult(
            check_name=f"range_check_{column}",
            table_name=table_name,
            passed=True,
            message=f"Column '{column}' not found",
            severity="INFO"
        )

    col_data = pd.to_numeric(df[column], errors="coerce")
    issues = []
    if min_val is not None:
        below_min = int((col_data < min_val).sum())
        if below_min:
            issues.append(f"{below_min} values below {min_val}")
    if max_val is not None:
        above_max = int((col_data > max_val).sum())
        if above_max:
            issues.append(f"{above_max} values above {max_val}")

    has_data = not col_data.isna().all()
    actual_min = col_data.min() if has_data else None
    actual_max = col_data.max() if has_data else None

    return QCResult(
        check_name=f"range_check_{column}",
        table_name=table_name,
        passed=not issues,
        message=f"Range [{actual_min}, {actual_max}]" + (f" - Issues: {', '.join(issues)}" if issues else " OK"),
        severity=severity,
        details={"min": actual_min, "max": actual_max, "expected_min": min_val, "expected_max": max_val}
    )


def check_referential_integrity(
    child_df: pd.DataFrame,
    parent_df: pd.DataFrame,
    child_table: str,
    parent_table: str,
    child_key: str,
    parent_key: str,
    severity: str = "WARNING"
) -> QCResult:
    """Check that all foreign keys in child table exist in parent table."""
    if child_key not in child_df.columns or parent_key not in parent_df.columns:
        return QCResult(
            check_name=f"ref_integrity_{child_key}",
            table_name=child_table,
            passed=True,
            message="Key columns not found for check",
            severity="INFO"
        )

    child_keys = set(child_df[child_key].dropna().unique())
    parent_keys = set(parent_df[parent_key].dropna().unique())
    orphans = child_keys - parent_keys

    return QCResult(
        check_name=f"ref_integrity_{child_key}",
        table_name=child_table,
        passed=not orphans,
        message=f"Orphan keys: {len(orphans)}" + (f" (missing in {parent_table})" if orphans else ""),
        severity=severity,
        details={"orphan_count": len(orphans), "sample_orphans": sorted(orphans, key=str)[:10]}
    )


def check_percentage_total(
    df: pd.DataFrame,
    table_name: str,
    column: str,
    partition: Optional[Sequence[str]] = None,
    tolerance_per_group: float = 0.01
) -> QCResult:
    """
    Check that rounded percentage-of-total values add up to 100.

    Rounding each group to two decimals can drift the total by at most
    ``tolerance_per_group`` per group.
    """
    if df.empty or column not in df.columns:
        return QCResult(
            check_name=f"percentage_total_{column}",
            table_name=table_name,
            passed=True,
            message="Nothing to check",
            severity="INFO"
        )

    groups = df.groupby(list(partition), dropna=False) if partition else [((), df)]
    bad = {}
    for key, part in groups:
        values = part[column].fillna(0)
        total = float(values.sum())
        if total == 0 and (values == 0).all():
            continue
        if abs(total - 100) > tolerance_per_group * len(part) + 1e-9:
            bad[str(key)] = round(total, 4)

    return QCResult(
        check_name=f"percentage_total_{column}",
        table_name=table_name,
        passed=not bad,
        message="Percentages sum to 100" if not bad else f"Percentages off in {len(bad)} partitions",
        details={"bad_partitions": bad}
    )


def check_month_coverage(df: pd.DataFrame, table_name: str, month_column: str = "month") -> QCResult:
    """Check that every month between the first and last one appears exactly once."""
    if df.empty or month_column not in df.columns:
        return QCResult(
            check_name="month_coverage",
            table_name=table_name,
            passed=True,
            message="Nothing to check",
            severity="INFO"
        )

    months = pd.to_datetime(df[month_column].astype(str)).dt.to_period("M")
    expected = pd.period_range(months.min(), months.max(), freq="M")
    missing = sorted(set(expected) - set(months))
    repeated = int(months.duplicated().sum())

    return QCResult(
        check_name="month_coverage",
        table_name=table_name,
        passed=not missing and repeated == 0,
        message=f"{len(expected)} months expected, {len(missing)} missing, {repeated} repeated",
        details={"missing": [str(m) for m in missing], "repeated": repeated}
    )


# AGGREGATE VALIDATION

def validate_post_load(engine, tables: Dict[str, Any]) -> QCReport:
    """
    Post-load validation: verify every written table holds rows.

    Args:
        engine: SQLAlchemy engine
        tables: Mapping of table name to model class / Table

    Returns:
        QCReport with one count check per table
    """
    from db.db_utils import count_rows

    report = QCReport(layer="post-load")
    logger.info("=" * 60)
    logger.info("POST-LOAD VALIDATION")
    logger.info("=" * 60)

    for table_name, model in tables.items():
        count = count_rows(model, engine)
        report.add(QCResult(
            check_name="post_load_count",
            table_name=table_name,
            passed=count > 0,
            message=f"Records in database: {count}",
            details={"db_row_count": count}
        ))

    logger.info(report.summary())
    return report
