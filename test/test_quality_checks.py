import pandas as pd

from db.models_silver import StagingInvoice
from pipeline.common.quality_checks import (
    QCReport,
    QCResult,
    check_duplicates,
    check_month_coverage,
    check_nulls,
    check_numeric_range,
    check_percentage_total,
    check_referential_integrity,
    check_row_count,
    validate_post_load,
)
from db.db_utils import recreate_tables


def test_report_counts_by_severity():
    report = QCReport(layer="test")
    report.add(QCResult("a", "t", passed=True, message="ok"))
    report.add(QCResult("b", "t", passed=False, message="bad"))
    report.add(QCResult("c", "t", passed=False, message="meh", severity="WARNING"))

    assert not report.passed
    assert (report.passed_count, report.failed_count, report.warning_count) == (1, 1, 1)
    assert "[FAIL] t.b: bad" in report.summary()


def test_warnings_do_not_fail_a_report():
    report = QCReport()
    report.add(QCResult("c", "t", passed=False, message="meh", severity="WARNING"))
    assert report.passed


def test_basic_checks():
    df = pd.DataFrame({"id": [1, 2, 2], "value": [5, None, -1]})

    assert check_row_count(df, "t").passed
    assert not check_row_count(df.iloc[0:0], "t").passed
    assert check_nulls(df, "t", ["value"]).details["null_counts"] == {"value": 1}
    assert check_duplicates(df, "t", ["id"]).details["duplicate_count"] == 2
    assert not check_numeric_range(df, "t", "value", min_val=0).passed
    assert check_numeric_range(df, "t", "absent").severity == "INFO"


def test_referential_integrity():
    child = pd.DataFrame({"user_id": [1, 2, 3]})
    parent = pd.DataFrame({"user_id": [1, 2]})

    result = check_referential_integrity(child, parent, "attendance", "users", "user_id", "user_id")

    assert not result.passed
    assert result.details["sample_orphans"] == [3]


def test_percentage_total_detects_drift():
    good = pd.DataFrame({"pct": [33.33, 33.33, 33.34]})
    bad = pd.DataFrame({"pct": [50.0, 40.0]})

    assert check_percentage_total(good, "t", "pct").passed
    assert not check_percentage_total(bad, "t", "pct").passed


def test_month_coverage_detects_gaps():
    assert check_month_coverage(pd.DataFrame({"month": ["2022-01", "2022-02"]}), "t").passed

    result = check_month_coverage(pd.DataFrame({"month": ["2022-01", "2022-03"]}), "t")
    assert not result.passed
    assert result.details["missing"] == ["2022-02"]


def test_validate_post_load_flags_empty_tables(engine):
    recreate_tables(engine, [StagingInvoice])

    report = validate_post_load(engine, {"invoices": StagingInvoice})

    assert not report.passed
    assert report.results[0].details["db_row_count"] == 0
