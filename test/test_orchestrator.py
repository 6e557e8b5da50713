import os

import pandas as pd
import pytest

from db.db_utils import count_rows
from db.models_gold import AttendanceDaily
from db.models_silver import StagingHousingSale, StagingInvoice
from pipeline import orchestrator
from pipeline.common.exceptions import ValidationError
from pipeline.orchestrator import run_all, run_case_study

from conftest import INVOICES_CSV, write_csv


def test_attendance_end_to_end(settings, engine):
    results = run_case_study("attendance", settings=settings)

    assert results["bronze"]["raw_attendance"] == 12
    assert results["silver"]["counts"]["schedules"] == 6
    assert results["gold"] == {"status": "success", "attendance_daily": 5}
    assert results["post_load_validation"].passed
    assert count_rows(AttendanceDaily, engine) == 5
    assert results["report_validation"].passed
    assert results["report_validation"].passed_count > 0

    summary = results["reports"]["attendance_summary"].iloc[0]
    assert (summary["tardy"], summary["undertime"], summary["missing_logout"]) == (1, 1, 1)

    exported = sorted(os.path.basename(path) for path in results["exported"])
    assert exported == [
        "attendance_by_department.csv",
        "attendance_by_employee.csv",
        "attendance_by_month.csv",
        "attendance_by_weekday.csv",
        "attendance_summary.csv",
    ]
    month = pd.read_csv(os.path.join(settings.output_dir, "attendance", "attendance_by_month.csv"))
    assert month["days"].tolist() == [4, 0, 1]


def test_invoices_end_to_end(settings, engine):
    results = run_case_study("invoices", settings=settings)

    assert results["gold"]["status"] == "skipped"
    assert count_rows(StagingInvoice, engine) == 6
    assert results["silver"]["validation"][0].warning_count == 1
    assert results["reports"]["invoice_summary"].at[0, "top_country_revenue_loss"] == "France"
    assert len(results["exported"]) == 7
    assert results["report_validation"].passed
    assert results["report_validation"].layer == "Reports - invoices"


def test_housing_end_to_end(settings, engine):
    results = run_case_study("housing", settings=settings, export=False)

    assert count_rows(StagingHousingSale, engine) == 3
    assert results["reports"] == {}
    assert results["exported"] == []
    assert results["post_load_validation"].passed
    assert results["report_validation"].results == []


def test_staging_tables_are_rebuilt_on_rerun(settings, engine):
    run_case_study("invoices", settings=settings, export=False)
    run_case_study("invoices", settings=settings, export=False)

    assert count_rows(StagingInvoice, engine) == 6


def test_inconsistent_reports_are_flagged(settings, monkeypatch):
    shares = pd.DataFrame({"invoice_dispute_resolution": ["a", "b"], "percentage_disputes": [60.0, 60.0]})
    monkeypatch.setattr(orchestrator, "build_reports", lambda *args, **kwargs: {"dispute_outcomes": shares})

    results = run_case_study("invoices", settings=settings, export=False)

    assert not results["report_validation"].passed


@pytest.fixture
def empty_invoices(settings, tmp_path):
    data_dir = tmp_path / "empty"
    write_csv(data_dir / "invoices.csv", INVOICES_CSV.splitlines()[0] + "\n")
    return str(data_dir)


def test_strict_run_stops_on_failed_validation(settings, empty_invoices):
    with pytest.raises(ValidationError) as excinfo:
        run_case_study("invoices", data_dir=empty_invoices, settings=settings, skip_on_validation_fail=True)

    assert excinfo.value.details["validation_type"] == "silver"


def test_lenient_run_continues_past_failed_validation(settings, empty_invoices):
    results = run_case_study("invoices", data_dir=empty_invoices, settings=settings)

    assert results["reports"] == {}
    assert not results["post_load_validation"].passed


def test_run_all_reads_one_folder_per_case(settings):
    results = run_all(["invoices", "housing"], settings=settings, export=False)

    assert list(results) == ["invoices", "housing"]
    assert results["housing"]["bronze"] == {"raw_housing_sales": 4}


def test_main_runs_selected_case_studies(settings, monkeypatch):
    monkeypatch.setattr(orchestrator, "get_settings", lambda: settings)

    assert orchestrator.main(["housing", "--no-export"]) == 0
    assert not os.path.exists(os.path.join(settings.output_dir, "housing"))
