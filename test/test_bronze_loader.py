from datetime import date, time

import pytest

from db.db_utils import count_rows, read_table, recreate_tables
from db.models_bronze import RawInvoice, RawSchedule, RawUser
from pipeline.bronze.loader import load_csv_to_bronze, read_raw_csv, run_bronze_load
from pipeline.common.exceptions import ETLError, IngestionError, SchemaMismatchError

from conftest import INVOICES_CSV, write_csv

INVOICE_HEADER = INVOICES_CSV.splitlines()[0]
GOOD_INVOICE = "France,3448-OWJOT,1001,2022-01-01,2022-01-31,100,true,true,2022-02-10,40,10"
SCHEDULE_HEADER = "type,dates,time_start,time_end,timezone,time_planned,break_time,leave_type,user_id"


def invoices_file(tmp_path, *rows):
    return write_csv(tmp_path / "invoices.csv", "\n".join([INVOICE_HEADER, *rows]) + "\n")


def test_run_bronze_load_counts_every_row(engine, data_root):
    counts = run_bronze_load("attendance", data_dir=str(data_root / "attendance"), engine=engine)

    assert counts == {
        "raw_attendance": 12,
        "raw_users": 2,
        "raw_payroll": 2,
        "raw_schedules": 3,
        "raw_leave_requests": 1,
    }


def test_values_are_typed_and_lists_kept_verbatim(engine, data_root):
    run_bronze_load("attendance", data_dir=str(data_root / "attendance"), engine=engine)

    schedules = read_table(RawSchedule, engine)
    first = schedules.iloc[0]
    assert first["user_id"] == "{101,102}"
    assert first["dates"] == '["2022-01-03","2022-01-04"]'
    assert first["time_start"] == time(9, 0)
    assert first["source_file"] == "schedules.csv"
    assert schedules["id"].tolist() == [1, 2, 3]

    users = read_table(RawUser, engine)
    assert users.loc[0, "date_hire"] == date(2020, 1, 1)
    assert users["employment"].isna().tolist() == [False, True]


def test_run_bronze_load_is_repeatable(engine, data_root):
    run_bronze_load("invoices", data_dir=str(data_root / "invoices"), engine=engine)
    counts = run_bronze_load("invoices", data_dir=str(data_root / "invoices"), engine=engine)

    assert counts == {"raw_invoices": 7}
    assert count_rows(RawInvoice, engine) == 7


def test_header_must_match_columns(tmp_path):
    header = INVOICE_HEADER.replace(",days_late", ",days_overdue")
    path = write_csv(tmp_path / "invoices.csv", header + "\n" + GOOD_INVOICE + "\n")

    with pytest.raises(SchemaMismatchError) as excinfo:
        read_raw_csv(str(path), RawInvoice)

    assert excinfo.value.missing == ["days_late"]
    assert excinfo.value.unexpected == ["days_overdue"]


def test_column_order_does_not_matter(tmp_path):
    columns = INVOICE_HEADER.split(",")
    values = GOOD_INVOICE.split(",")
    path = write_csv(
        tmp_path / "invoices.csv",
        ",".join(reversed(columns)) + "\n" + ",".join(reversed(values)) + "\n",
    )

    df = read_raw_csv(str(path), RawInvoice)

    assert df.loc[0, "invoice_number"] == 1001
    assert bool(df.loc[0, "disputed"]) is True


@pytest.mark.parametrize("bad_row, column", [
    ("France,3448-OWJOT,1002,2022-01-01,2022-01-31,abc,true,true,2022-02-10,40,10", "invoice_amount"),
    ("France,3448-OWJOT,1002,2022-13-45,2022-01-31,100,true,true,2022-02-10,40,10", "invoice_generated_date"),
    ("France,3448-OWJOT,1002,2022-01-01,2022-01-31,100,maybe,true,2022-02-10,40,10", "disputed"),
    ("France,3448-OWJOT,,2022-01-01,2022-01-31,100,true,true,2022-02-10,40,10", "invoice_number"),
    ("France,3448-OWJOT-TOO-LONG-ID,1002,2022-01-01,2022-01-31,100,true,true,2022-02-10,40,10", "customer_id"),
])
def test_malformed_value_rejects_file(tmp_path, bad_row, column):
    path = invoices_file(tmp_path, GOOD_INVOICE, bad_row)

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawInvoice)

    assert excinfo.value.file_path == str(path)
    assert excinfo.value.bad_rows == [{"row": 2, "column": column, "value": excinfo.value.bad_rows[0]["value"]}]


def test_short_row_rejects_file(tmp_path):
    path = invoices_file(tmp_path, GOOD_INVOICE, "France,3448-OWJOT,1002")

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawInvoice)

    assert excinfo.value.bad_rows[0]["row"] == 2
    assert excinfo.value.bad_rows[0]["error"] == "wrong column count"


def test_extra_fields_reject_file(tmp_path):
    path = invoices_file(tmp_path, GOOD_INVOICE, GOOD_INVOICE.replace("1001", "1002") + ",surplus")

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawInvoice)

    assert excinfo.value.bad_rows == [{"row": 2, "column": None, "error": "wrong column count"}]


def test_extra_field_on_only_row_is_not_read_as_index(tmp_path):
    path = invoices_file(tmp_path, GOOD_INVOICE + ",surplus")

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawInvoice)

    assert excinfo.value.bad_rows == [{"row": 1, "column": None, "error": "wrong column count"}]


def test_bad_list_literal_rejects_file(tmp_path):
    path = write_csv(
        tmp_path / "schedules.csv",
        SCHEDULE_HEADER + '\nwork,"[""2022-01-03""]",09:00,18:00,+07,480,60,,{101\n',
    )

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawSchedule)

    assert excinfo.value.bad_rows[0]["column"] == "user_id"


@pytest.mark.parametrize("user_ids", ['"{101,abc}"', '"{101,1.5}"', "{x}"])
def test_non_integer_user_id_element_rejects_file(tmp_path, user_ids):
    path = write_csv(
        tmp_path / "schedules.csv",
        SCHEDULE_HEADER + '\nwork,"[""2022-01-03""]",09:00,18:00,+07,480,60,,' + user_ids + "\n",
    )

    with pytest.raises(IngestionError) as excinfo:
        read_raw_csv(str(path), RawSchedule)

    assert excinfo.value.bad_rows == [{"row": 1, "column": "user_id", "value": user_ids.strip('"')}]


def test_null_user_id_element_is_accepted(tmp_path):
    path = write_csv(
        tmp_path / "schedules.csv",
        SCHEDULE_HEADER + '\nwork,"[""2022-01-03""]",09:00,18:00,+07,480,60,,"{101,NULL}"\n',
    )

    assert read_raw_csv(str(path), RawSchedule).loc[0, "user_id"] == "{101,NULL}"


def test_failed_file_commits_nothing(engine, tmp_path):
    invoices_file(tmp_path, GOOD_INVOICE, GOOD_INVOICE.replace(",100,", ",lots,"))

    with pytest.raises(IngestionError):
        run_bronze_load("invoices", data_dir=str(tmp_path), engine=engine)

    assert count_rows(RawInvoice, engine) == 0


def test_load_rolls_back_with_the_transaction(engine, tmp_path):
    path = invoices_file(tmp_path, GOOD_INVOICE)
    recreate_tables(engine, [RawInvoice])

    with pytest.raises(RuntimeError):
        with engine.begin() as conn:
            assert load_csv_to_bronze(str(path), RawInvoice, conn) == 1
            raise RuntimeError("later statement failed")

    assert count_rows(RawInvoice, engine) == 0


def test_missing_file(engine, tmp_path):
    with pytest.raises(IngestionError) as excinfo:
        run_bronze_load("invoices", data_dir=str(tmp_path / "nowhere"), engine=engine)

    assert excinfo.value.file_path.endswith("invoices.csv")


def test_unknown_case_study(engine, tmp_path):
    with pytest.raises(ETLError):
        run_bronze_load("ecommerce", data_dir=str(tmp_path), engine=engine)
