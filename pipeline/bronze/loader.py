# pipeline/bronze/loader.py

import csv
import os
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import BigInteger, Boolean, Date, DateTime, Float, Integer, Numeric, String, Time
from sqlalchemy.engine import Engine

from db.db_utils import get_engine, insert_dataframe, recreate_tables
from db.models_bronze import business_columns
from pipeline.catalog import get_case_study
from pipeline.common.config import get_settings
from pipeline.common.exceptions import IngestionError, SchemaMismatchError
from pipeline.common.values import parse_list_literal, parse_time

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "t", "1", "yes", "y"}
FALSE_VALUES = {"false", "f", "0", "no", "n"}

# Element parsers for list columns declaring Column.info["element"]
ELEMENT_PARSERS = {"bigint": int}


# VALUE PARSING

def _parse_series(series: pd.Series, column) -> Tuple[pd.Series, pd.Series]:
    """
    Parse one CSV column to the table column's type.

    Returns the parsed values and a mask of malformed cells.
    Empty cells are NULL and never malformed.
    """
    present = series.notna()
    col_type = column.type
    list_format = column.info.get("format")

    if list_format in ("json_list", "pg_array"):
        element = ELEMENT_PARSERS.get(column.info.get("element"))

        def _valid(value):
            try:
                items = parse_list_literal(value)
                if element is not None:
                    for item in items:
                        if item is not None:
                            element(item)
                return True
            except (ValueError, TypeError):
                return False
        bad = present & ~series.map(_valid, na_action="ignore").fillna(True).astype(bool)
        return series, bad

    if isinstance(col_type, (Integer, BigInteger)):
        parsed = pd.to_numeric(series, errors="coerce")
        bad = present & (parsed.isna() | (parsed % 1 != 0))
        values = parsed.where(~bad).astype("Int64").astype(object)
        return values.where(values.notna(), None), bad

    if isinstance(col_type, (Numeric, Float)):
        parsed = pd.to_numeric(series, errors="coerce")
        bad = present & parsed.isna()
        return parsed, bad

    if isinstance(col_type, Boolean):
        lowered = series.str.lower()
        parsed = lowered.map(
            lambda v: True if v in TRUE_VALUES else (False if v in FALSE_VALUES else None),
            na_action="ignore",
        )
        bad = present & parsed.isna()
        return parsed, bad

    if isinstance(col_type, Time):
        def _time(value):
            try:
                return parse_time(value)
            except ValueError:
                return None
        parsed = series.map(_time, na_action="ignore")
        bad = present & parsed.isna()
        return parsed, bad

    if isinstance(col_type, DateTime):
        parsed = pd.to_datetime(series, errors="coerce", format="mixed")
        bad = present & parsed.isna()
        return parsed, bad

    if isinstance(col_type, Date):
        parsed = pd.to_datetime(series, errors="coerce", format="mixed")
        bad = present & parsed.isna()
        return parsed.dt.date.where(parsed.notna(), None), bad

    # Plain text: only the declared length can be violated
    bad = pd.Series(False, index=series.index)
    if isinstance(col_type, String) and col_type.length:
        bad = present & (series.str.len() > col_type.length)
    return series, bad


def _surplus_rows(file_path: str) -> List[int]:
    """Data rows (1-based, blank lines skipped) holding more fields than the header."""
    rows = []
    with open(file_path, newline="", encoding="utf-8") as f:
        records = (record for record in csv.reader(f, skipinitialspace=True) if record)
        width = len(next(records, []))
        for number, record in enumerate(records, start=1):
            if len(record) > width:
                rows.append(number)
    return rows


def read_raw_csv(file_path: str, table_class) -> pd.DataFrame:
    """
    Read a CSV export and coerce it to the raw table's column types.

    The header must hold exactly the table's business columns. Any
    malformed row (too many or too few fields, unparseable value, missing
    required value) rejects the whole file.

    Raises:
        SchemaMismatchError: header does not match the table
        IngestionError: one or more malformed rows
    """
    file_name = os.path.basename(file_path)

    # pandas would shift a long first row into the index or drop surplus fields
    surplus = _surplus_rows(file_path)
    if surplus:
        raise IngestionError(
            f"{len(surplus)} rows with too many fields in {file_name}; nothing loaded",
            file_path=file_path,
            bad_rows=[{"row": row, "column": None, "error": "wrong column count"} for row in surplus],
        )

    try:
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False, skipinitialspace=True, index_col=False)
    except pd.errors.ParserError as e:
        raise IngestionError(f"Malformed CSV {file_name}: {e}", file_path=file_path, original_error=e) from e
    except pd.errors.EmptyDataError as e:
        raise IngestionError(f"Empty CSV {file_name}", file_path=file_path, original_error=e) from e

    df.columns = df.columns.str.strip().str.replace('"', "")
    columns = business_columns(table_class)
    expected = [c.name for c in columns]

    missing = [c for c in expected if c not in df.columns]
    unexpected = [c for c in df.columns if c not in expected]
    if missing or unexpected:
        raise SchemaMismatchError(
            f"CSV {file_name} does not match {table_class.__tablename__}",
            file_path=file_path,
            missing=missing,
            unexpected=unexpected,
        )

    bad_rows: List[Dict[str, Any]] = []

    # Short rows: trailing fields are absent (NaN) rather than empty ("")
    short = df.isna().any(axis=1)
    for idx in df.index[short]:
        bad_rows.append({"row": int(idx) + 1, "column": None, "error": "wrong column count"})

    df = df[expected].apply(lambda s: s.str.strip())
    df = df.where(df != "", None)

    parsed = {}
    for column in columns:
        values, bad = _parse_series(df[column.name], column)
        if not column.nullable:
            bad = bad | df[column.name].isna()
        for idx in df.index[bad & ~short]:
            bad_rows.append({
                "row": int(idx) + 1,
                "column": column.name,
                "value": df.at[idx, column.name],
            })
        parsed[column.name] = values

    if bad_rows:
        bad_rows.sort(key=lambda r: r["row"])
        raise IngestionError(
            f"{len(bad_rows)} malformed values in {file_name}; nothing loaded",
            file_path=file_path,
            bad_rows=bad_rows,
        )

    return pd.DataFrame(parsed, index=df.index)


# LOADING

def load_csv_to_bronze(file_path: str, table_class, conn, batch_size: int = 1000) -> int:
    """
    Load a single CSV file into a Bronze table.

    Args:
        file_path: Path to the CSV file
        table_class: Raw model class
        conn: Open connection; the caller's transaction makes the load atomic
        batch_size: Number of records per insert batch

    Returns:
        Number of records loaded
    """
    file_name = os.path.basename(file_path)
    logger.info(f"Loading file: {file_name} -> {table_class.__tablename__}")

    df = read_raw_csv(file_path, table_class)
    df["source_file"] = file_name
    df["loaded_at"] = datetime.utcnow()

    total = insert_dataframe(df, table_class, conn, batch_size=batch_size)
    logger.info(f"  Total: {total} records loaded from {file_name}")
    return total


# MAIN BRONZE FUNCTION

def run_bronze_load(
    case_study: str,
    data_dir: Optional[str] = None,
    engine: Optional[Engine] = None
) -> Dict[str, Any]:
    """
    Recreate a case study's raw tables and load every source CSV.

    Each file is loaded in its own transaction: a malformed file leaves its
    table empty and stops the run.

    Returns:
        dict: rows loaded per raw table
    """
    case = get_case_study(case_study)
    data_dir = data_dir or get_settings().data_dir
    engine = engine or get_engine()

    logger.info("=" * 60)
    logger.info(f"BRONZE LAYER: Loading raw data for '{case.name}'")
    logger.info("=" * 60)

    recreate_tables(engine, [source.model for source in case.sources])

    counts: Dict[str, Any] = {}
    for source in case.sources:
        file_path = os.path.join(data_dir, source.file_name)
        if not os.path.exists(file_path):
            raise IngestionError(f"Source file not found for {source.table_name}", file_path=file_path)

        with engine.begin() as conn:
            counts[source.table_name] = load_csv_to_bronze(file_path, source.model, conn)

    logger.info("=" * 60)
    logger.info(f"BRONZE LAYER COMPLETE: {counts}")
    logger.info("=" * 60)
    return counts
