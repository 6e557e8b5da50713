# pipeline/gold/reports.py
"""
Aggregation helpers shared by the report builders, and CSV export.
"""

import os
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from pipeline.common.exceptions import ReportError

logger = logging.getLogger(__name__)

MONTH_FORMAT = "%Y-%m"


def require_columns(df: pd.DataFrame, columns: Sequence[str], report_name: str) -> None:
    """Raise ReportError when the input lacks a column the report needs."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ReportError(
            f"Cannot build report '{report_name}': missing columns {missing}",
            report_name=report_name,
        )


def percent_of_total(
    df: pd.DataFrame,
    value_column: str,
    output_column: str,
    partition: Optional[Union[str, Sequence[str]]] = None
) -> pd.DataFrame:
    """
    Add each row's share of the column total, in percent, rounded to 2 dp.

    With ``partition`` the total is taken per partition (a window sum).
    Rows of an all-zero partition get 0.
    """
    df = df.copy()
    values = pd.to_numeric(df[value_column], errors="coerce").fillna(0).astype(float)
    if partition:
        keys = [partition] if isinstance(partition, str) else list(partition)
        totals = values.groupby([df[k] for k in keys], dropna=False).transform("sum")
    else:
        totals = pd.Series(values.sum(), index=df.index)

    share = (values * 100 / totals.where(totals != 0)).round(2)
    df[output_column] = share.fillna(0.0)
    return df


def zero_filled_months(
    df: pd.DataFrame,
    date_column: str,
    value_columns: Sequence[str],
    start=None,
    end=None
) -> pd.DataFrame:
    """
    Sum ``value_columns`` per calendar month, with every month present.

    The range runs from ``start`` (default: earliest date) to ``end``
    (default: latest date); months without rows report 0. The output has a
    ``month`` column (``YYYY-MM``) followed by the value columns.
    """
    value_columns = list(value_columns)
    dates = pd.to_datetime(df[date_column], errors="coerce")
    observed = dates.dropna()

    first = pd.Timestamp(start) if start is not None else (observed.min() if not observed.empty else None)
    last = pd.Timestamp(end) if end is not None else (observed.max() if not observed.empty else None)
    if first is None or last is None:
        return pd.DataFrame(columns=["month"] + value_columns)

    months = pd.period_range(first.to_period("M"), last.to_period("M"), freq="M")
    values = df[value_columns].apply(pd.to_numeric, errors="coerce").fillna(0)
    monthly = values.groupby(dates.dt.to_period("M")).sum()

    result = monthly.reindex(months, fill_value=0)
    result.index = result.index.strftime(MONTH_FORMAT)
    return result.rename_axis("month").reset_index()


def summarize(
    df: pd.DataFrame,
    by: Union[str, Sequence[str]],
    metrics: Dict[str, Tuple[str, str]]
) -> pd.DataFrame:
    """
    Group ``df`` and compute named aggregations.

    Example:
        summarize(df, "country", {"revenue": ("invoice_amount", "sum")})
    """
    by = [by] if isinstance(by, str) else list(by)
    return df.groupby(by, dropna=False, sort=True).agg(**metrics).reset_index()


def export_reports(reports: Dict[str, Dict[str, pd.DataFrame]], output_dir: str) -> List[str]:
    """
    Write report DataFrames to ``<output_dir>/<case>/<report>.csv``.

    Args:
        reports: Mapping of case study name to its reports (name -> DataFrame)
        output_dir: Root folder for the exported files

    Returns:
        Paths of the written files
    """
    written = []
    for case_study, case_reports in reports.items():
        case_dir = os.path.join(output_dir, case_study)
        os.makedirs(case_dir, exist_ok=True)
        for name, df in case_reports.items():
            path = os.path.join(case_dir, f"{name}.csv")
            df.to_csv(path, index=False)
            written.append(path)
            logger.info(f"  Exported {name}: {len(df)} rows -> {path}")
    return written
