# pipeline/silver/utils.py
"""
Silver Layer Utilities - reusable cleaning operations.
De-duplication, default substitution, case normalization, list fan-out
and boolean relabelling shared by every case study.
"""

import logging
import re
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from pipeline.common.values import is_missing, parse_list_literal, parse_time

logger = logging.getLogger(__name__)

# Runs of letters/digits; underscore and punctuation separate words
_WORD = re.compile(r"[^\W_]+")

# Sentinels used for missing categorical values
NONE_SENTINEL = "None"
NO_DATA_SENTINEL = "No Data"


def title_case(series: pd.Series, replace_underscores: bool = False) -> pd.Series:
    """
    Capitalize the first letter of every word and lower-case the rest.

    Words are runs of letters and digits, so ``"full_time"`` becomes
    ``"Full_Time"`` (``"Full Time"`` with ``replace_underscores``) and
    ``"2nd floor"`` becomes ``"2nd Floor"``. Nulls stay null.
    """
    def _initcap(value):
        if is_missing(value):
            return None
        text = _WORD.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), str(value))
        return text.replace("_", " ") if replace_underscores else text

    return series.map(_initcap, na_action="ignore").where(series.notna(), None)


def fill_defaults(df: pd.DataFrame, defaults: Dict[str, Any]) -> pd.DataFrame:
    """Replace nulls with a per-column default (only for columns present)."""
    df = df.copy()
    for column, default in defaults.items():
        if column in df.columns:
            df[column] = df[column].astype(object).where(df[column].notna(), default)
    return df


def deduplicate(
    df: pd.DataFrame,
    key_columns: Sequence[str],
    order_by: str = "id"
) -> pd.DataFrame:
    """
    Collapse rows sharing the natural key, keeping the lowest ``order_by``.

    Nulls in key columns compare equal, the way ``PARTITION BY`` groups them.
    """
    if df.empty:
        return df.copy()

    before = len(df)
    ordered = df.sort_values(order_by, kind="mergesort") if order_by in df.columns else df
    result = ordered.drop_duplicates(subset=list(key_columns), keep="first")
    removed = before - len(result)
    if removed:
        logger.info(f"  Removed {removed} duplicate rows on {list(key_columns)}")
    return result.reset_index(drop=True)


def drop_missing_keys(df: pd.DataFrame, key_columns: Sequence[str], enabled: bool = True) -> pd.DataFrame:
    """Drop rows with a null required key when the policy says so."""
    if not enabled or df.empty:
        return df
    result = df.dropna(subset=list(key_columns))
    dropped = len(df) - len(result)
    if dropped:
        logger.warning(f"  Dropped {dropped} rows with missing {list(key_columns)}")
    return result.reset_index(drop=True)


def explode_list_column(
    df: pd.DataFrame,
    column: str,
    cast: Optional[Callable[[Any], Any]] = None
) -> pd.DataFrame:
    """
    Fan out a list-valued column: one output row per list element.

    All other columns are repeated. Rows whose list is null or empty produce
    no output, so the result has exactly ``sum(len(list))`` rows.

    Args:
        df: Input frame
        column: Column holding lists or serialized lists
        cast: Optional converter applied to each non-null element
    """
    if df.empty:
        return df.copy()

    lists = df[column].map(parse_list_literal)
    keep = lists.map(len) > 0
    exploded = df.loc[keep].assign(**{column: lists[keep]}).explode(column, ignore_index=True)

    if cast is not None:
        exploded[column] = exploded[column].map(
            lambda v: None if is_missing(v) else cast(v)
        )
    return exploded


def map_boolean_labels(series: pd.Series, true_label: str, false_label: str) -> pd.Series:
    """
    Relabel a boolean column. Anything other than true (including null)
    maps to ``false_label``.
    """
    is_true = series.eq(True).fillna(False).astype(bool)
    return pd.Series(
        np.where(is_true, true_label, false_label),
        index=series.index,
        dtype=object,
    )


def split_part(series: pd.Series, delimiter: str, position: int) -> pd.Series:
    """
    Return the n-th (1-based) delimited field, trimmed.

    Out-of-range positions give an empty string; nulls stay null.
    """
    def _part(value):
        parts = str(value).split(delimiter)
        return parts[position - 1].strip() if len(parts) >= position else ""

    return series.map(_part, na_action="ignore").where(series.notna(), None)


def to_date(series: pd.Series) -> pd.Series:
    """Coerce a column to ``datetime.date`` objects (None for missing)."""
    parsed = pd.to_datetime(series, errors="coerce")
    return parsed.dt.date.astype(object).where(parsed.notna(), None)


def to_time(series: pd.Series) -> pd.Series:
    """Coerce a column to ``datetime.time`` objects (None for missing)."""
    return series.map(parse_time, na_action="ignore").where(series.notna(), None)
