"""Scalar parsing helpers used by both the loader and the cleaners."""

import json
import re
from datetime import datetime, time
from typing import Any, List, Optional

import pandas as pd

_PG_ARRAY = re.compile(r"^\{(.*)\}$", re.DOTALL)


def is_missing(value: Any) -> bool:
    """True for None, NaN/NaT/NA and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_list_literal(value: Any) -> List[Any]:
    """
    Parse a serialized list into a Python list.

    Accepts a JSON array (``["2022-01-03", "2022-01-04"]``), a PostgreSQL
    array literal (``{101,102}``) or an already materialized list. Missing
    values give an empty list.

    Raises:
        ValueError: if the text is neither form
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    if is_missing(value):
        return []

    text = str(value).strip()
    match = _PG_ARRAY.match(text)
    if match:
        body = match.group(1).strip()
        if not body:
            return []
        items = [item.strip().strip('"') for item in body.split(",")]
        return [None if item.upper() == "NULL" else item for item in items]

    parsed = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError(f"Expected a list, got {type(parsed).__name__}: {text[:50]}")
    return parsed


def parse_time(value: Any) -> Optional[time]:
    """Parse ``HH:MM`` / ``HH:MM:SS`` text into a ``datetime.time``."""
    if is_missing(value):
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, datetime):
        return value.time()

    text = str(value).strip()
    for fmt in ("%H:%M:%S", "%H:%M", "%H:%M:%S.%f"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time value: {text!r}")


def time_to_minutes(value: Any) -> Optional[float]:
    """Minutes since midnight for a time-like value (None when missing)."""
    if is_missing(value):
        return None
    t = parse_time(value)
    return t.hour * 60 + t.minute + t.second / 60
