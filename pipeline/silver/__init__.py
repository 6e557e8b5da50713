# pipeline/silver/__init__.py
"""
Silver Layer - Data cleaning, validation, and transformation.
Staging tables are rebuilt from the raw tables on every run.
"""

from pipeline.silver.transformer import (
    run_silver_transform,
    clean_case_study,
    load_raw_frames,
)
from pipeline.silver.validator import run_silver_validation
from pipeline.silver.utils import (
    deduplicate,
    drop_missing_keys,
    explode_list_column,
    fill_defaults,
    map_boolean_labels,
    title_case,
)

__all__ = [
    "run_silver_transform",
    "clean_case_study",
    "load_raw_frames",
    "run_silver_validation",
    "deduplicate",
    "drop_missing_keys",
    "explode_list_column",
    "fill_defaults",
    "map_boolean_labels",
    "title_case",
]
