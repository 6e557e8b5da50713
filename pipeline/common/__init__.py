# pipeline/common/__init__.py
"""
Common utilities shared across pipeline layers.
Includes configuration, quality checks, logging, and custom exceptions.
"""

from pipeline.common.config import Settings, get_settings
from pipeline.common.quality_checks import (
    QCResult,
    QCReport,
    validate_post_load,
    check_row_count,
    check_nulls,
    check_duplicates,
    check_numeric_range,
    check_referential_integrity,
    check_percentage_total,
    check_month_coverage,
)
from pipeline.common.exceptions import (
    ETLError,
    ExtractionError,
    IngestionError,
    SchemaMismatchError,
    SilverTransformError,
    GoldLoadError,
    ReportError,
    ValidationError,
)
from pipeline.common.logging import configure_logging

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Quality Checks
    "QCResult",
    "QCReport",
    "validate_post_load",
    "check_row_count",
    "check_nulls",
    "check_duplicates",
    "check_numeric_range",
    "check_referential_integrity",
    "check_percentage_total",
    "check_month_coverage",
    # Exceptions
    "ETLError",
    "ExtractionError",
    "IngestionError",
    "SchemaMismatchError",
    "SilverTransformError",
    "GoldLoadError",
    "ReportError",
    "ValidationError",
    # Logging
    "configure_logging",
]
