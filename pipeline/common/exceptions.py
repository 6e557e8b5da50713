"""
Custom exceptions for the case-study pipelines.
One error type per layer plus the shared ingestion/validation failures.
"""

from typing import Optional, Dict, Any, List


class ETLError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ExtractionError(ETLError):
    """Raised when CSV exports cannot be fetched from the object store."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if source:
            details["source"] = source
        super().__init__(message, details=details, **kwargs)


class IngestionError(ETLError):
    """
    Raised when a CSV file cannot be loaded into its raw table.

    Loads are all-or-nothing, so this always means nothing from the file
    was committed.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        bad_rows: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path
        if bad_rows:
            details["bad_rows"] = bad_rows[:10]
            details["bad_row_count"] = len(bad_rows)
        super().__init__(message, details=details, **kwargs)
        self.file_path = file_path
        self.bad_rows = bad_rows or []


class SchemaMismatchError(IngestionError):
    """Raised when a CSV header does not match the raw table's columns."""

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        unexpected: Optional[List[str]] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if missing:
            details["missing_columns"] = missing
        if unexpected:
            details["unexpected_columns"] = unexpected
        super().__init__(message, details=details, **kwargs)
        self.missing = missing or []
        self.unexpected = unexpected or []


class SilverTransformError(ETLError):
    """Raised while cleaning raw tables into staging tables."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        batch_id: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if table_name:
            details["table_name"] = table_name
        if batch_id:
            details["batch_id"] = batch_id
        super().__init__(message, details=details, **kwargs)


class GoldLoadError(ETLError):
    """Raised while building the denormalized analytics tables."""

    def __init__(self, message: str, table_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if table_name:
            details["table_name"] = table_name
        super().__init__(message, details=details, **kwargs)


class ReportError(ETLError):
    """Raised when a report cannot be computed from its input."""

    def __init__(self, message: str, report_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if report_name:
            details["report_name"] = report_name
        super().__init__(message, details=details, **kwargs)


class ValidationError(ETLError):
    """Raised when validation fails and the run is configured to stop."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        failed_checks: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if validation_type:
            details["validation_type"] = validation_type
        if failed_checks:
            details["failed_checks"] = failed_checks
        super().__init__(message, details=details, **kwargs)
