"""Pydantic schemas for API responses."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ReportResponse(BaseModel):
    """One report as a list of rows."""
    report: str = Field(..., description="Report name")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Report rows, column -> value")


class HealthResponse(BaseModel):
    status: str
    version: str
    endpoints: Dict[str, str]
