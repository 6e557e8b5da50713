"""
Registry of case studies: which CSV files feed which raw tables, and which
staging / analytics tables each study produces.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from db.models_bronze import (
    RawAttendance, RawUser, RawPayroll, RawSchedule, RawLeaveRequest,
    RawInvoice, RawHousingSale,
)
from db.models_silver import (
    StagingAttendance, StagingUser, StagingPayroll, StagingSchedule,
    StagingLeaveRequest, StagingInvoice, StagingHousingSale,
)
from db.models_gold import AttendanceDaily
from pipeline.common.exceptions import ETLError


@dataclass(frozen=True)
class RawSource:
    """One CSV export and the raw table it is loaded into."""
    key: str
    model: type
    file_name: str

    @property
    def table_name(self) -> str:
        return self.model.__tablename__


@dataclass(frozen=True)
class CaseStudy:
    name: str
    description: str
    sources: Tuple[RawSource, ...]
    staging_models: Dict[str, type] = field(default_factory=dict)
    gold_models: Dict[str, type] = field(default_factory=dict)


CASE_STUDIES: Dict[str, CaseStudy] = {
    "attendance": CaseStudy(
        name="attendance",
        description="Employee attendance: tardiness, undertime and missing logouts",
        sources=(
            RawSource("attendance", RawAttendance, "attendance.csv"),
            RawSource("users", RawUser, "users.csv"),
            RawSource("payroll", RawPayroll, "payroll.csv"),
            RawSource("schedules", RawSchedule, "schedules.csv"),
            RawSource("leave_requests", RawLeaveRequest, "leave_requests.csv"),
        ),
        staging_models={
            "attendance": StagingAttendance,
            "users": StagingUser,
            "payroll": StagingPayroll,
            "schedules": StagingSchedule,
            "leave_requests": StagingLeaveRequest,
        },
        gold_models={"attendance_daily": AttendanceDaily},
    ),
    "invoices": CaseStudy(
        name="invoices",
        description="Invoice dispute rates and settlement times",
        sources=(RawSource("invoices", RawInvoice, "invoices.csv"),),
        staging_models={"invoices": StagingInvoice},
    ),
    "housing": CaseStudy(
        name="housing",
        description="Housing sale records: de-duplication and normalization",
        sources=(RawSource("housing_sales", RawHousingSale, "housing.csv"),),
        staging_models={"housing_sales": StagingHousingSale},
    ),
}


def get_case_study(name: str) -> CaseStudy:
    """Look up a case study by name."""
    try:
        return CASE_STUDIES[name]
    except KeyError:
        raise ETLError(
            f"Unknown case study '{name}'",
            details={"available": sorted(CASE_STUDIES)},
        ) from None
