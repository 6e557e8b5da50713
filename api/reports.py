from enum import Enum
from typing import Callable, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from api.database import get_db
from api.schemas import ReportResponse
from db.db_utils import clean_nulls, read_table
from db.models_gold import AttendanceDaily
from db.models_silver import StagingInvoice
from pipeline.common.exceptions import ReportError
from pipeline.gold import attendance_reports, invoice_reports

router = APIRouter(prefix="/reports", tags=["Reports"])


class AttendanceDimension(str, Enum):
    employee = "employee"
    department = "department"
    weekday = "weekday"
    month = "month"


def load_report_source(model, db: Session) -> pd.DataFrame:
    """Read a report's backing table; 404 when it is missing or empty."""
    table_name = model.__tablename__
    try:
        df = read_table(model, db.get_bind())
    except (OperationalError, ProgrammingError):
        raise HTTPException(status_code=404, detail=f"Table '{table_name}' has not been built yet")
    if df.empty:
        raise HTTPException(status_code=404, detail=f"Table '{table_name}' is empty")
    return df


def to_response(name: str, build: Callable[[], pd.DataFrame]) -> ReportResponse:
    try:
        df = build()
    except ReportError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ReportResponse(report=name, rows=clean_nulls(df).to_dict(orient="records"))


# ATTENDANCE

@router.get("/attendance/summary", response_model=ReportResponse)
def get_attendance_summary(db: Session = Depends(get_db)):
    """Totals and rates over every classified employee-day."""
    daily = load_report_source(AttendanceDaily, db)
    return to_response("attendance_summary", lambda: attendance_reports.attendance_summary(daily))


@router.get("/attendance/{dimension}", response_model=ReportResponse)
def get_attendance_report(dimension: AttendanceDimension, db: Session = Depends(get_db)):
    """
    Tardy, undertime and missing-logout counts per dimension.

    - **dimension**: employee, department, weekday or month
    """
    daily = load_report_source(AttendanceDaily, db)
    builder = attendance_reports.ATTENDANCE_REPORTS[dimension.value]
    return to_response(f"attendance_by_{dimension.value}", lambda: builder(daily))


# INVOICES

@router.get("/invoices/summary", response_model=ReportResponse)
def get_invoice_summary(db: Session = Depends(get_db)):
    """Settlement times, dispute loss rates and the top loss country in one row."""
    invoices = load_report_source(StagingInvoice, db)
    return to_response("invoice_summary", lambda: invoice_reports.invoice_summary(invoices))


@router.get("/invoices/quarterly", response_model=ReportResponse)
def get_settlement_by_quarter(
    disputed_only: bool = Query(False, description="Only include disputed invoices"),
    db: Session = Depends(get_db)
):
    invoices = load_report_source(StagingInvoice, db)
    name = "dispute_settlement_by_quarter" if disputed_only else "settlement_by_quarter"
    return to_response(name, lambda: invoice_reports.settlement_by_quarter(invoices, disputed_only))


@router.get("/invoices/disputes", response_model=ReportResponse)
def get_dispute_outcomes(db: Session = Depends(get_db)):
    invoices = load_report_source(StagingInvoice, db)
    return to_response("dispute_outcomes", lambda: invoice_reports.dispute_outcomes(invoices))


@router.get("/invoices/countries", response_model=ReportResponse)
def get_lost_revenue_by_country(db: Session = Depends(get_db)):
    invoices = load_report_source(StagingInvoice, db)
    return to_response("lost_revenue_by_country", lambda: invoice_reports.lost_revenue_by_country(invoices))


@router.get("/invoices/customers", response_model=ReportResponse)
def get_customer_distribution(
    country: Optional[str] = Query(None, description="Country (default: highest lost revenue)"),
    db: Session = Depends(get_db)
):
    """Lost / won / not disputed invoices per customer of one country."""
    invoices = load_report_source(StagingInvoice, db)
    if country is None:
        countries = invoice_reports.lost_revenue_by_country(invoices)
        if countries.empty:
            raise HTTPException(status_code=404, detail="No lost disputes recorded")
        country = countries.at[0, "country"]
    return to_response(
        "customer_distribution",
        lambda: invoice_reports.customer_distribution(invoices, country),
    )
