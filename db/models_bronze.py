"""
Bronze Layer Models - raw CSV rows, typed but otherwise untouched.
Schema: raw

List-valued columns are stored as their verbatim text and flagged through
``Column.info["format"]`` so the loader can validate them:
- ``json_list``: JSON array, e.g. ``["2022-01-03", "2022-01-04"]``
- ``pg_array``: PostgreSQL array literal, e.g. ``{101,102}``

``Column.info["element"]`` optionally names the element type; every
element must then parse as that type (``bigint``).
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger, Boolean, Column, Date, DateTime, Integer, Numeric, String, Text, Time,
)
from sqlalchemy.orm import declarative_base

BronzeBase = declarative_base()


class RawMixin:
    """Surrogate id (file order) and load metadata shared by raw tables."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_file = Column(String, nullable=False)
    loaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# ATTENDANCE CASE STUDY

class RawAttendance(RawMixin, BronzeBase):
    """Clock-in / clock-out events exported by the attendance app."""

    __tablename__ = "raw_attendance"
    __table_args__ = {"schema": "raw"}

    user_id = Column(BigInteger)
    first_name = Column(String(100))
    last_name = Column(String(100))
    location = Column(String(50))
    date = Column(Date)
    time = Column(Time)
    timezone = Column(String(10))
    case = Column(String(10))
    source = Column(String(10))

    def __repr__(self):
        return f"<RawAttendance(id={self.id}, user_id={self.user_id}, date={self.date}, case={self.case})>"


class RawUser(RawMixin, BronzeBase):
    __tablename__ = "raw_users"
    __table_args__ = {"schema": "raw"}

    user_id = Column(BigInteger, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    gender = Column(String(10))
    date_birth = Column(Date)
    date_hire = Column(Date)
    date_leave = Column(Date)
    employment = Column(String(50))
    position = Column(String(100))
    location = Column(String(50))
    department = Column(String(50))
    created_at = Column(DateTime)


class RawPayroll(RawMixin, BronzeBase):
    __tablename__ = "raw_payroll"
    __table_args__ = {"schema": "raw"}

    user_id = Column(BigInteger)
    first_name = Column(String(100))
    last_name = Column(String(100))
    date_start = Column(Date)
    date_end = Column(Date)
    ctc = Column(Numeric(asdecimal=False))
    net_pay = Column(Numeric(asdecimal=False))
    gross_pay = Column(Numeric(asdecimal=False))
    data_salary_basic_rate = Column(Integer)
    data_salary_basic_type = Column(String(20))
    currency = Column(String(10))
    status = Column(String(10))
    created_at = Column(DateTime)


class RawSchedule(RawMixin, BronzeBase):
    """One row per schedule template: a list of dates shared by a list of users."""

    __tablename__ = "raw_schedules"
    __table_args__ = {"schema": "raw"}

    type = Column(String(10))
    dates = Column(Text, info={"format": "json_list"})
    time_start = Column(Time)
    time_end = Column(Time)
    timezone = Column(String(10))
    time_planned = Column(Integer)
    break_time = Column(Integer)
    leave_type = Column(String(20))
    user_id = Column(Text, info={"format": "pg_array", "element": "bigint"})


class RawLeaveRequest(RawMixin, BronzeBase):
    __tablename__ = "raw_leave_requests"
    __table_args__ = {"schema": "raw"}

    user_id = Column(BigInteger)
    first_name = Column(String(100))
    last_name = Column(String(100))
    type = Column(String(10))
    leave_type = Column(String(20))
    dates = Column(Text, info={"format": "json_list"})
    time_start = Column(Time)
    time_end = Column(Time)
    timezone = Column(String(10))
    status = Column(String(10))
    created_at = Column(DateTime)


# INVOICES CASE STUDY

class RawInvoice(RawMixin, BronzeBase):
    __tablename__ = "raw_invoices"
    __table_args__ = {"schema": "raw"}

    country = Column(String(50))
    customer_id = Column(String(16))
    invoice_number = Column(BigInteger, nullable=False)
    invoice_generated_date = Column(Date)
    invoice_due_date = Column(Date)
    invoice_amount = Column(Integer)
    disputed = Column(Boolean)
    dispute_lost = Column(Boolean)
    invoice_settled_date = Column(Date)
    days_to_settle = Column(Integer)
    days_late = Column(Integer)

    def __repr__(self):
        return f"<RawInvoice(id={self.id}, invoice_number={self.invoice_number})>"


# HOUSING CASE STUDY

class RawHousingSale(RawMixin, BronzeBase):
    """Property sale records. ``unique_id`` is the export's own surrogate key."""

    __tablename__ = "raw_housing_sales"
    __table_args__ = {"schema": "raw"}

    unique_id = Column(Integer, nullable=False)
    parcel_id = Column(Text)
    land_use = Column(Text)
    property_address = Column(Text)
    sale_date = Column(Date)
    sale_price = Column(Text)
    legal_reference = Column(Text)
    sold_as_vacant = Column(Text)
    owner_name = Column(Text)
    owner_address = Column(Text)
    acreage = Column(Numeric(asdecimal=False))
    tax_district = Column(Text)
    land_value = Column(Numeric(asdecimal=False))
    building_value = Column(Numeric(asdecimal=False))
    total_value = Column(Numeric(asdecimal=False))
    year_built = Column(Integer)
    bedrooms = Column(Integer)
    full_bath = Column(Integer)
    half_bath = Column(Integer)


def business_columns(model) -> list:
    """Columns that come from the CSV file (everything but the load metadata)."""
    skip = {"id", "source_file", "loaded_at"}
    return [c for c in model.__table__.columns if c.name not in skip]
