"""
Silver Layer Models - cleaned, de-duplicated and expanded relations.
Schema: staging
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger, Column, Date, DateTime, Float, Integer, Numeric, String, Text, Time,
)
from sqlalchemy.orm import declarative_base

SilverBase = declarative_base()


class StagingMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    etl_batch_id = Column(String, nullable=False)
    processed_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# ATTENDANCE CASE STUDY

class StagingAttendance(StagingMixin, SilverBase):
    """Earliest IN and latest OUT event per user and date."""

    __tablename__ = "attendance"
    __table_args__ = {"schema": "staging"}

    user_id = Column(BigInteger)
    location = Column(String(50))
    date = Column(Date)
    time = Column(Time)
    timezone = Column(String(10))
    case = Column(String(10))
    source = Column(String(10))

    def __repr__(self):
        return f"<StagingAttendance(user_id={self.user_id}, date={self.date}, case={self.case})>"


class StagingUser(StagingMixin, SilverBase):
    __tablename__ = "users"
    __table_args__ = {"schema": "staging"}

    user_id = Column(BigInteger, nullable=False)
    gender = Column(String(10))
    date_birth = Column(Date)
    date_hire = Column(Date)
    date_leave = Column(Date)
    employment = Column(String(50))
    position = Column(String(100))
    location = Column(String(50))
    department = Column(String(50))
    created_at = Column(DateTime)


class StagingPayroll(StagingMixin, SilverBase):
    __tablename__ = "payroll"
    __table_args__ = {"schema": "staging"}

    user_id = Column(BigInteger)
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


class StagingSchedule(StagingMixin, SilverBase):
    """One row per user and date, fanned out from the raw schedule templates."""

    __tablename__ = "schedules"
    __table_args__ = {"schema": "staging"}

    user_id = Column(BigInteger)
    type = Column(String(10))
    date = Column(Date)
    time_start = Column(Time)
    time_end = Column(Time)
    timezone = Column(String(10))
    time_planned = Column(Integer)
    break_time = Column(Integer)
    leave_type = Column(String(20))


class StagingLeaveRequest(StagingMixin, SilverBase):
    __tablename__ = "leave_requests"
    __table_args__ = {"schema": "staging"}

    user_id = Column(BigInteger)
    type = Column(String(10))
    leave_type = Column(String(20))
    date = Column(Date)
    status = Column(String(10))
    created_at = Column(DateTime)


# INVOICES CASE STUDY

class StagingInvoice(StagingMixin, SilverBase):
    __tablename__ = "invoices"
    __table_args__ = {"schema": "staging"}

    country = Column(String(50))
    customer_id = Column(String(16))
    invoice_number = Column(BigInteger, nullable=False, unique=True)
    invoice_generated_date = Column(Date)
    invoice_due_date = Column(Date)
    invoice_amount = Column(Integer)
    invoice_settled_date = Column(Date)
    days_to_settle = Column(Integer)
    days_late = Column(Integer)
    invoice_status = Column(String(50))
    invoice_dispute_resolution = Column(String(50))


# HOUSING CASE STUDY

class StagingHousingSale(StagingMixin, SilverBase):
    __tablename__ = "housing_sales"
    __table_args__ = {"schema": "staging"}

    unique_id = Column(Integer, nullable=False)
    parcel_id = Column(Text)
    land_use = Column(Text)
    property_address = Column(Text)
    property_city = Column(Text)
    sale_date = Column(Date)
    sale_price = Column(Float)
    legal_reference = Column(Text)
    sold_as_vacant = Column(Text)
    owner_name = Column(Text)
    owner_address = Column(Text)
    owner_city = Column(Text)
    owner_state = Column(Text)
    acreage = Column(Float)
    tax_district = Column(Text)
    land_value = Column(Float)
    building_value = Column(Float)
    total_value = Column(Float)
    year_built = Column(Integer)
    bedrooms = Column(Integer)
    full_bath = Column(Integer)
    half_bath = Column(Integer)
