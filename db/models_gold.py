"""
Gold Layer Models - denormalized, classified views used by the reports.
Schema: analytics
"""

from sqlalchemy import BigInteger, Boolean, Column, Date, Float, Integer, String, Time
from sqlalchemy.orm import declarative_base

GoldBase = declarative_base()


class AttendanceDaily(GoldBase):
    """
    One row per employee and scheduled work day.

    Joins the Work schedule with the day's first login and last logout and
    carries the tardy / undertime / missing-logout classification.
    """

    __tablename__ = "attendance_daily"
    __table_args__ = {"schema": "analytics"}

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    department = Column(String(50))
    position = Column(String(100))
    location = Column(String(50))
    source = Column(String(10))

    time_start = Column(Time)
    time_end = Column(Time)
    time_in = Column(Time)
    time_out = Column(Time)

    minutes_late = Column(Float)
    minutes_early = Column(Float)
    is_tardy = Column(Boolean, nullable=False)
    is_undertime = Column(Boolean, nullable=False)
    is_missing_logout = Column(Boolean, nullable=False)

    def __repr__(self):
        return f"<AttendanceDaily(user_id={self.user_id}, date={self.date}, tardy={self.is_tardy})>"
