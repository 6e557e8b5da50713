"""
Gold Layer ETL - Load from Silver (staging) to Gold (analytics).
Builds the denormalized, classified tables and the case-study reports.
"""

import logging
from typing import Any, Dict, Optional

import pandas as pd
from sqlalchemy.engine import Engine

from db.db_utils import get_engine, insert_dataframe, read_table, recreate_tables
from db.models_gold import AttendanceDaily
from db.models_silver import StagingAttendance, StagingInvoice, StagingSchedule, StagingUser
from pipeline.catalog import get_case_study
from pipeline.common.config import Settings, get_settings
from pipeline.common.exceptions import GoldLoadError
from pipeline.gold.attendance import build_attendance_daily, classify_attendance
from pipeline.gold.attendance_reports import build_attendance_reports
from pipeline.gold.invoice_reports import build_invoice_reports

logger = logging.getLogger(__name__)


# DATA LOADING FROM STAGING / ANALYTICS

def load_attendance_daily(engine: Engine) -> pd.DataFrame:
    """Classified employee-days from the analytics layer."""
    return read_table(AttendanceDaily, engine)


def load_staging_invoices(engine: Engine) -> pd.DataFrame:
    return read_table(StagingInvoice, engine)


# TRANSFORMATIONS

def transform_attendance_daily(engine: Engine, settings: Settings) -> pd.DataFrame:
    """Join and classify the cleaned attendance relations."""
    attendance = read_table(StagingAttendance, engine)
    schedules = read_table(StagingSchedule, engine)
    users = read_table(StagingUser, engine)

    policy = settings.classification
    daily = build_attendance_daily(attendance, schedules, users, policy)
    return classify_attendance(daily, policy)


GOLD_TRANSFORMS = {
    "attendance_daily": transform_attendance_daily,
}


# MAIN ETL FUNCTION

def run_gold_load(
    case_study: str,
    engine: Optional[Engine] = None,
    settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """
    Rebuild a case study's analytics tables.

    Case studies without analytics tables are reported as skipped; their
    reports read the staging tables directly.

    Returns:
        dict: status and rows written per analytics table
    """
    case = get_case_study(case_study)
    settings = settings or get_settings()
    engine = engine or get_engine(settings.database_url)

    logger.info("=" * 60)
    logger.info(f"GOLD LAYER: Building analytics tables for '{case.name}'")
    logger.info("=" * 60)

    if not case.gold_models:
        logger.info("No analytics tables for this case study - skipping")
        return {"status": "skipped", "reason": "no analytics tables"}

    recreate_tables(engine, list(case.gold_models.values()))

    counts: Dict[str, Any] = {"status": "success"}
    for table_name, model in case.gold_models.items():
        try:
            df = GOLD_TRANSFORMS[table_name](engine, settings)
            with engine.begin() as conn:
                counts[table_name] = insert_dataframe(df, model, conn)
        except GoldLoadError:
            raise
        except Exception as e:
            raise GoldLoadError(
                f"Failed to build {table_name}: {e}",
                table_name=table_name,
                original_error=e,
            ) from e

    logger.info("=" * 60)
    logger.info("GOLD LAYER COMPLETE")
    logger.info("=" * 60)
    return counts


# REPORTS

def build_reports(
    case_study: str,
    engine: Optional[Engine] = None,
    settings: Optional[Settings] = None
) -> Dict[str, pd.DataFrame]:
    """
    Compute every report of a case study from the database.

    Returns:
        Mapping of report name to DataFrame (empty for the housing study
        or when there is nothing to report on)
    """
    case = get_case_study(case_study)
    settings = settings or get_settings()
    engine = engine or get_engine(settings.database_url)

    logger.info("-" * 40)
    logger.info(f"Building reports for '{case.name}'...")

    if case.name == "attendance":
        daily = load_attendance_daily(engine)
        if daily.empty:
            logger.warning("No classified attendance rows - skipping reports")
            return {}
        return build_attendance_reports(daily)

    if case.name == "invoices":
        invoices = load_staging_invoices(engine)
        if invoices.empty:
            logger.warning("No cleaned invoices - skipping reports")
            return {}
        return build_invoice_reports(invoices)

    logger.info("No reports defined for this case study")
    return {}
