# pipeline/silver/transformer.py
"""
Silver Layer ETL - Transform Bronze data to cleaned staging tables.
Every run rebuilds the staging tables of a case study from its raw tables.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

import pandas as pd
from sqlalchemy.engine import Engine

from db.db_utils import get_engine, insert_dataframe, read_table, recreate_tables
from pipeline.catalog import get_case_study
from pipeline.common.config import Settings, get_settings
from pipeline.common.exceptions import SilverTransformError
from pipeline.silver.attendance import clean_attendance_case
from pipeline.silver.housing import clean_housing_case
from pipeline.silver.invoices import clean_invoices_case
from pipeline.silver.validator import run_silver_validation

logger = logging.getLogger(__name__)

CLEANERS = {
    "attendance": clean_attendance_case,
    "invoices": clean_invoices_case,
    "housing": clean_housing_case,
}


def load_raw_frames(case_study: str, engine: Engine) -> Dict[str, pd.DataFrame]:
    """Read every raw table of a case study, keyed by source."""
    case = get_case_study(case_study)
    return {source.key: read_table(source.model, engine) for source in case.sources}


def clean_case_study(
    case_study: str,
    frames: Dict[str, pd.DataFrame],
    settings: Optional[Settings] = None
) -> Dict[str, pd.DataFrame]:
    """
    Apply the case study's cleaning rules to its raw frames.

    Raises:
        SilverTransformError: if a cleaning rule fails on the data
    """
    settings = settings or get_settings()
    cleaner = CLEANERS[get_case_study(case_study).name]
    try:
        return cleaner(frames, settings.cleaning)
    except (KeyError, ValueError, TypeError) as e:
        raise SilverTransformError(
            f"Cleaning failed for case study '{case_study}': {e}",
            original_error=e,
        ) from e


def run_silver_transform(
    case_study: str,
    engine: Optional[Engine] = None,
    settings: Optional[Settings] = None,
    validate: bool = True
) -> Dict[str, Any]:
    """
    Run the complete Silver layer ETL for one case study.

    Args:
        case_study: Registered case study name
        engine: Target engine (default: configured database)
        settings: Settings carrying the cleaning policy
        validate: If True, run validation checks on the cleaned data

    Returns:
        dict: batch id, rows written per staging table and validation reports
    """
    case = get_case_study(case_study)
    settings = settings or get_settings()
    engine = engine or get_engine(settings.database_url)

    logger.info("=" * 60)
    logger.info(f"SILVER LAYER: Transforming '{case.name}' to staging")
    logger.info("=" * 60)

    batch_id = str(uuid4())[:8]
    logger.info(f"ETL Batch ID: {batch_id}")

    frames = load_raw_frames(case.name, engine)
    cleaned = clean_case_study(case.name, frames, settings)

    recreate_tables(engine, list(case.staging_models.values()))

    counts: Dict[str, int] = {}
    processed_at = datetime.utcnow()
    for key, model in case.staging_models.items():
        logger.info("-" * 40)
        logger.info(f"Writing {model.__tablename__}...")
        df = cleaned[key].assign(etl_batch_id=batch_id, processed_at=processed_at)
        try:
            with engine.begin() as conn:
                counts[model.__tablename__] = insert_dataframe(df, model, conn)
        except Exception as e:
            raise SilverTransformError(
                f"Failed to write {model.__tablename__}: {e}",
                table_name=model.__tablename__,
                batch_id=batch_id,
                original_error=e,
            ) from e

    validation_reports = run_silver_validation(case.name, cleaned) if validate else []

    logger.info("=" * 60)
    logger.info(f"SILVER LAYER COMPLETE: {counts}")
    logger.info("=" * 60)

    return {
        "batch_id": batch_id,
        "counts": counts,
        "validation": validation_reports,
    }
