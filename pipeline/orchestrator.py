# pipeline/orchestrator.py
"""
Medallion Architecture pipeline orchestrator.
Runs Bronze → Silver → Gold → reports for each case study, with quality checks.
"""

import os
import argparse
import logging
from typing import Any, Dict, List, Optional, Sequence

from db.db_utils import get_engine
from pipeline.bronze import extract_from_minio, run_bronze_load
from pipeline.catalog import CASE_STUDIES, get_case_study
from pipeline.common import validate_post_load
from pipeline.common.config import Settings, get_settings
from pipeline.common.exceptions import ValidationError
from pipeline.common.logging import configure_logging, create_run_log_file, log_banner
from pipeline.gold import build_reports, export_reports, run_gold_load, validate_reports
from pipeline.silver import run_silver_transform

logger = logging.getLogger(__name__)


def run_case_study(
    case_study: str,
    data_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
    extract: bool = False,
    export: bool = True,
    skip_on_validation_fail: bool = False
) -> Dict[str, Any]:
    """
    Run the complete pipeline for one case study.

    Pipeline Flow:
        (MinIO) → Bronze (Raw) → Silver (Staging) → Gold (Analytics) → Reports

    Args:
        case_study: Registered case study name
        data_dir: Directory containing the source CSV files
        settings: Settings to use instead of the environment
        extract: If True, download the CSV files from MinIO first
        export: If True, write the reports as CSV files
        skip_on_validation_fail: If True, abort when staging validation fails

    Returns:
        dict: Results from each layer
    """
    case = get_case_study(case_study)
    settings = settings or get_settings()
    data_dir = data_dir or os.path.join(settings.data_dir, case.name)
    engine = get_engine(settings.database_url)

    results: Dict[str, Any] = {
        "case_study": case.name,
        "extract": None,
        "bronze": None,
        "silver": None,
        "gold": None,
        "reports": {},
        "exported": [],
        "report_validation": None,
        "post_load_validation": None,
    }

    try:
        if extract:
            log_banner(logger, "  STEP 0: EXTRACT - Downloading CSV files from MinIO", width=70)
            results["extract"] = extract_from_minio(
                download_dir=data_dir,
                prefix=f"{case.name}/",
                settings=settings,
            )

        # STEP 1: BRONZE LAYER - Load Raw Data
        log_banner(logger, f"  STEP 1: BRONZE LAYER - Loading raw data ({case.name})", width=70)
        results["bronze"] = run_bronze_load(case.name, data_dir=data_dir, engine=engine)

        # STEP 2: SILVER LAYER - Clean into staging
        log_banner(logger, "  STEP 2: SILVER LAYER - Transforming to staging", width=70)
        silver_result = run_silver_transform(case.name, engine=engine, settings=settings)
        results["silver"] = silver_result

        failed = [report for report in silver_result["validation"] if not report.passed]
        if failed:
            logger.warning("Silver layer validation found issues")
            if skip_on_validation_fail:
                raise ValidationError(
                    "Pipeline aborted due to staging validation failures",
                    validation_type="silver",
                    failed_checks=sum(report.failed_count for report in failed),
                )
            logger.warning("Proceeding with Gold load despite validation issues...")

        # STEP 3: GOLD LAYER - Analytics tables
        log_banner(logger, "  STEP 3: GOLD LAYER - Building analytics tables", width=70)
        results["gold"] = run_gold_load(case.name, engine=engine, settings=settings)

        # STEP 4: REPORTS
        log_banner(logger, "  STEP 4: REPORTS", width=70)
        reports = build_reports(case.name, engine=engine, settings=settings)
        results["reports"] = reports
        results["report_validation"] = validate_reports(case.name, reports)
        if not results["report_validation"].passed:
            logger.warning("Report validation found issues")
        if export and reports:
            results["exported"] = export_reports({case.name: reports}, settings.output_dir)

        # STEP 5: POST-LOAD VALIDATION
        log_banner(logger, "  STEP 5: POST-LOAD VALIDATION", width=70)
        written = {**case.staging_models, **case.gold_models}
        post_load_report = validate_post_load(engine, written)
        results["post_load_validation"] = post_load_report
        if not post_load_report.passed:
            logger.error("Post-load validation failed!")
        else:
            logger.info("Post-load validation passed!")

        log_banner(logger, f"PIPELINE '{case.name}' COMPLETED SUCCESSFULLY", width=70)
        logger.info("Summary:")
        logger.info(f"  Bronze: {results['bronze']}")
        logger.info(f"  Silver: {silver_result['counts']} (batch: {silver_result['batch_id']})")
        logger.info(f"  Gold: {results['gold']}")
        logger.info(f"  Reports: {', '.join(reports) or '-'}")
        return results

    except Exception as e:
        logger.error(f"PIPELINE '{case.name}' FAILED: {e}")
        raise


def run_all(
    case_studies: Optional[Sequence[str]] = None,
    data_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
    **kwargs
) -> Dict[str, Dict[str, Any]]:
    """
    Run several case studies one after the other (all registered by default).

    Each case study reads its CSV files from ``<data_dir>/<case study>``.
    """
    settings = settings or get_settings()
    data_dir = data_dir or settings.data_dir
    names: List[str] = list(case_studies or CASE_STUDIES)

    results = {}
    for name in names:
        results[name] = run_case_study(name, data_dir=os.path.join(data_dir, name), settings=settings, **kwargs)
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the case-study pipelines.")
    parser.add_argument("case_studies", nargs="*", metavar="case_study",
                        help=f"Case studies to run (default: all). One of: {', '.join(sorted(CASE_STUDIES))}")
    parser.add_argument("--data-dir", help="Root folder holding one CSV folder per case study")
    parser.add_argument("--extract", action="store_true", help="Download the CSV files from MinIO first")
    parser.add_argument("--no-export", action="store_true", help="Do not write report CSV files")
    parser.add_argument("--strict", action="store_true", help="Abort when staging validation fails")
    args = parser.parse_args(argv)

    settings = get_settings()
    log_file = None
    if settings.log_dir:
        log_file = create_run_log_file(settings.log_dir, "_".join(args.case_studies) or "all")
    configure_logging(log_file=log_file)

    run_all(
        args.case_studies or None,
        data_dir=args.data_dir,
        settings=settings,
        extract=args.extract,
        export=not args.no_export,
        skip_on_validation_fail=args.strict,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
