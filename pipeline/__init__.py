# pipeline/__init__.py
"""
Case-study pipelines on a medallion architecture.

Each case study runs the same three layers:
- Bronze: CSV exports loaded verbatim into typed raw tables
- Silver: cleaned, de-duplicated staging tables
- Gold: denormalized analytics tables and descriptive reports

Usage:
    from pipeline.orchestrator import run_case_study
    results = run_case_study("attendance")

    # Or run individual layers:
    from pipeline.bronze import run_bronze_load
    from pipeline.silver import run_silver_transform
    from pipeline.gold import run_gold_load, build_reports
"""

__version__ = "1.0.0"
