from pipeline.bronze.loader import (
    run_bronze_load,
    load_csv_to_bronze,
    read_raw_csv,
)
from pipeline.bronze.extractor import extract_from_minio

__all__ = [
    "run_bronze_load",
    "load_csv_to_bronze",
    "read_raw_csv",
    "extract_from_minio",
]
