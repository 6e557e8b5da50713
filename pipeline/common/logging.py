"""
Logging setup for pipeline runs.
Console output plus an optional timestamped file per run.
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to a log file; parent folders are created
        log_format: Log message format
        date_format: Date format in log messages
    """
    formatter = logging.Formatter(log_format, date_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def create_run_log_file(base_dir: str = "logs", case_study: str = "all") -> str:
    """
    Build a timestamped log file path for one pipeline run.

    Returns:
        Path like ``logs/attendance_20240101_120000.log``
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_dir = Path(base_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / f"{case_study}_{timestamp}.log")


def log_banner(logger: logging.Logger, title: str, char: str = "=", width: int = 60) -> None:
    """Log a title framed by separator lines."""
    logger.info(char * width)
    logger.info(title)
    logger.info(char * width)
