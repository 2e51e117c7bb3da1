"""Logging utilities for consistent logging across modules."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..model import ReportStatus, SearchResult

logger = logging.getLogger(__name__)

_STATUS_LEVELS = {
    ReportStatus.PASS: logging.INFO,
    ReportStatus.INFO: logging.INFO,
    ReportStatus.SKIP: logging.WARNING,
    ReportStatus.FAIL: logging.ERROR,
}


def _log_path(log_dir: Optional[str] = None) -> Path:
    log_path = Path(log_dir or os.getenv("JIRA_REPORTING_LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)
    return log_path


def setup_logging(log_dir: Optional[str] = None) -> None:
    """Setup logging configuration."""
    log_path = _log_path(log_dir)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_path / "jira_reporting.log"),
            logging.StreamHandler()
        ]
    )


def log_status(status: ReportStatus, message: str) -> None:
    """Log a test-report message at the level matching its status."""
    status = ReportStatus(status)
    logger.log(_STATUS_LEVELS[status], f"[{status.value}] {message}")


def log_search_result(result: SearchResult, status: ReportStatus = ReportStatus.PASS) -> None:
    """Log the counts of a search and one line per returned issue."""
    log_status(
        status,
        f"JIRA search completed: {result.total} total issues, {len(result.issues)} returned",
    )
    for issue in result.issues:
        log_status(status, f"Issue: {issue.describe()}")


def log_error(error_message: str, error_data: str = "", log_dir: Optional[str] = None) -> None:
    """Log error messages with optional error data."""
    try:
        log_path = _log_path(log_dir)

        # Create timestamped error log file
        timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
        error_file = log_path / f"error-{timestamp}.log"

        with open(error_file, "w", encoding="utf-8") as f:
            f.write(f"Error occurred at: {datetime.now().isoformat()}\n")
            f.write(f"Error message: {error_message}\n")
            if error_data:
                f.write(f"Error data:\n{error_data}\n")

        logger.error(f"Error logged to: {error_file}")

    except OSError as e:
        logger.error(f"Failed to log error: {e}")
