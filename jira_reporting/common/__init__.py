"""Common utilities and shared functionality."""

from .logging_utils import (
    log_error,
    log_search_result,
    log_status,
    setup_logging,
)
from .steps_csv import (
    format_steps_description,
    read_test_steps,
)

__all__ = [
    # Logging utilities
    "setup_logging",
    "log_status",
    "log_search_result",
    "log_error",
    # CSV test steps
    "read_test_steps",
    "format_steps_description",
]
