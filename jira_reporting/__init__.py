"""Jira reporting - write automated test results back to Jira.

- jira_reporting.jira_client: IssueTrackerClient, the Jira facade
- jira_reporting.model: request and result models
- jira_reporting.config: YAML / environment configuration
- jira_reporting.common: logging and CSV test-step helpers
"""

__version__ = "0.1.0"

from .config import AppConfig, JiraConfig, ReportingConfig
from .exceptions import (
    AttachmentError,
    JiraReportingError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from .jira_client import IssueTrackerClient
from .model import (
    Attachment,
    DetailLevel,
    IssueDraft,
    IssueSummary,
    IssueUpdate,
    ReportStatus,
    SearchQuery,
    SearchResult,
    UpsertAction,
    UpsertResult,
)

__all__ = [
    "AppConfig",
    "JiraConfig",
    "ReportingConfig",
    "IssueTrackerClient",
    "JiraReportingError",
    "ValidationError",
    "NotFoundError",
    "AttachmentError",
    "RemoteError",
    "Attachment",
    "DetailLevel",
    "IssueDraft",
    "IssueSummary",
    "IssueUpdate",
    "ReportStatus",
    "SearchQuery",
    "SearchResult",
    "UpsertAction",
    "UpsertResult",
]
