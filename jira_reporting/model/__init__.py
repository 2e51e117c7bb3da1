"""Request and result models for Jira reporting."""

from .issue_models import (
    STANDARD_FIELDS,
    Attachment,
    DetailLevel,
    IssueDraft,
    IssueKey,
    IssueSummary,
    IssueUpdate,
    ReportStatus,
    SearchQuery,
    SearchResult,
    UpsertAction,
    UpsertResult,
)

__all__ = [
    "STANDARD_FIELDS",
    "Attachment",
    "DetailLevel",
    "IssueDraft",
    "IssueKey",
    "IssueSummary",
    "IssueUpdate",
    "ReportStatus",
    "SearchQuery",
    "SearchResult",
    "UpsertAction",
    "UpsertResult",
]
