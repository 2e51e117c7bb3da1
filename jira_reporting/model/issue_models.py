"""Pydantic models for Jira reporting requests and results."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

IssueKey = str

STANDARD_FIELDS = ("summary", "status", "assignee")


class ReportStatus(str, Enum):
    """Outcome reported by an automated test run."""

    PASS = "PASS"
    FAIL = "FAIL"
    INFO = "INFO"
    SKIP = "SKIP"


class DetailLevel(str, Enum):
    """How many fields a search fetches per issue."""

    STANDARD = "STANDARD"
    ALL_FIELDS = "ALL_FIELDS"


class IssueDraft(BaseModel):
    """Input for creating a new issue."""
    model_config = ConfigDict(extra="ignore")

    project: str
    summary: str
    description: str
    issue_type: Optional[str] = None
    labels: List[str] = Field(default_factory=list)


class Attachment(BaseModel):
    """A local file to upload to an issue."""

    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        """Return True when the path is a regular, non-empty file."""
        return self.path.is_file() and os.path.getsize(self.path) > 0


class IssueUpdate(BaseModel):
    """Changes to apply to an existing issue."""
    model_config = ConfigDict(extra="ignore")

    key: IssueKey
    status: Optional[ReportStatus] = None
    description: Optional[str] = None
    attachment: Optional[Attachment] = None
    project: Optional[str] = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.status, self.description, self.attachment)
        )


class SearchQuery(BaseModel):
    """A JQL query and the level of detail to fetch."""

    jql: str
    detail: DetailLevel = DetailLevel.STANDARD
    max_results: Optional[int] = None


class IssueSummary(BaseModel):
    """Flattened view of a Jira issue returned by a search."""
    model_config = ConfigDict(extra="ignore")

    key: IssueKey
    summary: Optional[str] = None
    status: Optional[str] = None
    assignee: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_issue(cls, issue: Any, detail: DetailLevel = DetailLevel.STANDARD) -> "IssueSummary":
        """Build a summary from a ``jira.Issue`` using its raw JSON."""
        raw_fields = (getattr(issue, "raw", None) or {}).get("fields") or {}
        status = raw_fields.get("status") or {}
        assignee = raw_fields.get("assignee") or {}

        if detail == DetailLevel.ALL_FIELDS:
            fields = dict(raw_fields)
        else:
            fields = {name: raw_fields.get(name) for name in STANDARD_FIELDS}

        return cls(
            key=issue.key,
            summary=raw_fields.get("summary"),
            status=status.get("name"),
            assignee=assignee.get("displayName"),
            fields=fields,
        )

    def describe(self) -> str:
        status = self.status if self.status is not None else "N/A"
        assignee = self.assignee if self.assignee is not None else "Unassigned"
        return f"{self.key} | {self.summary} | {status} | {assignee}"


class SearchResult(BaseModel):
    """Total match count plus the page of issues returned."""

    total: int = Field(0, ge=0)
    issues: List[IssueSummary] = Field(default_factory=list)

    @model_validator(mode="after")
    def _total_covers_issues(self) -> "SearchResult":
        # Jira may report a stale total; never let it fall below the page size
        if self.total < len(self.issues):
            self.total = len(self.issues)
        return self

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls(total=0, issues=[])


class UpsertAction(str, Enum):
    """Which branch an upsert took."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"


class UpsertResult(BaseModel):
    """Outcome of an update-or-create call."""

    key: IssueKey
    action: UpsertAction
    updated: bool = True

    @property
    def created(self) -> bool:
        return self.action == UpsertAction.CREATED
