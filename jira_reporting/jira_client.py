"""Jira client used to report automated test results"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

import requests
from jira import JIRA
from jira.exceptions import JIRAError

from .common.steps_csv import format_steps_description, read_test_steps
from .config import JiraConfig, ReportingConfig
from .exceptions import AttachmentError, NotFoundError, RemoteError, ValidationError
from .model import (
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

logger = logging.getLogger(__name__)

ISSUE_KEY_PATTERN = re.compile(r"^([A-Z][A-Z0-9_]*?)[-_ ]?(\d+)$")

# Characters with special meaning inside a JQL text search
JQL_TEXT_RESERVED = set('+-&|!(){}[]^~*?\\:')

AttachmentLike = Union[Attachment, str, Path]


class IssueTrackerClient:
    """Create, update and search Jira issues on behalf of test automation"""

    def __init__(self, config: JiraConfig, reporting: Optional[ReportingConfig] = None):
        self.config = config
        self.reporting = reporting or ReportingConfig()
        self._jira = None
        self._connect()

    def _connect(self):
        """Establish connection to Jira"""
        try:
            self._jira = JIRA(
                server=self.config.url,
                basic_auth=(self.config.user_id, self.config.token),
                timeout=self.config.timeout,
            )
            logger.info(f"Connected to Jira at {self.config.url}")
        except JIRAError as e:
            logger.error(f"Failed to connect to Jira: {e}")
            raise self._remote_error(e, "connect to Jira") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to connect to Jira: {e}")
            raise RemoteError(f"Failed to connect to Jira: {e}") from e

    def test_connection(self) -> bool:
        """Test if Jira connection is working"""
        try:
            user = self._jira.myself()
            logger.info(f"Connection test successful for user: {user['displayName']}")
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    def create_issue(self, draft: IssueDraft) -> IssueKey:
        """Create a new issue and return the key Jira assigned to it"""
        self._require_text(draft.summary, "summary")
        self._require_text(draft.description, "description")

        project_key = self._project_key(draft.project)
        issue_dict = {
            'project': {'key': project_key},
            'summary': draft.summary,
            'description': draft.description,
            'issuetype': {'name': draft.issue_type or self.config.default_issue_type},
        }
        labels = list(dict.fromkeys([*self.reporting.labels, *draft.labels]))
        if labels:
            issue_dict['labels'] = labels

        try:
            new_issue = self._jira.create_issue(fields=issue_dict)
        except JIRAError as e:
            logger.error(f"Failed to create issue in project {project_key}: {e}")
            raise self._remote_error(e, f"create issue in project '{project_key}'") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to create issue in project '{project_key}': {e}") from e

        key = getattr(new_issue, 'key', None)
        if not key:
            raise RemoteError(f"Jira did not return a key for the new issue in project '{project_key}'")
        logger.info(f"Created issue: {key}")
        return key

    def create_test_issue_from_csv(self, project: str, summary: str, csv_path,
                                   issue_type: Optional[str] = None) -> IssueKey:
        """Create an issue whose description lists the test steps from a CSV file"""
        steps = read_test_steps(csv_path)
        draft = IssueDraft(
            project=project,
            summary=summary,
            description=format_steps_description(steps),
            issue_type=issue_type,
        )
        return self.create_issue(draft)

    def update_issue_attachment(self, key: IssueKey, attachment: AttachmentLike) -> None:
        """Upload a file to an issue, replacing any attachment with the same name"""
        attachment = self._as_attachment(attachment)
        self._require_file(attachment)

        issue = self._fetch_issue(self.resolve_issue_key(key), fields="attachment")
        replaced = [
            existing['id']
            for existing in self._raw_fields(issue).get('attachment') or []
            if existing.get('filename') == attachment.filename
        ]

        try:
            with open(attachment.path, "rb") as fh:
                self._call(f"attach {attachment.filename} to {issue.key}",
                           self._jira.add_attachment,
                           issue=issue.key, attachment=fh, filename=attachment.filename)
        except OSError as e:
            raise AttachmentError(f"Could not read attachment {attachment.path}: {e}") from e

        # Old copies go only once the new upload is confirmed
        for attachment_id in replaced:
            logger.info(f"Replacing attachment {attachment.filename} on {issue.key}")
            self._call(f"delete attachment from {issue.key}",
                       self._jira.delete_attachment, attachment_id)
        logger.info(f"Attached {attachment.filename} to issue: {issue.key}")

    def update_issue(self, update: IssueUpdate) -> bool:
        """Apply status, description and attachment changes to an existing issue.

        Returns False when the issue already matched the requested state and
        nothing was sent to Jira.
        """
        if not update.has_changes():
            raise ValidationError(f"Nothing to update on issue '{update.key}'")
        if update.description is not None:
            self._require_text(update.description, "description")
        if update.attachment is not None:
            self._require_file(update.attachment)

        key = self.resolve_issue_key(update.key, update.project)
        issue = self._fetch_issue(key, fields="summary,description,status,attachment")
        changed = False

        if update.description is not None:
            if self._raw_fields(issue).get('description') != update.description:
                self._call(f"update description of {issue.key}",
                           issue.update, fields={'description': update.description})
                logger.info(f"Updated description of issue: {issue.key}")
                changed = True

        if update.status is not None:
            changed = self._apply_status(issue, update.status) or changed

        if update.attachment is not None:
            self.update_issue_attachment(issue.key, update.attachment)
            changed = True

        if not changed:
            logger.info(f"Issue {issue.key} already up to date")
        return changed

    def upsert_issue(self, status: Optional[ReportStatus], summary: str, description: str,
                     project: str, attachment: Optional[AttachmentLike] = None) -> UpsertResult:
        """Update the issue in ``project`` with this summary, or create it"""
        self._require_text(summary, "summary")
        self._require_text(description, "description")
        if attachment is not None:
            attachment = self._as_attachment(attachment)
            self._require_file(attachment)

        project_key = self._project_key(project)
        existing_key = self._find_issue_by_summary(project_key, summary)

        if existing_key:
            updated = self.update_issue(IssueUpdate(
                key=existing_key,
                status=status,
                description=description,
                attachment=attachment,
            ))
            return UpsertResult(key=existing_key, action=UpsertAction.UPDATED, updated=updated)

        logger.info(f"No issue matching '{summary}' in {project_key}, creating one")
        key = self.create_issue(IssueDraft(project=project_key, summary=summary, description=description))
        if attachment is not None:
            self.update_issue_attachment(key, attachment)
        return UpsertResult(key=key, action=UpsertAction.CREATED)

    def search_issues(self, query: SearchQuery) -> SearchResult:
        """Search for issues using JQL"""
        jql = (query.jql or "").strip()
        if not jql:
            raise ValidationError("JQL query must not be empty")

        if query.detail == DetailLevel.ALL_FIELDS:
            fields = "*all"
        else:
            fields = ",".join(STANDARD_FIELDS)

        try:
            issues = self._jira.search_issues(
                jql,
                maxResults=query.max_results or self.config.max_results,
                fields=fields,
            )
        except JIRAError as e:
            logger.error(f"Failed to search issues with JQL '{jql}': {e}")
            if e.status_code == 400:
                raise ValidationError(f"Invalid JQL '{jql}': {self._parse_jira_error(e)}") from e
            raise self._remote_error(e, f"search issues with JQL '{jql}'") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to search issues with JQL '{jql}': {e}") from e

        summaries = [IssueSummary.from_issue(issue, query.detail) for issue in issues or []]
        total = getattr(issues, 'total', None)
        return SearchResult(total=total if total is not None else len(summaries), issues=summaries)

    def get_open_issues_details(self, jql: str) -> SearchResult:
        """Search returning key, summary, status and assignee per issue"""
        return self.search_issues(SearchQuery(jql=jql, detail=DetailLevel.STANDARD))

    def get_open_issues_all_details(self, jql: str) -> SearchResult:
        """Search returning every field Jira has for each issue"""
        return self.search_issues(SearchQuery(jql=jql, detail=DetailLevel.ALL_FIELDS))

    def resolve_issue_key(self, key: str, project: Optional[str] = None) -> IssueKey:
        """Normalise an issue key such as ``skp 288`` or ``288`` (with a project)"""
        text = (key or "").strip().upper()
        if not text:
            raise ValidationError("Issue key must not be empty")

        if text.isdigit():
            if not project:
                raise ValidationError(f"Issue number '{text}' needs a project to resolve")
            return f"{self._project_key(project)}-{int(text)}"

        match = ISSUE_KEY_PATTERN.match(text)
        if not match:
            raise ValidationError(f"'{key}' is not a valid issue key")
        return f"{match.group(1)}-{int(match.group(2))}"

    def _fetch_issue(self, key: IssueKey, fields: Optional[str] = None) -> Any:
        try:
            return self._jira.issue(key, fields=fields)
        except JIRAError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Issue '{key}' does not exist") from e
            logger.error(f"Failed to get issue {key}: {e}")
            raise self._remote_error(e, f"get issue '{key}'") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to get issue '{key}': {e}") from e

    def _project_key(self, project: str) -> str:
        """Resolve a project key or project name to its key"""
        self._require_text(project, "project")
        try:
            return self._jira.project(project.strip()).key
        except JIRAError as e:
            if e.status_code != 404:
                raise self._remote_error(e, f"get project '{project}'") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to get project '{project}': {e}") from e

        wanted = project.strip().lower()
        for candidate in self._call("list projects", self._jira.projects):
            if wanted in (candidate.key.lower(), candidate.name.lower()):
                return candidate.key
        raise RemoteError(f"Project '{project}' does not exist or is not accessible", status_code=404)

    def _find_issue_by_summary(self, project_key: str, summary: str) -> Optional[IssueKey]:
        jql = (
            f'project = "{project_key}" AND summary ~ "{self._escape_jql_text(summary)}" '
            f'ORDER BY updated DESC'
        )
        try:
            # maxResults=False pages through every fuzzy match before the exact check
            issues = self._jira.search_issues(jql, maxResults=False, fields="summary")
        except JIRAError as e:
            logger.error(f"Failed to look up issue '{summary}' in {project_key}: {e}")
            raise self._remote_error(e, f"look up issue '{summary}'") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to look up issue '{summary}': {e}") from e

        # Text search is fuzzy; only an exact summary counts as the same issue
        wanted = summary.strip().lower()
        for issue in issues or []:
            found = (self._raw_fields(issue).get('summary') or "").strip().lower()
            if found == wanted:
                logger.info(f"Found existing issue {issue.key} for '{summary}'")
                return issue.key
        return None

    def _apply_status(self, issue: Any, status: ReportStatus) -> bool:
        names = self.reporting.transitions_for(status)
        if not names:
            return False

        current = (self._raw_fields(issue).get('status') or {}).get('name') or ""
        if current.lower() in (name.lower() for name in names):
            return False

        transitions = self._call(f"get transitions for {issue.key}", self._jira.transitions, issue.key)
        available = {t['name'].lower(): t['id'] for t in transitions}
        for name in names:
            transition_id = available.get(name.lower())
            if transition_id:
                self._call(f"transition {issue.key}", self._jira.transition_issue, issue.key, transition_id)
                logger.info(f"Transitioned issue {issue.key} via '{name}' for status {ReportStatus(status).value}")
                return True

        logger.warning(
            f"No transition among {names} is available for {issue.key} in status '{current}'"
        )
        return False

    def _call(self, action: str, func, *args, **kwargs):
        """Invoke a Jira API call, translating transport errors"""
        try:
            return func(*args, **kwargs)
        except JIRAError as e:
            logger.error(f"Failed to {action}: {e}")
            raise self._remote_error(e, action) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to {action}: {e}")
            raise RemoteError(f"Failed to {action}: {e}") from e

    @staticmethod
    def _raw_fields(issue: Any) -> dict:
        return (getattr(issue, 'raw', None) or {}).get('fields') or {}

    @staticmethod
    def _require_text(value: Optional[str], name: str) -> None:
        if value is None or not str(value).strip():
            raise ValidationError(f"{name} must not be empty")

    @staticmethod
    def _require_file(attachment: Attachment) -> None:
        if not attachment.exists():
            raise AttachmentError(f"Attachment file missing or empty: {attachment.path}")

    @staticmethod
    def _as_attachment(value: AttachmentLike) -> Attachment:
        if isinstance(value, Attachment):
            return value
        return Attachment(path=Path(value))

    @staticmethod
    def _escape_jql_text(text: str) -> str:
        escaped = []
        for char in text:
            if char in JQL_TEXT_RESERVED:
                escaped.append("\\\\" + char)
            elif char == '"':
                escaped.append('\\"')
            else:
                escaped.append(char)
        return "".join(escaped)

    def _remote_error(self, error: JIRAError, action: str) -> RemoteError:
        return RemoteError(
            f"Failed to {action}: {self._parse_jira_error(error)}",
            status_code=getattr(error, 'status_code', None),
        )

    def _parse_jira_error(self, error: JIRAError) -> str:
        """Parse Jira error response into a readable message"""
        text = getattr(error, 'text', None)
        response = getattr(error, 'response', None)
        if response is not None and getattr(response, 'text', None):
            text = response.text

        if text:
            try:
                error_data = json.loads(text)
            except (json.JSONDecodeError, TypeError):
                return str(text)

            if isinstance(error_data, dict):
                if error_data.get('errorMessages'):
                    return "; ".join(error_data['errorMessages'])
                if error_data.get('errors'):
                    return "; ".join(f"{field}: {message}" for field, message in error_data['errors'].items())

        return str(error)
