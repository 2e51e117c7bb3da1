#!/usr/bin/env python3
"""CLI tool for reporting test results to Jira."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .common import log_error, log_search_result, setup_logging
from .config import AppConfig
from .exceptions import JiraReportingError
from .jira_client import IssueTrackerClient
from .model import (
    DetailLevel,
    IssueDraft,
    IssueUpdate,
    ReportStatus,
    SearchQuery,
)

console = Console()

STATUS_CHOICE = click.Choice([s.value for s in ReportStatus], case_sensitive=False)


def _load_config(ctx) -> AppConfig:
    config_path = ctx.obj["config_path"]
    config = AppConfig.load(config_path) if config_path else AppConfig.from_env()
    setup_logging(config.log_dir)
    return config


def _client(ctx) -> IssueTrackerClient:
    config = _load_config(ctx)
    return IssueTrackerClient(config.jira, config.reporting)


def _fail(action: str, error: Exception) -> None:
    console.print(f"❌ Error {action}: {escape(str(error))}", style="red")
    log_error(f"Error {action}", str(error))
    sys.exit(1)


@click.group()
@click.option("--config", default=None, help="Configuration file path (defaults to environment variables)")
@click.pass_context
def cli(ctx, config):
    """Report automated test results to Jira."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command()
@click.argument("project")
@click.argument("summary")
@click.argument("description")
@click.option("--type", "issue_type", default=None, help="Issue type (defaults to jira.default_issue_type)")
@click.option("--label", "labels", multiple=True, help="Label to add; may be repeated")
@click.pass_context
def create(ctx, project, summary, description, issue_type, labels):
    """Create a new Jira issue."""
    try:
        client = _client(ctx)
        key = client.create_issue(IssueDraft(
            project=project,
            summary=summary,
            description=description,
            issue_type=issue_type,
            labels=list(labels),
        ))
        console.print(f"✅ Created issue {key}", style="green")
    except (JiraReportingError, OSError) as e:
        _fail("creating issue", e)


@cli.command("create-from-csv")
@click.argument("project")
@click.argument("summary")
@click.argument("csv_path", type=click.Path())
@click.option("--type", "issue_type", default=None, help="Issue type (defaults to jira.default_issue_type)")
@click.pass_context
def create_from_csv(ctx, project, summary, csv_path, issue_type):
    """Create an issue listing test steps read from a CSV file."""
    try:
        client = _client(ctx)
        key = client.create_test_issue_from_csv(project, summary, csv_path, issue_type=issue_type)
        console.print(f"✅ Created issue {key}", style="green")
    except (JiraReportingError, OSError) as e:
        _fail("creating issue from CSV", e)


@cli.command()
@click.argument("key")
@click.argument("file_path", type=click.Path())
@click.pass_context
def attach(ctx, key, file_path):
    """Attach a file to an issue, replacing one with the same name."""
    try:
        client = _client(ctx)
        client.update_issue_attachment(key, file_path)
        console.print(f"✅ Attached {escape(file_path)} to {escape(key)}", style="green")
    except (JiraReportingError, OSError) as e:
        _fail("attaching file", e)


@cli.command()
@click.argument("key")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Test result to report")
@click.option("--description", default=None, help="New issue description")
@click.option("--attach", "attach_path", type=click.Path(), default=None, help="File to attach")
@click.option("--project", default=None, help="Project used to resolve a bare issue number")
@click.pass_context
def update(ctx, key, status, description, attach_path, project):
    """Update an existing issue."""
    try:
        client = _client(ctx)
        changed = client.update_issue(IssueUpdate(
            key=key,
            status=ReportStatus(status.upper()) if status else None,
            description=description,
            attachment={"path": attach_path} if attach_path else None,
            project=project,
        ))
        if changed:
            console.print(f"✅ Updated issue {key}", style="green")
        else:
            console.print(f"Issue {key} already up to date", style="dim")
    except (JiraReportingError, OSError) as e:
        _fail("updating issue", e)


@cli.command()
@click.argument("project")
@click.argument("summary")
@click.argument("description")
@click.option("--status", type=STATUS_CHOICE, default=ReportStatus.FAIL.value, show_default=True,
              help="Test result to report")
@click.option("--attach", "attach_path", type=click.Path(), default=None, help="File to attach")
@click.pass_context
def upsert(ctx, project, summary, description, status, attach_path):
    """Update the issue with this summary, or create it."""
    try:
        client = _client(ctx)
        result = client.upsert_issue(
            ReportStatus(status.upper()),
            summary,
            description,
            project,
            attach_path,
        )
        verb = "Created" if result.created else "Updated"
        console.print(f"✅ {verb} issue {result.key}", style="green")
    except (JiraReportingError, OSError) as e:
        _fail("reporting issue", e)


@cli.command()
@click.argument("jql")
@click.option("--all-fields", is_flag=True, help="Fetch every field instead of the standard set")
@click.option("--max-results", type=int, default=None, help="Maximum number of issues to return")
@click.pass_context
def search(ctx, jql, all_fields, max_results: Optional[int]):
    """Search for issues using JQL."""
    try:
        client = _client(ctx)
        detail = DetailLevel.ALL_FIELDS if all_fields else DetailLevel.STANDARD
        result = client.search_issues(SearchQuery(jql=jql, detail=detail, max_results=max_results))
        log_search_result(result)

        if not result.issues:
            console.print("No issues found")
            return

        table = Table(title=f"{result.total} issues, {len(result.issues)} returned")
        table.add_column("Key", style="cyan")
        table.add_column("Summary", style="white")
        table.add_column("Status", style="green")
        table.add_column("Assignee", style="magenta")
        if all_fields:
            table.add_column("Fields", style="dim")

        for issue in result.issues:
            row = [
                issue.key,
                issue.summary or "",
                issue.status if issue.status is not None else "N/A",
                issue.assignee if issue.assignee is not None else "Unassigned",
            ]
            if all_fields:
                row.append(str(len(issue.fields)))
            table.add_row(*(escape(cell) for cell in row))

        console.print(table)
    except (JiraReportingError, OSError) as e:
        _fail("searching issues", e)


@cli.command("test-connection")
@click.pass_context
def test_connection(ctx):
    """Test Jira connection."""
    try:
        client = _client(ctx)
        console.print("🔗 Testing Jira connection...", style="cyan")
        if client.test_connection():
            console.print("✅ Jira connection successful!", style="green")
            console.print(f"Connected to: {client.config.url}", style="dim")
        else:
            console.print("❌ Jira connection failed!", style="red")
            sys.exit(1)
    except (JiraReportingError, OSError) as e:
        _fail("testing connection", e)


if __name__ == "__main__":
    cli()
