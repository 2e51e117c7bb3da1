"""Tests for the jira-reporting command line."""

from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from jira_reporting.cli import cli
from jira_reporting.exceptions import NotFoundError, ValidationError
from jira_reporting.model import (
    DetailLevel,
    IssueSummary,
    ReportStatus,
    SearchResult,
    UpsertAction,
    UpsertResult,
)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("JIRA_REPORTING_LOG_DIR", str(tmp_path / "logs"))
    path = tmp_path / "config.yml"
    path.write_text(
        "jira:\n"
        "  url: https://test-jira.atlassian.net\n"
        "  user_id: test-user\n"
        f"log_dir: {tmp_path / 'logs'}\n"
    )
    return str(path)


@pytest.fixture
def mock_client(monkeypatch):
    instance = MagicMock()
    instance.config.url = "https://test-jira.atlassian.net"
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr("jira_reporting.cli.IssueTrackerClient", factory)
    return instance


def _invoke(config_file, *args):
    return CliRunner().invoke(cli, ["--config", config_file, *args])


def test_create_prints_key(config_file, mock_client):
    mock_client.create_issue.return_value = "TEST-101"

    result = _invoke(config_file, "create", "Test", "UI not working on Chrome", "User cannot log in",
                     "--label", "chrome")

    assert result.exit_code == 0
    assert "Created issue TEST-101" in result.output
    draft = mock_client.create_issue.call_args.args[0]
    assert draft.project == "Test"
    assert draft.labels == ["chrome"]


def test_create_validation_error_exits_non_zero(config_file, mock_client):
    mock_client.create_issue.side_effect = ValidationError("summary must not be empty")

    result = _invoke(config_file, "create", "Test", "", "desc")

    assert result.exit_code == 1
    assert "summary must not be empty" in result.output


def test_update_reports_unchanged_issue(config_file, mock_client):
    mock_client.update_issue.return_value = False

    result = _invoke(config_file, "update", "TEST-101", "--status", "info")

    assert result.exit_code == 0
    assert "already up to date" in result.output
    update = mock_client.update_issue.call_args.args[0]
    assert update.status == ReportStatus.INFO


def test_update_unknown_issue(config_file, mock_client):
    mock_client.update_issue.side_effect = NotFoundError("Issue 'TEST-404' does not exist")

    result = _invoke(config_file, "update", "TEST-404", "--description", "new")

    assert result.exit_code == 1
    assert "TEST-404" in result.output


def test_upsert_reports_branch(config_file, mock_client, tmp_path):
    shot = tmp_path / "shot.png"
    shot.write_bytes(b"png")
    mock_client.upsert_issue.return_value = UpsertResult(key="TEST-7", action=UpsertAction.UPDATED)

    result = _invoke(config_file, "upsert", "Test", "Login fails", "details", "--attach", str(shot))

    assert result.exit_code == 0
    assert "Updated issue TEST-7" in result.output
    args = mock_client.upsert_issue.call_args.args
    assert args == (ReportStatus.FAIL, "Login fails", "details", "Test", str(shot))


def test_attach(config_file, mock_client):
    result = _invoke(config_file, "attach", "TEST-7", "shot.png")

    assert result.exit_code == 0
    mock_client.update_issue_attachment.assert_called_once_with("TEST-7", "shot.png")


def test_search_renders_table(config_file, mock_client):
    mock_client.search_issues.return_value = SearchResult(total=1, issues=[
        IssueSummary(key="SKP-277", summary="Checkout fails"),
    ])

    result = _invoke(config_file, "search", "key='SKP-277'", "--all-fields")

    assert result.exit_code == 0
    assert "SKP-277" in result.output
    assert "Unassigned" in result.output
    query = mock_client.search_issues.call_args.args[0]
    assert query.detail == DetailLevel.ALL_FIELDS


def test_search_without_results(config_file, mock_client):
    mock_client.search_issues.return_value = SearchResult.empty()

    result = _invoke(config_file, "search", "project = TEST")

    assert result.exit_code == 0
    assert "No issues found" in result.output


def test_test_connection(config_file, mock_client):
    mock_client.test_connection.return_value = True

    result = _invoke(config_file, "test-connection")

    assert result.exit_code == 0
    assert "Jira connection successful" in result.output


def test_missing_config_file(tmp_path, monkeypatch, mock_client):
    monkeypatch.setenv("JIRA_REPORTING_LOG_DIR", str(tmp_path / "logs"))

    result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "search", "project = TEST"])

    assert result.exit_code == 1
    assert "Error searching issues" in result.output
