import pathlib

import pytest

from jira_reporting.config import AppConfig, ReportingConfig
from jira_reporting.model import ReportStatus

EXAMPLE_CONFIG = pathlib.Path(__file__).resolve().parents[1] / "config.example.yml"


def test_load_config(monkeypatch):
    monkeypatch.setenv("JIRA_API_TOKEN", "secret-token")

    cfg = AppConfig.load(EXAMPLE_CONFIG)

    assert cfg.jira.url == "https://your-company.atlassian.net"
    assert cfg.jira.token == "secret-token"
    assert cfg.jira.default_issue_type == "Bug"
    assert cfg.reporting.labels == ["automation"]
    assert cfg.reporting.transitions_for(ReportStatus.PASS) == ["Done"]
    assert cfg.reporting.transitions_for(ReportStatus.FAIL) == ["Reopen", "To Do"]
    assert cfg.reporting.transitions_for(ReportStatus.INFO) == []


def test_token_never_read_from_file(tmp_path, monkeypatch):
    monkeypatch.delenv("JIRA_API_TOKEN", raising=False)
    path = tmp_path / "config.yml"
    path.write_text(
        "jira:\n"
        "  url: https://jira.example.com\n"
        "  user_id: bot\n"
        "  token: from-file\n"
        "reporting:\n"
        "  status_transitions:\n"
        "    pass: Closed\n"
    )

    cfg = AppConfig.load(path)

    assert cfg.jira.token == ""
    assert cfg.reporting.transitions_for(ReportStatus.PASS) == ["Closed"]
    # Unlisted statuses keep their defaults
    assert cfg.reporting.transitions_for(ReportStatus.FAIL) == ["Reopen", "To Do"]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(tmp_path / "nope.yml")


def test_from_env(monkeypatch):
    monkeypatch.setenv("JIRA_URL", "https://jira.example.com")
    monkeypatch.setenv("JIRA_USER_ID", "bot@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "t0ken")
    monkeypatch.setenv("JIRA_MAX_RESULTS", "25")
    monkeypatch.setenv("JIRA_TIMEOUT", "30")

    cfg = AppConfig.from_env()

    assert cfg.jira.url == "https://jira.example.com"
    assert cfg.jira.user_id == "bot@example.com"
    assert cfg.jira.token == "t0ken"
    assert cfg.jira.max_results == 25
    assert cfg.jira.timeout == 30


def test_transitions_for_none_status():
    assert ReportingConfig().transitions_for(None) == []
