import pytest

from jira_reporting.config import JiraConfig, ReportingConfig
from jira_reporting.jira_client import IssueTrackerClient
from tests.fake_jira import FakeJira


@pytest.fixture
def fake_jira(monkeypatch):
    fake = FakeJira()

    def connect(**kwargs):
        fake.connect_kwargs = kwargs
        return fake

    monkeypatch.setattr("jira_reporting.jira_client.JIRA", connect)
    return fake


@pytest.fixture
def jira_config():
    return JiraConfig(url="https://test-jira.atlassian.net", user_id="test-user", token="test-token")


@pytest.fixture
def client(fake_jira, jira_config):
    return IssueTrackerClient(jira_config, ReportingConfig())


@pytest.fixture
def screenshot(tmp_path):
    path = tmp_path / "DEMOAUTOMATION[TOBEDELETED].png"
    path.write_bytes(b"\x89PNG fake image data")
    return path
