from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .model import ReportStatus

# Load environment variables from .env file
load_dotenv()


def _load_file(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _default_transitions() -> Dict[str, List[str]]:
    return {
        ReportStatus.PASS.value: ["Done"],
        ReportStatus.FAIL.value: ["Reopen", "To Do"],
        ReportStatus.INFO.value: [],
        ReportStatus.SKIP.value: [],
    }


@dataclass
class JiraConfig:
    """Settings required to connect to Jira."""

    url: str
    user_id: str
    token: str = ""
    default_issue_type: str = "Bug"
    max_results: int = 50
    timeout: Optional[int] = None


@dataclass
class ReportingConfig:
    """How test run results are written back to Jira."""

    # Transition names tried in order for each reported status
    status_transitions: Dict[str, List[str]] = field(default_factory=_default_transitions)
    labels: List[str] = field(default_factory=list)

    def transitions_for(self, status: Optional[ReportStatus]) -> List[str]:
        if status is None:
            return []
        names = self.status_transitions.get(ReportStatus(status).value) or []
        if isinstance(names, str):
            return [names]
        return list(names)


@dataclass
class AppConfig:
    """Top level application configuration."""

    jira: JiraConfig
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    log_dir: Optional[str] = None

    @staticmethod
    def load(path: str | Path) -> "AppConfig":
        """Load configuration from a YAML file."""

        data = _load_file(path)
        jira_data = data["jira"].copy()

        # Always load sensitive data from environment variables (never from config file)
        jira_data["token"] = os.getenv("JIRA_API_TOKEN", "")
        jira = JiraConfig(**jira_data)

        reporting_data = data.get("reporting", {}) or {}
        transitions = _default_transitions()
        for status, names in (reporting_data.get("status_transitions") or {}).items():
            transitions[ReportStatus(str(status).upper()).value] = (
                [names] if isinstance(names, str) else list(names or [])
            )
        reporting = ReportingConfig(
            status_transitions=transitions,
            labels=list(reporting_data.get("labels", [])),
        )

        return AppConfig(
            jira=jira,
            reporting=reporting,
            log_dir=data.get("log_dir") or os.getenv("JIRA_REPORTING_LOG_DIR"),
        )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        timeout = os.getenv("JIRA_TIMEOUT")
        return cls(
            jira=JiraConfig(
                url=os.getenv("JIRA_URL", ""),
                user_id=os.getenv("JIRA_USER_ID", ""),
                token=os.getenv("JIRA_API_TOKEN", ""),
                default_issue_type=os.getenv("JIRA_DEFAULT_ISSUE_TYPE", "Bug"),
                max_results=int(os.getenv("JIRA_MAX_RESULTS", "50")),
                timeout=int(timeout) if timeout else None,
            ),
            log_dir=os.getenv("JIRA_REPORTING_LOG_DIR", "logs"),
        )
