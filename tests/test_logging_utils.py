import logging

from jira_reporting.common import log_error, log_search_result, log_status
from jira_reporting.model import IssueSummary, ReportStatus, SearchResult


def test_log_status_levels(caplog):
    caplog.set_level(logging.INFO)

    log_status(ReportStatus.PASS, "created SKP-1")
    log_status(ReportStatus.FAIL, "login failed")
    log_status(ReportStatus.SKIP, "not run")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels == [
        (logging.INFO, "[PASS] created SKP-1"),
        (logging.ERROR, "[FAIL] login failed"),
        (logging.WARNING, "[SKIP] not run"),
    ]


def test_log_search_result_coalesces_missing_fields(caplog):
    caplog.set_level(logging.INFO)
    result = SearchResult(total=5, issues=[
        IssueSummary(key="SKP-277", summary="Checkout fails"),
        IssueSummary(key="SKP-278", summary="Login", status="Done", assignee="Jane Smith"),
    ])

    log_search_result(result)

    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "[PASS] JIRA search completed: 5 total issues, 2 returned"
    assert messages[1] == "[PASS] Issue: SKP-277 | Checkout fails | N/A | Unassigned"
    assert messages[2] == "[PASS] Issue: SKP-278 | Login | Done | Jane Smith"


def test_log_error_writes_file(tmp_path):
    log_error("Upload failed", "HTTP 500", log_dir=str(tmp_path))

    files = list(tmp_path.glob("error-*.log"))
    assert len(files) == 1
    content = files[0].read_text()
    assert "Error message: Upload failed" in content
    assert "HTTP 500" in content
