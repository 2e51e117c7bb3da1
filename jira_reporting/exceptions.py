"""Custom exceptions for Jira reporting operations"""


class JiraReportingError(Exception):
    """Base exception for Jira reporting operations"""
    pass


class ValidationError(JiraReportingError, ValueError):
    """Raised when a request is missing required input or is malformed"""
    pass


class NotFoundError(JiraReportingError, LookupError):
    """Raised when a referenced issue does not exist"""
    pass


class AttachmentError(JiraReportingError, OSError):
    """Raised when a local attachment file is missing or unreadable"""
    pass


class RemoteError(JiraReportingError):
    """Raised when Jira rejects a request or cannot be reached"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
