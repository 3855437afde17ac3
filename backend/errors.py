"""
Exception classes for the notebook service.

Remote failures are translated into these once, at the Drive client and the
LLM provider boundaries. Routers never catch them; main.py maps each class
to an HTTP status and a generic message.
"""

from typing import Optional


class NotebookError(Exception):
    """
    Base exception class for all notebook errors.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthError(NotebookError):
    """No bearer token was supplied, or Google rejected it."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class NotFoundError(NotebookError):
    """A file or folder id no longer resolves (unknown or trashed)."""

    def __init__(self, message: str, file_id: Optional[str] = None):
        self.file_id = file_id
        super().__init__(message)


class MalformedDataError(NotebookError):
    """Stored content could not be parsed in its expected shape."""


class RemoteOperationError(NotebookError):
    """
    Any other provider-side failure: transport error, quota, 5xx.

    Args:
        message: Error message.
        status_code: HTTP status returned by the provider, if one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AdapterError(NotebookError):
    """The summarization endpoint failed."""
