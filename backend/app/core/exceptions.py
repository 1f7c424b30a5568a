"""
Exception taxonomy for journal storage and AI analysis.

Storage errors (DuplicateIdError, EntryNotFoundError, StorageError,
InvalidValueError) indicate a caller or medium fault and are never retried.
Analysis errors are recoverable at the caller's discretion; the entry being
analyzed is left as it was.
"""
from typing import Any, Optional


class SpiralJournalError(Exception):
    """Base class for all application errors."""


# Local storage

class DuplicateIdError(SpiralJournalError):
    """An entry with the same id already exists."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry '{entry_id}' already exists")


class EntryNotFoundError(SpiralJournalError):
    """No entry with the given id exists."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry '{entry_id}' not found")


class StorageError(SpiralJournalError):
    """The storage medium failed (disk, quota, database driver)."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        if operation:
            message = f"{operation}: {message}"
        super().__init__(message)


class InvalidValueError(SpiralJournalError):
    """A value does not match the declared type or range of its field."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


# AI analysis

class AnalysisError(SpiralJournalError):
    """The analysis provider failed to produce a result."""

    retryable = False
    user_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AuthError(AnalysisError):
    """The provider rejected the API key."""

    user_message = "AI service authentication failed. Please check your API key."


class RateLimitError(AnalysisError):
    """The provider is throttling requests."""

    retryable = True
    user_message = "Too many requests. Please wait a moment and try again."


class NetworkError(AnalysisError):
    """Timeout, connection failure or provider-side outage."""

    retryable = True
    user_message = "Unable to reach the AI service. Please check your connection."


class MalformedResponseError(AnalysisError):
    """The provider answered with something that is not a valid analysis."""

    user_message = "Unable to process the AI response."


class AnalysisPendingError(SpiralJournalError):
    """An analysis for this entry is already in flight."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Analysis already pending for entry '{entry_id}'")
