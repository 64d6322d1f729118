"""eventlog.core.exceptions

Errors are part of the interface.
"""

from __future__ import annotations


class EventLogError(Exception):
    """Base exception for eventlog."""


class ConfigError(EventLogError):
    """Configuration is missing, invalid, or inconsistent."""


class ValidationError(EventLogError):
    """An incoming event payload was rejected.

    ``index`` is set when the payload was one item of a batch.
    """

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.index = index


class AppendLogError(EventLogError):
    """Append log IO failed. Nothing past the failed write was indexed."""


class StorageError(EventLogError):
    """Client-local persistence failed (unwritable directory, full disk)."""


class DeliveryError(EventLogError):
    """A send to the event API did not get a success response."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
