"""
Exception types for the sync worker.

Only configuration and authorization failures are meant to reach the
process boundary; everything that goes wrong inside a single task is
converted into a queue status string by the worker.
"""


class SyncError(Exception):
    """Base class for worker errors."""


class ConfigurationError(SyncError):
    """Raised when a required setting is missing or malformed."""


class AuthorizationError(SyncError):
    """Raised when the spreadsheet rejects our credentials."""
