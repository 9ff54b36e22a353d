"""
Exception types raised by the archiving pipeline.

Parse failures and required-asset fetch failures abort the current entry.
Description image fetch failures are handled inside the rewriter.
"""

from typing import Optional


class ArchiverError(Exception):
    """Base class for all archiver errors."""


class InvalidIdentifier(ArchiverError, ValueError):
    """Raised when an entry identifier is not a non-negative integer."""

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Invalid entry identifier: {entry_id!r}")


class ParseError(ArchiverError):
    """Raised when a required field cannot be located or parsed."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class FetchError(ArchiverError):
    """Raised when an asset request does not succeed."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            detail = f"HTTP {status} {reason}".rstrip()
        else:
            detail = reason or "request failed"
        super().__init__(f"Failed to download {url}: {detail}")


class WriteError(ArchiverError):
    """Raised when the archive cannot be written to disk."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class SessionNotReadyError(ArchiverError):
    """Raised when the pipeline runs before the login was confirmed."""
