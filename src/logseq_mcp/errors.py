"""Exceptions raised by the Logseq client and tool handlers."""

from __future__ import annotations


class LogseqError(Exception):
    """Base class for failures surfaced to tool callers."""


class AuthError(LogseqError):
    """The Logseq API rejected the bearer token (HTTP 401)."""


class RemoteError(LogseqError):
    """The Logseq API answered with a non-success status other than 401."""

    def __init__(self, status: int, reason: str = "") -> None:
        super().__init__(f"Logseq API error: {status} {reason}".rstrip())
        self.status = status
        self.reason = reason


class ValidationError(LogseqError, ValueError):
    """A required parameter is missing or malformed. Raised before any remote call."""


class NotFoundError(LogseqError):
    """The requested page or block does not exist."""
