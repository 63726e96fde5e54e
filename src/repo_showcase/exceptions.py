"""Centralized exception hierarchy for the repo-showcase package.

All domain-specific exceptions inherit from ``RepoShowcaseError`` so
callers can catch the entire family with a single ``except`` clause.
"""

from __future__ import annotations


class RepoShowcaseError(Exception):
    """Base exception for all repo-showcase errors."""


# ---------------------------------------------------------------------------
# Upstream errors
# ---------------------------------------------------------------------------


class UpstreamError(RepoShowcaseError):
    """Base exception for failed calls to the GitHub API."""


class UpstreamUnavailable(UpstreamError):
    """Raised on network failure, timeout, or a non-2xx upstream status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MalformedUpstreamResponse(UpstreamError):
    """Raised when the upstream body cannot be parsed into the expected shape."""
