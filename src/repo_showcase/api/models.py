"""Response envelopes for the GitHub endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from repo_showcase.models import (
    CacheStats,
    GitHubProfile,
    ListingSource,
    RepositorySummary,
)


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class RepositoriesResponse(BaseModel):
    """Listing payload; ``cached`` is true unless GitHub was just queried."""

    success: bool = True
    repos: list[RepositorySummary]
    cached: bool
    source: ListingSource
    timestamp: str = Field(default_factory=_now_iso)


class ProfileResponse(BaseModel):
    success: bool = True
    profile: GitHubProfile
    cached: bool
    timestamp: str = Field(default_factory=_now_iso)


class RefreshResponse(BaseModel):
    success: bool = True
    message: str
    repos: list[RepositorySummary]
    source: ListingSource
    timestamp: str = Field(default_factory=_now_iso)


class CacheStatsResponse(BaseModel):
    success: bool = True
    cache: CacheStats
    timestamp: str = Field(default_factory=_now_iso)
