"""Data models for repository listings, profiles, and cache bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

NO_DESCRIPTION = "No description available"
UNKNOWN_LANGUAGE = "Unknown"

GITHUB_URL_PATTERN = r"^https://github\.com/[^/\s]+/[^/\s]+/?$"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given.

    Raises:
        ValueError: If ``value`` is not a valid ISO-8601 timestamp.
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _check_timestamp(value: str) -> str:
    parse_timestamp(value)
    return value


Timestamp = Annotated[str, AfterValidator(_check_timestamp)]


class RepositorySummary(BaseModel):
    """Normalized repository record served to the projects page.

    Serialized with ``by_alias=True`` this produces the upstream field
    names (``html_url``, ``stargazers_count``) the frontend consumes.
    ``is_fork`` only drives selection and is never serialized.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    url: str = Field(alias="html_url", pattern=GITHUB_URL_PATTERN)
    language: str = Field(min_length=1)
    star_count: int = Field(alias="stargazers_count", ge=0)
    updated_at: Timestamp
    topics: tuple[str, ...] = ()
    homepage: str | None = None
    is_fork: bool = Field(default=False, alias="fork", exclude=True)


class UpstreamRepository(BaseModel):
    """One repository object as returned by ``GET /users/{account}/repos``."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = Field(min_length=1)
    description: str | None = None
    html_url: str = Field(pattern=GITHUB_URL_PATTERN)
    language: str | None = None
    stargazers_count: int = Field(default=0, ge=0)
    updated_at: Timestamp
    topics: list[str] | None = None
    homepage: str | None = None
    fork: bool = False

    @property
    def updated(self) -> datetime:
        return parse_timestamp(self.updated_at)

    def to_summary(self) -> RepositorySummary:
        """Return the normalized summary with placeholder text filled in."""
        return RepositorySummary(
            id=self.id,
            name=self.name,
            description=self.description or NO_DESCRIPTION,
            url=self.html_url,
            language=self.language or UNKNOWN_LANGUAGE,
            star_count=self.stargazers_count,
            updated_at=self.updated_at,
            topics=tuple(self.topics or ()),
            homepage=self.homepage,
            is_fork=self.fork,
        )


class GitHubProfile(BaseModel):
    """Public profile fields exposed by ``GET /users/{account}``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    login: str = Field(min_length=1)
    name: str | None = None
    bio: str | None = None
    location: str | None = None
    blog: str | None = None
    public_repos: int = Field(default=0, ge=0)
    followers: int = Field(default=0, ge=0)
    following: int = Field(default=0, ge=0)
    avatar_url: str | None = None
    html_url: str | None = None


# ---------------------------------------------------------------------------
# Cache bookkeeping
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CacheEntry:
    """A cached value and the wall-clock time it was stored."""

    value: Any
    stored_at: float

    def is_stale(self, now: float, ttl_seconds: float) -> bool:
        return now - self.stored_at >= ttl_seconds


class CacheStats(BaseModel):
    """Read-only snapshot of the cache for operational visibility."""

    size: int = Field(ge=0)
    keys: list[str] = Field(default_factory=list)
    ttl_seconds: float = Field(gt=0)


class ListingSource(StrEnum):
    """Where a repository listing came from."""

    LIVE = "live"
    CACHE = "cache"
    STALE = "stale"
    FALLBACK = "fallback"


class RepositoryListing(BaseModel):
    """Repository list plus the provenance flag surfaced to the UI."""

    repos: list[RepositorySummary]
    source: ListingSource

    @property
    def cached(self) -> bool:
        return self.source is not ListingSource.LIVE


class ProfileLookup(BaseModel):
    """A profile plus where it came from.

    ``source`` is never ``FALLBACK``: profiles have no static dataset.
    """

    profile: GitHubProfile
    source: ListingSource

    @property
    def cached(self) -> bool:
        return self.source is not ListingSource.LIVE
