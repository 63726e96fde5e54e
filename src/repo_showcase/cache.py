"""In-process cache of GitHub listings with stale-on-error fallback.

Entries are keyed by account (``pinned_repos_<account>``,
``profile_<account>``) and become stale after ``ttl_seconds``. Stale
entries are never evicted: they are served whenever a refresh fails.
Only ``clear_cache`` removes them.

The repository listing path is total: every upstream failure degrades
to stale data or the static fallback dataset. The profile path has no
static fallback and raises ``UpstreamUnavailable`` when nothing is
cached.
"""

from __future__ import annotations

import threading
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from repo_showcase.exceptions import UpstreamError, UpstreamUnavailable
from repo_showcase.fallback import DEFAULT_FALLBACK_REPOSITORIES
from repo_showcase.models import (
    CacheEntry,
    CacheStats,
    ListingSource,
    ProfileLookup,
    RepositoryListing,
)
from repo_showcase.selection import (
    DEFAULT_FEATURED_NAMES,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MIN_RESULTS,
    DEFAULT_RECENT_DAYS,
    select_pinned,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from repo_showcase.github import GitHubClient
    from repo_showcase.models import GitHubProfile, RepositorySummary

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
FETCH_PAGE_SIZE = 100


def pinned_repos_key(account: str) -> str:
    return f"pinned_repos_{account}"


def profile_key(account: str) -> str:
    return f"profile_{account}"


class RepositoryCache:
    """Cache-then-fetch-then-fallback access to GitHub repository data.

    Attributes:
        ttl_seconds: Age after which an entry is refreshed on next read.
        featured_names: Substrings that mark a repository as flagship.
        fallback: Dataset served when nothing is cached and GitHub fails.
    """

    def __init__(
        self,
        client: GitHubClient,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        featured_names: Iterable[str] = DEFAULT_FEATURED_NAMES,
        fallback: Sequence[RepositorySummary] = DEFAULT_FALLBACK_REPOSITORIES,
        max_results: int = DEFAULT_MAX_RESULTS,
        min_results: int = DEFAULT_MIN_RESULTS,
        recent_days: int = DEFAULT_RECENT_DAYS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            msg = f"ttl_seconds must be positive, got {ttl_seconds}"
            raise ValueError(msg)
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.featured_names = tuple(featured_names)
        self.fallback = tuple(fallback)
        self._max_results = max_results
        self._min_results = min_results
        self._recent_days = recent_days
        self._clock = clock

        self._entries: dict[str, CacheEntry] = {}
        # Guards the entry map only; never held across an upstream call.
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Repository listings
    # ------------------------------------------------------------------

    def fetch_pinned_repositories(self, account: str) -> list[RepositorySummary]:
        """Return the featured repositories for ``account``. Never raises."""
        return self.fetch_pinned_listing(account).repos

    def fetch_pinned_listing(self, account: str) -> RepositoryListing:
        """Like ``fetch_pinned_repositories`` but reports where the data came from."""
        key = pinned_repos_key(account)
        entry = self._get_entry(key)
        if entry is not None and not self._is_stale(entry):
            logger.debug("github_cache_hit", key=key)
            return RepositoryListing(repos=list(entry.value), source=ListingSource.CACHE)

        try:
            raw = self._client.list_repositories(account, per_page=FETCH_PAGE_SIZE)
        except UpstreamError as exc:
            logger.warning(
                "github_fetch_failed",
                key=key,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            # The entry may have been refreshed by a concurrent caller.
            entry = self._get_entry(key)
            if entry is not None:
                logger.info("serving_stale_cache", key=key)
                return RepositoryListing(
                    repos=list(entry.value), source=ListingSource.STALE
                )
            logger.info("serving_fallback_dataset", key=key, count=len(self.fallback))
            return RepositoryListing(
                repos=list(self.fallback), source=ListingSource.FALLBACK
            )

        repos = select_pinned(
            raw,
            featured_names=self.featured_names,
            fallback=self.fallback,
            now=datetime.fromtimestamp(self._clock(), tz=UTC),
            max_results=self._max_results,
            min_results=self._min_results,
            recent_days=self._recent_days,
        )
        self._store(key, tuple(repos))
        logger.info(
            "github_repositories_fetched",
            key=key,
            fetched=len(raw),
            selected=len(repos),
        )
        return RepositoryListing(repos=repos, source=ListingSource.LIVE)

    def refresh(self, account: str) -> RepositoryListing:
        """Drop every entry, then fetch ``account``'s listing from GitHub."""
        self.clear_cache()
        return self.fetch_pinned_listing(account)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def fetch_profile(self, account: str) -> GitHubProfile:
        """Return ``account``'s profile, serving a stale copy on failure.

        Raises:
            UpstreamUnavailable: If GitHub fails and no profile is cached.
        """
        return self.fetch_profile_lookup(account).profile

    def fetch_profile_lookup(self, account: str) -> ProfileLookup:
        """Like ``fetch_profile`` but reports where the profile came from."""
        key = profile_key(account)
        entry = self._get_entry(key)
        if entry is not None and not self._is_stale(entry):
            logger.debug("github_cache_hit", key=key)
            return ProfileLookup(profile=entry.value, source=ListingSource.CACHE)

        try:
            profile = self._client.get_profile(account)
        except UpstreamError as exc:
            logger.warning(
                "github_profile_fetch_failed",
                key=key,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            entry = self._get_entry(key)
            if entry is not None:
                logger.info("serving_stale_cache", key=key)
                return ProfileLookup(profile=entry.value, source=ListingSource.STALE)
            if isinstance(exc, UpstreamUnavailable):
                raise
            raise UpstreamUnavailable(
                f"GitHub profile for {account!r} is unavailable: {exc}"
            ) from exc

        self._store(key, profile)
        return ProfileLookup(profile=profile, source=ListingSource.LIVE)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_cache_valid(self, key: str) -> bool:
        """True iff an entry exists under ``key`` and is younger than the ttl."""
        entry = self._get_entry(key)
        return entry is not None and not self._is_stale(entry)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def clear_cache(self) -> None:
        with self._lock:
            cleared = len(self._entries)
            self._entries.clear()
        logger.info("github_cache_cleared", entries=cleared)

    def get_cache_stats(self) -> CacheStats:
        with self._lock:
            keys = list(self._entries)
        return CacheStats(size=len(keys), keys=keys, ttl_seconds=self.ttl_seconds)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_entry(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def _store(self, key: str, value: Any) -> None:
        entry = CacheEntry(value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def _is_stale(self, entry: CacheEntry) -> bool:
        return entry.is_stale(self._clock(), self.ttl_seconds)
