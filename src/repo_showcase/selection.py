"""Heuristic selection of the repositories to feature on the projects page.

The GitHub REST API does not expose an account's pinned repositories, so
the list is approximated: flagship projects named in an allow-list come
first, followed by the most popular and most recently active originals.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from repo_showcase.models import RepositorySummary, UpstreamRepository

DEFAULT_FEATURED_NAMES: tuple[str, ...] = ("pharmup", "seculearn")
DEFAULT_MAX_RESULTS = 6
DEFAULT_MIN_RESULTS = 3
DEFAULT_RECENT_DAYS = 90


def is_featured(name: str, featured_names: Iterable[str]) -> bool:
    """Return True if ``name`` contains any featured substring, ignoring case."""
    lowered = name.lower()
    return any(featured.lower() in lowered for featured in featured_names if featured)


def is_notable(repo: UpstreamRepository, cutoff: datetime) -> bool:
    """Starred, described, or updated on or after ``cutoff``."""
    return repo.stargazers_count > 0 or bool(repo.description) or repo.updated > cutoff


def select_pinned(
    raw: Sequence[UpstreamRepository],
    *,
    featured_names: Iterable[str],
    fallback: Sequence[RepositorySummary],
    now: datetime,
    max_results: int = DEFAULT_MAX_RESULTS,
    min_results: int = DEFAULT_MIN_RESULTS,
    recent_days: int = DEFAULT_RECENT_DAYS,
) -> list[RepositorySummary]:
    """Pick and normalize the repositories to display.

    Args:
        raw: Repositories in upstream order (most recently updated first).
        featured_names: Substrings that mark a repository as flagship.
        fallback: Returned unchanged when no original repository exists.
        now: Reference time for the recency window.
        max_results: Cap on the number of returned repositories.
        min_results: How many originals to keep when nothing else qualifies.
        recent_days: Width of the recency window in days.

    Returns:
        Featured repositories in upstream order, then the remaining notable
        repositories by stars and recency, each with placeholder text
        filled in.
    """
    featured_names = tuple(featured_names)
    originals = [repo for repo in raw if not repo.fork]

    featured = [repo for repo in originals if is_featured(repo.name, featured_names)]
    cutoff = now - timedelta(days=recent_days)
    others = [
        repo
        for repo in originals
        if not is_featured(repo.name, featured_names) and is_notable(repo, cutoff)
    ]
    others.sort(key=lambda repo: (repo.stargazers_count, repo.updated), reverse=True)

    selected = [*featured, *others][:max_results]
    if not selected:
        selected = originals[:min_results]
    if not selected:
        return list(fallback)

    return [repo.to_summary() for repo in selected]
