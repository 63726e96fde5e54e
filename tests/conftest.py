"""Shared pytest fixtures for the repo-showcase test suite."""

from __future__ import annotations

import itertools
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
import structlog

from repo_showcase.cache import RepositoryCache
from repo_showcase.models import GitHubProfile, UpstreamRepository

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

NOW = datetime(2026, 1, 15, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging calls made by a test (CLI commands call it)."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler).__module__ == "logging":
            handler.close()
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW.timestamp())


# ---------------------------------------------------------------------------
# Upstream payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def raw_repo() -> Callable[..., dict[str, Any]]:
    """Factory for upstream repository JSON objects."""
    ids = itertools.count(100)

    def _make(
        name: str,
        *,
        stars: int = 0,
        fork: bool = False,
        description: str | None = "A project",
        language: str | None = "Python",
        updated_at: str = "2025-12-01T10:00:00Z",
        topics: list[str] | None = None,
        homepage: str | None = None,
    ) -> dict[str, Any]:
        return {
            "id": next(ids),
            "name": name,
            "description": description,
            "html_url": f"https://github.com/octocat/{name}",
            "language": language,
            "stargazers_count": stars,
            "updated_at": updated_at,
            "topics": topics if topics is not None else [],
            "homepage": homepage,
            "fork": fork,
        }

    return _make


@pytest.fixture()
def profile_payload() -> dict[str, Any]:
    return {
        "login": "octocat",
        "name": "The Octocat",
        "bio": None,
        "location": "San Francisco",
        "blog": "https://github.blog",
        "public_repos": 8,
        "followers": 100,
        "following": 9,
        "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        "html_url": "https://github.com/octocat",
        "site_admin": False,
    }


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


class FakeGitHubClient:
    """Stands in for ``GitHubClient``; set ``error`` to make calls fail."""

    def __init__(self) -> None:
        self.repos: list[dict[str, Any]] = []
        self.profile: dict[str, Any] | None = None
        self.error: Exception | None = None
        self.repo_calls: list[tuple[str, int]] = []
        self.profile_calls: list[str] = []
        self.closed = False

    def list_repositories(
        self, account: str, per_page: int = 100
    ) -> list[UpstreamRepository]:
        self.repo_calls.append((account, per_page))
        if self.error is not None:
            raise self.error
        return [UpstreamRepository.model_validate(item) for item in self.repos]

    def get_profile(self, account: str) -> GitHubProfile:
        self.profile_calls.append(account)
        if self.error is not None:
            raise self.error
        assert self.profile is not None
        return GitHubProfile.model_validate(self.profile)

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture()
def repo_cache(fake_client: FakeGitHubClient, clock: FakeClock) -> RepositoryCache:
    return RepositoryCache(fake_client, clock=clock)  # type: ignore[arg-type]
