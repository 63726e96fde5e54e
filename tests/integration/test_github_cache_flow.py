"""End-to-end: FastAPI routes -> RepositoryCache -> GitHubClient over HTTP."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import pytest
from fastapi.testclient import TestClient

from repo_showcase.api.app import create_app
from repo_showcase.cache import DEFAULT_TTL_SECONDS, RepositoryCache
from repo_showcase.config import Settings
from repo_showcase.github import GitHubClient

if TYPE_CHECKING:
    from collections.abc import Callable

pytestmark = pytest.mark.integration


class _Upstream:
    """Scriptable GitHub stand-in served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.repos: list[dict[str, Any]] = []
        self.status = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"message": "Server Error"})
        return httpx.Response(200, json=self.repos)


def test_stale_listing_survives_upstream_outage(
    clock: Any, raw_repo: Callable[..., dict[str, Any]]
) -> None:
    upstream = _Upstream()
    upstream.repos = [
        raw_repo("seculearn", stars=0, description=None, language=None),
        raw_repo("dotfiles", stars=12),
        raw_repo("borrowed", stars=300, fork=True),
    ]
    client = GitHubClient(
        "ghp_test", client=httpx.Client(transport=httpx.MockTransport(upstream))
    )
    cache = RepositoryCache(client, clock=clock)
    settings = Settings()
    settings.github.account = "octocat"
    settings.scheduler.enabled = False

    with TestClient(create_app(settings, cache=cache)) as api:
        live = api.get("/api/github/repos").json()
        assert live["source"] == "live"
        assert [repo["name"] for repo in live["repos"]] == ["seculearn", "dotfiles"]
        assert live["repos"][0]["language"] == "Unknown"

        clock.advance(DEFAULT_TTL_SECONDS + 1)
        upstream.status = 502
        stale = api.get("/api/github/repos").json()
        assert stale["source"] == "stale"
        assert stale["repos"] == live["repos"]

        refreshed = api.post("/api/github/refresh").json()
        assert refreshed["source"] == "fallback"
        assert len(refreshed["repos"]) == 3

    assert len(upstream.requests) == 3
    assert all(
        request.headers["Authorization"] == "Bearer ghp_test"
        for request in upstream.requests
    )
