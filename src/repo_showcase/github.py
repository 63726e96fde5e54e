"""GitHub REST API adapter for repository listings and profiles."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from repo_showcase.exceptions import MalformedUpstreamResponse, UpstreamUnavailable
from repo_showcase.models import GitHubProfile, UpstreamRepository

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "repo-showcase"
DEFAULT_TIMEOUT_SECONDS = 10.0
MAX_PER_PAGE = 100


class GitHubClient:
    """Fetch repository listings and profiles for a GitHub account.

    Every failure is reported as one of two exceptions: network errors,
    timeouts and non-2xx responses raise ``UpstreamUnavailable``;
    bodies that are not JSON or not the expected shape raise
    ``MalformedUpstreamResponse``. No retries are attempted.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(timeout=timeout)
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def list_repositories(
        self, account: str, per_page: int = MAX_PER_PAGE
    ) -> list[UpstreamRepository]:
        """Return up to ``per_page`` repositories, most recently updated first.

        Items that are not objects or fail validation are skipped. A body
        that is not a JSON array, or a non-empty array with no valid item,
        is rejected as malformed.
        """
        payload = self._get_json(
            f"/users/{quote(account, safe='')}/repos",
            params={"sort": "updated", "per_page": min(per_page, MAX_PER_PAGE)},
        )
        if not isinstance(payload, list):
            raise MalformedUpstreamResponse(
                f"Expected a JSON array of repositories, got {type(payload).__name__}"
            )

        repos: list[UpstreamRepository] = []
        for item in payload:
            if not isinstance(item, dict):
                logger.warning(
                    "github_repository_skipped",
                    account=account,
                    item_type=type(item).__name__,
                )
                continue
            try:
                repos.append(UpstreamRepository.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "github_repository_skipped",
                    account=account,
                    repository=item.get("name"),
                    errors=exc.error_count(),
                )
        if payload and not repos:
            raise MalformedUpstreamResponse(
                f"None of the {len(payload)} repositories in the response were valid"
            )
        return repos

    def get_profile(self, account: str) -> GitHubProfile:
        payload = self._get_json(f"/users/{quote(account, safe='')}")
        if not isinstance(payload, dict):
            raise MalformedUpstreamResponse(
                f"Expected a JSON object for profile, got {type(payload).__name__}"
            )
        try:
            return GitHubProfile.model_validate(payload)
        except ValidationError as exc:
            raise MalformedUpstreamResponse(
                f"Profile response failed validation: {exc.error_count()} error(s)"
            ) from exc

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._client.get(url, headers=self._headers(), params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(f"GitHub API request timed out: {url}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"GitHub API request failed: {exc}") from exc

        if not response.is_success:
            message = f"GitHub API returned status {response.status_code}"
            remaining = response.headers.get("x-ratelimit-remaining")
            if remaining is not None and remaining.strip() == "0":
                message += " (rate limit exhausted)"
            raise UpstreamUnavailable(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                f"Failed to parse GitHub API response: {exc}"
            ) from exc
